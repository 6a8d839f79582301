from pydantic import BaseModel, ConfigDict, PositiveInt
from datetime import datetime
from typing import Optional, List
from app.models import RequestStatus
from app.schemas.book import BookSummary
from app.schemas.user import UserSummary

class BookRequestForm(BaseModel):
    book_id: PositiveInt

class BookRequestResponse(BaseModel):
    id: int
    book_id: int
    user_id: str
    status: RequestStatus
    request_date: datetime
    approved_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    return_date: Optional[datetime] = None
    book: Optional[BookSummary] = None
    model_config = ConfigDict(from_attributes=True)

class AdminBookRequestResponse(BookRequestResponse):
    user: Optional[UserSummary] = None

class BookRequestListResponse(BaseModel):
    requests: List[BookRequestResponse]

class AdminBookRequestListResponse(BaseModel):
    requests: List[AdminBookRequestResponse]

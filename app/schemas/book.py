from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator
from datetime import datetime
from typing import Optional, List
from app.models import RequestStatus

class BookBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    author: str = Field(min_length=1, max_length=100)
    isbn: str = Field(min_length=10, max_length=20, pattern=r'^[0-9Xx-]+$')
    genre: str = Field(min_length=1, max_length=50)
    publication_year: int = Field(ge=0, le=9999)
    quantity: NonNegativeInt = 1
    description: Optional[str] = None
    cover_image_url: Optional[str] = Field(default=None, max_length=500)

class BookCreate(BookBase):
    available_quantity: Optional[NonNegativeInt] = None

    @model_validator(mode='after')
    def check_available_quantity(self):
        if self.available_quantity is None:
            self.available_quantity = self.quantity
        if self.available_quantity > self.quantity:
            raise ValueError('available_quantity cannot exceed quantity')
        return self

class BookUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    author: Optional[str] = Field(default=None, min_length=1, max_length=100)
    isbn: Optional[str] = Field(default=None, min_length=10, max_length=20, pattern=r'^[0-9Xx-]+$')
    genre: Optional[str] = Field(default=None, min_length=1, max_length=50)
    publication_year: Optional[int] = Field(default=None, ge=0, le=9999)
    quantity: Optional[NonNegativeInt] = None
    available_quantity: Optional[NonNegativeInt] = None
    description: Optional[str] = None
    cover_image_url: Optional[str] = Field(default=None, max_length=500)

class BookResponse(BookBase):
    id: int
    available_quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class BookDetailResponse(BookResponse):
    # set for signed-in callers holding a pending or approved request
    my_request_status: Optional[RequestStatus] = None

class BookSummary(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    model_config = ConfigDict(from_attributes=True)

class BookListResponse(BaseModel):
    books: List[BookResponse]
    genres: List[str]
    search: Optional[str] = None
    genre: Optional[str] = None
    sort: Optional[str] = None

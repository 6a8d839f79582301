from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional, List

class UserBase(BaseModel):
    email: EmailStr

class UserCreate(UserBase):
    full_name: str = Field(min_length=3, max_length=50)
    password: str = Field(
        min_length=8,
        max_length=30,
        pattern=r'^[a-zA-Z0-9_@!]+$'
        )

class UserLogin(UserBase):
    password: str

class UserResponse(UserBase):
    user_uid: str
    full_name: str
    is_active: bool
    is_admin: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class UserSummary(BaseModel):
    user_uid: str
    full_name: str
    email: str

    model_config = ConfigDict(from_attributes=True)

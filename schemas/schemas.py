from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Annotated, Optional, List, Union
from datetime import datetime
from decimal import Decimal

from app.database import INTEGER_MAX, INTEGER_MIN

# ------------------- USER SCHEMAS -------------------

class UserBase(BaseModel):
    username: str = Field(..., min_length=1)
    email: EmailStr

class UserLogin(BaseModel):
    identifier: str  # username or email
    password: str

class UserCreate(UserBase):
    password: str = Field(..., min_length=1)

class ProfileUpdate(UserBase):
    pass

class UserResponse(UserBase):
    id: int
    role: str
    profile_pic_url: Optional[str] = None

    class Config:
        from_attributes = True

class ProfileResponse(BaseModel):
    username: str
    email: str
    profile_pic_url: Optional[str] = None

class TokenResponse(BaseModel):
    token: str

# ------------------- BOOK SCHEMAS -------------------

def _as_list(value):
    """Authors and genres arrive as one string or a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return value

class BookUpdate(BaseModel):
    title: str = Field(..., min_length=1)
    author: List[str] = []
    genre: List[str] = []
    price: Decimal = Field(..., ge=0)
    image_url: Optional[str] = None
    description: Optional[str] = None

    @field_validator("author", "genre", mode="before")
    @classmethod
    def coerce_list(cls, value):
        return _as_list(value)

class BookCreate(BookUpdate):
    isbn: str = Field(..., min_length=1)
    username: Optional[str] = None

class BookResponse(BaseModel):
    id: int
    isbn: str
    title: str
    author: str
    genre: str
    price: str
    image_url: Optional[str] = None
    description: Optional[str] = None
    username: Optional[str] = None

    class Config:
        from_attributes = True

    @field_validator("author", "genre", mode="before")
    @classmethod
    def join_list(cls, value: Union[str, List[str], None]):
        if isinstance(value, str):
            return value
        return ", ".join(value or [])

    @field_validator("price", mode="before")
    @classmethod
    def two_decimals(cls, value):
        return format(Decimal(str(value)), ".2f")

class BookIds(BaseModel):
    ids: List[Annotated[int, Field(ge=INTEGER_MIN, le=INTEGER_MAX)]] = Field(..., min_length=1)

# ------------------- REVIEW SCHEMAS -------------------

class ReviewCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

class ReviewResponse(BaseModel):
    review_id: int
    book_id: int
    content: str
    created_at: datetime
    likes: int
    username: str
    profile_pic_url: Optional[str] = None

class ReviewPage(BaseModel):
    reviews: List[ReviewResponse]
    totalReviews: int

class LikeResponse(BaseModel):
    success: bool
    updated: int

# ------------------- GENERIC RESPONSES -------------------

class MessageResponse(BaseModel):
    message: str

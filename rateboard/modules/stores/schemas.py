from pydantic import BaseModel, EmailStr, model_validator
from typing import Optional
from datetime import datetime


class StoreCreate(BaseModel):
    name: str
    email: EmailStr
    address: str
    owner_email: Optional[EmailStr] = None
    owner_id: Optional[str] = None

    @model_validator(mode="after")
    def require_owner(self):
        if not self.owner_email and not self.owner_id:
            raise ValueError("Either owner_email or owner_id is required")
        return self


class StoreUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    owner_id: Optional[str] = None  # system_admin only


class StoreResponse(BaseModel):
    id: str
    owner_id: str
    name: str
    email: str
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StoreRatingResponse(BaseModel):
    id: str
    name: str
    email: str
    address: str
    owner_id: str
    average_rating: float
    total_ratings: int
    user_rating: Optional[int] = None  # caller's own rating, when authenticated


class StoreFeedbackResponse(BaseModel):
    id: str
    rating: int
    created_at: Optional[datetime] = None
    user_id: str
    user_name: str
    user_email: str
    user_address: str

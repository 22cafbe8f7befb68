from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

MIN_RATING = 1
MAX_RATING = 5


class RatingSubmit(BaseModel):
    store_id: str
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)


class RatingUpdate(BaseModel):
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING)


class RatingResponse(BaseModel):
    id: str
    user_id: str
    store_id: str
    rating: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RatingSubmitResponse(BaseModel):
    rating: RatingResponse
    created: bool
    message: str

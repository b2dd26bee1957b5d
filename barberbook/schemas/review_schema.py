from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, max_length=1000, description="Review comment")


class ReviewResponse(ReviewCreate):
    id: str
    booking_id: str
    barber_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class ReviewWithDetails(ReviewResponse):
    customer_name: Optional[str] = None
    service_name: Optional[str] = None

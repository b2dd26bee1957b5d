from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import date, datetime
from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class BookingAction(str, Enum):
    accept = "accept"
    reject = "reject"
    complete = "complete"
    cancel = "cancel"


class CustomerBookingFilter(str, Enum):
    all = "all"
    upcoming = "upcoming"
    past = "past"


class BookingCheckout(BaseModel):
    barber_id: str = Field(..., description="Barber the services are booked with")
    services: Dict[str, int] = Field(..., description="Selected service id -> quantity")
    date: date
    time: str = Field(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$", examples=["14:00"])
    notes: str = Field("", max_length=1000)

    @field_validator('services')
    @classmethod
    def cart_must_not_be_empty(cls, v):
        if not v:
            raise ValueError('Select at least one service')
        for service_id, quantity in v.items():
            if quantity < 1:
                raise ValueError(f'quantity for {service_id} must be at least 1')
        return v


class BookingActionRequest(BaseModel):
    confirm: bool = Field(False, description="Explicit confirmation for destructive actions")


class BookingResponse(BaseModel):
    id: str
    customer_id: str
    barber_id: str
    service_id: str
    service_name: str
    service_price: float
    quantity: int
    date: date
    time: str
    status: BookingStatus
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BookingWithDetails(BookingResponse):
    shop_name: Optional[str] = None
    customer_name: Optional[str] = None
    reviewed: bool = False


class CheckoutResponse(BaseModel):
    bookings: List[BookingResponse]
    total_price: float
    total_items: int


class BarberBookingList(BaseModel):
    bookings: List[BookingWithDetails]
    counts: Dict[str, int]

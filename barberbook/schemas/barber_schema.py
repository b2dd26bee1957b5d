from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import date, datetime

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class BarberProfileIn(BaseModel):
    shop_name: str = Field(..., min_length=1, examples=["Fade Factory"])
    address: str = Field(..., min_length=1, examples=["12 King St, Newtown"])
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    contact: str = Field(..., min_length=1, examples=["+61 400 000 000"])
    open_time: str = Field("09:00", pattern=HHMM_PATTERN)
    close_time: str = Field("18:00", pattern=HHMM_PATTERN)

    @model_validator(mode='after')
    def close_time_must_be_after_open_time(self):
        # Zero-padded HH:MM strings order the same way as the times they encode
        if self.close_time <= self.open_time:
            raise ValueError('close_time must be after open_time')
        return self


class BarberResponse(BaseModel):
    id: str
    shop_name: str
    address: str
    latitude: float
    longitude: float
    contact: str
    open_time: str
    close_time: str
    images: List[str] = []
    rating: float
    total_ratings: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class BarberListItem(BarberResponse):
    distance_km: Optional[float] = None
    distance_label: Optional[str] = None


class BarberDirectoryResponse(BaseModel):
    barbers: List[BarberListItem]
    total: int
    location_known: bool
    location_error: Optional[str] = None


class TimeSlotBucket(BaseModel):
    label: str
    slots: List[str]


class AvailabilityResponse(BaseModel):
    barber_id: str
    date: date
    min_date: date
    max_date: date
    slots: List[str]
    buckets: List[TimeSlotBucket]


class RevenueByService(BaseModel):
    name: str
    count: int
    revenue: float


class RevenueResponse(BaseModel):
    period: str
    total_revenue: float
    total_bookings: int
    average_booking: float
    by_service: List[RevenueByService]

from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime


class ServiceBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Skin Fade"])
    description: str = Field("", examples=["Clipper fade finished with scissors on top"])
    price: float = Field(..., ge=0, examples=[30.0])
    duration_minutes: int = Field(..., gt=0, examples=[45])


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None


class ServiceResponse(ServiceBase):
    id: str
    barber_id: str
    image_url: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CartRequest(BaseModel):
    services: Dict[str, int] = Field(..., description="Selected service id -> quantity")

    @field_validator('services')
    @classmethod
    def quantities_must_be_positive(cls, v):
        for service_id, quantity in v.items():
            if quantity < 1:
                raise ValueError(f'quantity for {service_id} must be at least 1')
        return v


class CartQuoteLine(BaseModel):
    service_id: str
    name: str
    price: float
    quantity: int
    subtotal: float


class CartQuoteResponse(BaseModel):
    lines: List[CartQuoteLine]
    missing_service_ids: List[str]
    total_price: float
    total_items: int

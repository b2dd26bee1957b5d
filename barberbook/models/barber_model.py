from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, Integer, Boolean, DateTime, ForeignKey, JSON
from barberbook.database import Base
from sqlalchemy.orm import relationship


class Barber(Base):
    __tablename__ = "barbers"

    # The profile shares its id with the owning user
    id = Column(String(36), ForeignKey("users.id"), primary_key=True, index=True)
    shop_name = Column(String, nullable=False, index=True)
    address = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    contact = Column(String, nullable=False)
    open_time = Column(String(5), nullable=False, default="09:00")
    close_time = Column(String(5), nullable=False, default="18:00")
    images = Column(JSON, nullable=False, default=list)
    rating = Column(Float, nullable=False, default=0.0)
    total_ratings = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    owner = relationship("User", back_populates="barber_profile")
    services = relationship("Service", back_populates="barber")
    bookings = relationship("Booking", back_populates="barber")

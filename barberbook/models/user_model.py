from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Boolean
import uuid
from barberbook.database import Base
from sqlalchemy.orm import relationship


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=True)
    password_hash = Column(String(255), nullable=False)
    # customer or barber, fixed at sign-up
    role = Column(String, nullable=False, default="customer")
    status = Column(String, default="active")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    barber_profile = relationship("Barber", back_populates="owner", uselist=False)
    bookings = relationship("Booking", back_populates="customer")

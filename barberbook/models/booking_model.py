from datetime import datetime, timezone
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Integer, Numeric, Text
import uuid
from barberbook.database import Base
from sqlalchemy.orm import relationship


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    customer_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    barber_id = Column(String(36), ForeignKey("barbers.id"), nullable=False, index=True)
    # Not a foreign key: the service may be deleted later, the snapshot stays
    service_id = Column(String(36), nullable=False)
    service_name = Column(String, nullable=False)
    service_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    status = Column(String, default="pending")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    customer = relationship("User", back_populates="bookings")
    barber = relationship("Barber", back_populates="bookings")
    review = relationship("Review", back_populates="booking", uselist=False, cascade="all, delete-orphan")

from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, ForeignKey, Numeric, Integer, DateTime
import uuid
from barberbook.database import Base
from sqlalchemy.orm import relationship


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    barber_id = Column(String(36), ForeignKey("barbers.id"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    barber = relationship("Barber", back_populates="services")

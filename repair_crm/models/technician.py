"""
Technician model for database.
"""
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from repair_crm.database import Base, utcnow


class Technician(Base):
    """Technician database model."""

    __tablename__ = "technicians"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    specialization = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

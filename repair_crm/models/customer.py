"""
Customer model for database.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from repair_crm.database import Base, utcnow
import enum


class CommunicationPreference(str, enum.Enum):
    """How a customer wants to hear about their repairs."""
    SMS = "SMS"
    EMAIL = "Email"
    NONE = "None"


class Customer(Base):
    """Customer database model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=False, index=True)
    email = Column(String, nullable=True, index=True)
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    communication_preference = Column(
        SQLEnum(CommunicationPreference, values_callable=lambda e: [m.value for m in e]),
        default=CommunicationPreference.SMS,
        nullable=False,
    )
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    vehicles = relationship("Vehicle", back_populates="customer", lazy="selectin", order_by="Vehicle.id")

    @property
    def address(self):
        """Postal address as a mapping, or None when no part of it is set."""
        parts = {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip": self.zip_code,
        }
        if not any(parts.values()):
            return None
        return parts

    @address.setter
    def address(self, value):
        value = value or {}
        self.street = value.get("street")
        self.city = value.get("city")
        self.state = value.get("state")
        self.zip_code = value.get("zip")

    @property
    def full_address(self) -> str:
        return ", ".join(p for p in (self.street, self.city, self.state, self.zip_code) if p)

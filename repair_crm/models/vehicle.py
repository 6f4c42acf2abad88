"""
Vehicle model for database.
"""
from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from repair_crm.database import Base, utcnow


class Vehicle(Base):
    """Vehicle database model."""

    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    vin = Column(String, nullable=True, index=True)
    license_plate = Column(String, nullable=True, index=True)
    license_plate_state = Column(String, nullable=True)
    current_mileage = Column(Float, nullable=True)
    # Entries of {"date", "mileage", "source"}, oldest first
    mileage_history = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    customer = relationship("Customer", back_populates="vehicles", lazy="selectin")
    work_orders = relationship(
        "WorkOrder",
        back_populates="vehicle",
        lazy="selectin",
        order_by="desc(WorkOrder.date)",
    )

    @property
    def display_name(self) -> str:
        return f"{self.year} {self.make} {self.model}"

    @property
    def service_history(self) -> list[int]:
        return [work_order.id for work_order in self.work_orders]

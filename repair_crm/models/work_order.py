"""
Work order model for database.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from repair_crm.database import Base, utcnow
import enum


class WorkOrderStatus(str, enum.Enum):
    """Work order status enumeration."""
    CREATED = "Created"
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    INSPECTED_NEED_PARTS = "Inspected - Need Parts Ordered"
    PARTS_ORDERED = "Parts Ordered"
    PARTS_RECEIVED = "Parts Received"
    REPAIR_IN_PROGRESS = "Repair In Progress"
    COMPLETED_NEED_PAYMENT = "Completed - Need Payment"
    COMPLETED_PAID = "Completed - Paid"
    INVOICED = "Invoiced"
    ON_HOLD = "On Hold"
    CANCELLED = "Cancelled"


class WorkOrderPriority(str, enum.Enum):
    """Work order priority enumeration."""
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    URGENT = "Urgent"


# Entering one of these statuses notifies the customer
NOTIFIABLE_STATUSES = frozenset({
    WorkOrderStatus.INSPECTED_NEED_PARTS,
    WorkOrderStatus.PARTS_RECEIVED,
    WorkOrderStatus.REPAIR_IN_PROGRESS,
    WorkOrderStatus.COMPLETED_NEED_PAYMENT,
    WorkOrderStatus.COMPLETED_PAID,
})

# Statuses in which the actual total is settled
SETTLED_STATUSES = frozenset({
    WorkOrderStatus.COMPLETED_PAID,
    WorkOrderStatus.INVOICED,
})


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class WorkOrder(Base):
    """Work order database model."""

    __tablename__ = "work_orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    date = Column(DateTime(timezone=True), default=utcnow, index=True)
    priority = Column(
        SQLEnum(WorkOrderPriority, values_callable=_enum_values),
        default=WorkOrderPriority.NORMAL,
        nullable=False,
    )
    status = Column(
        SQLEnum(WorkOrderStatus, values_callable=_enum_values),
        default=WorkOrderStatus.CREATED,
        nullable=False,
        index=True,
    )
    # Line items are stored inline on the order
    services = Column(JSON, nullable=False, default=list)
    service_requested = Column(Text, nullable=True)
    parts = Column(JSON, nullable=False, default=list)
    labor = Column(JSON, nullable=False, default=list)
    diagnostic_notes = Column(Text, nullable=True)
    current_mileage = Column(Float, nullable=True)
    total_estimate = Column(Float, nullable=False, default=0.0)
    total_actual = Column(Float, nullable=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=True, index=True)
    assigned_technician_id = Column(Integer, ForeignKey("technicians.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    customer = relationship("Customer", lazy="selectin")
    vehicle = relationship("Vehicle", back_populates="work_orders", lazy="selectin")
    appointment = relationship("Appointment", back_populates="work_order", lazy="selectin")
    assigned_technician = relationship("Technician", lazy="selectin")

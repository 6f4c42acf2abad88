"""
Pydantic schemas for WorkOrder and invoices.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List, Optional
import json

from repair_crm.models.work_order import WorkOrderStatus, WorkOrderPriority
from repair_crm.schemas.customer import Address, CustomerSummary
from repair_crm.schemas.vehicle import VehicleSummary
from repair_crm.schemas.technician import TechnicianSummary


def _coerce_services(value):
    """
    Accept services as a list of lines, a list of plain strings, or a
    JSON-encoded string; any other string becomes a single line.
    """
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return [{"description": value}]
        if not isinstance(value, list):
            return [{"description": str(value)}]
    if isinstance(value, list):
        return [{"description": item} if isinstance(item, str) else item for item in value]
    return value


class ServiceLine(BaseModel):
    """One requested repair or service."""
    description: str


class Part(BaseModel):
    """A part used on a work order."""
    name: str = Field(..., min_length=1)
    part_number: Optional[str] = None
    quantity: float = Field(1, ge=0)
    price: float = Field(0, ge=0)
    ordered: bool = False
    received: bool = False
    vendor: Optional[str] = None
    purchase_order_number: Optional[str] = None


class LaborLine(BaseModel):
    """Labor charged on a work order."""
    description: str = Field(..., min_length=1)
    hours: float = Field(1, ge=0)
    rate: float = Field(75, ge=0)


class WorkOrderBase(BaseModel):
    """Base work order schema with common fields."""
    customer_id: int
    vehicle_id: int
    date: Optional[datetime] = None
    priority: WorkOrderPriority = WorkOrderPriority.NORMAL
    status: WorkOrderStatus = WorkOrderStatus.CREATED
    services: List[ServiceLine] = []
    service_requested: Optional[str] = None
    parts: List[Part] = []
    labor: List[LaborLine] = []
    diagnostic_notes: Optional[str] = None
    current_mileage: Optional[float] = Field(None, ge=0)
    appointment_id: Optional[int] = None
    assigned_technician_id: Optional[int] = None

    @field_validator("services", mode="before")
    @classmethod
    def coerce_services(cls, value):
        return _coerce_services(value)


class WorkOrderCreate(WorkOrderBase):
    """Schema for creating a work order."""
    pass


class WorkOrderUpdate(BaseModel):
    """Schema for updating a work order."""
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    date: Optional[datetime] = None
    priority: Optional[WorkOrderPriority] = None
    status: Optional[WorkOrderStatus] = None
    services: Optional[List[ServiceLine]] = None
    service_requested: Optional[str] = None
    parts: Optional[List[Part]] = None
    labor: Optional[List[LaborLine]] = None
    diagnostic_notes: Optional[str] = None
    current_mileage: Optional[float] = Field(None, ge=0)
    appointment_id: Optional[int] = None
    assigned_technician_id: Optional[int] = None

    @field_validator("services", mode="before")
    @classmethod
    def coerce_services(cls, value):
        return _coerce_services(value)


class WorkOrderStatusUpdate(BaseModel):
    """Schema for changing only the status of a work order."""
    status: Optional[WorkOrderStatus] = None


class WorkOrder(BaseModel):
    """Schema for work order responses."""
    id: int
    customer_id: int
    vehicle_id: int
    date: datetime
    priority: WorkOrderPriority
    status: WorkOrderStatus
    services: List[ServiceLine] = []
    service_requested: Optional[str] = None
    parts: List[Part] = []
    labor: List[LaborLine] = []
    diagnostic_notes: Optional[str] = None
    current_mileage: Optional[float] = None
    total_estimate: float = 0
    total_actual: Optional[float] = None
    appointment_id: Optional[int] = None
    assigned_technician_id: Optional[int] = None
    customer: Optional[CustomerSummary] = None
    vehicle: Optional[VehicleSummary] = None
    assigned_technician: Optional[TechnicianSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InvoiceCustomer(CustomerSummary):
    """Customer fields printed on an invoice."""
    address: Optional[Address] = None


class Invoice(BaseModel):
    """Invoice generated from a work order."""
    work_order_id: int
    customer: Optional[InvoiceCustomer] = None
    vehicle: Optional[VehicleSummary] = None
    assigned_technician: Optional[TechnicianSummary] = None
    date: datetime
    status: WorkOrderStatus
    parts: List[Part] = []
    labor: List[LaborLine] = []
    parts_cost: float
    labor_cost: float
    subtotal: float
    tax_rate: float
    tax: float
    total_cost: float
    total_with_tax: float

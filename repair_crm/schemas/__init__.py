"""
Pydantic schemas for request/response validation.
"""
from repair_crm.schemas.vehicle import (
    VehicleBase, VehicleCreate, VehicleUpdate, Vehicle, VehicleSummary, MileageEntry, MileageReading,
)
from repair_crm.schemas.customer import (
    Address, CustomerBase, CustomerCreate, CustomerUpdate, Customer, CustomerDetail, CustomerSummary, PhoneCheck,
)
from repair_crm.schemas.technician import (
    TechnicianBase, TechnicianCreate, TechnicianUpdate, Technician, TechnicianSummary,
)
from repair_crm.schemas.work_order import (
    ServiceLine, Part, LaborLine, WorkOrderBase, WorkOrderCreate, WorkOrderUpdate,
    WorkOrderStatusUpdate, WorkOrder, Invoice, InvoiceCustomer,
)
from repair_crm.schemas.appointment import AppointmentBase, AppointmentCreate, AppointmentUpdate, Appointment
from repair_crm.schemas.search import SearchResult, SearchResults

__all__ = [
    "VehicleBase", "VehicleCreate", "VehicleUpdate", "Vehicle", "VehicleSummary", "MileageEntry", "MileageReading",
    "Address", "CustomerBase", "CustomerCreate", "CustomerUpdate", "Customer", "CustomerDetail",
    "CustomerSummary", "PhoneCheck",
    "TechnicianBase", "TechnicianCreate", "TechnicianUpdate", "Technician", "TechnicianSummary",
    "ServiceLine", "Part", "LaborLine", "WorkOrderBase", "WorkOrderCreate", "WorkOrderUpdate",
    "WorkOrderStatusUpdate", "WorkOrder", "Invoice", "InvoiceCustomer",
    "AppointmentBase", "AppointmentCreate", "AppointmentUpdate", "Appointment",
    "SearchResult", "SearchResults",
]

"""
SQLAlchemy database models.
"""
from repair_crm.models.customer import Customer, CommunicationPreference
from repair_crm.models.vehicle import Vehicle
from repair_crm.models.technician import Technician
from repair_crm.models.work_order import WorkOrder, WorkOrderStatus, WorkOrderPriority
from repair_crm.models.appointment import Appointment, AppointmentStatus

__all__ = [
    "Customer", "CommunicationPreference",
    "Vehicle",
    "Technician",
    "WorkOrder", "WorkOrderStatus", "WorkOrderPriority",
    "Appointment", "AppointmentStatus",
]

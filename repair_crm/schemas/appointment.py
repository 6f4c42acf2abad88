"""
Pydantic schemas for Appointment.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime, timezone
from typing import Optional

from repair_crm.models.appointment import AppointmentStatus
from repair_crm.schemas.customer import CustomerSummary
from repair_crm.schemas.vehicle import VehicleSummary
from repair_crm.schemas.technician import TechnicianSummary


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so mixed inputs compare cleanly."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AppointmentBase(BaseModel):
    """Base appointment schema with common fields."""
    customer_id: int
    vehicle_id: int
    technician_id: Optional[int] = None
    service_type: str = Field(..., min_length=1)
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value):
        return as_utc(value).astimezone(timezone.utc)


class AppointmentCreate(AppointmentBase):
    """Schema for creating an appointment."""
    work_order_id: Optional[int] = None

    @model_validator(mode="after")
    def check_time_window(self):
        if as_utc(self.end_time) <= as_utc(self.start_time):
            raise ValueError("End time must be after start time")
        return self


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment."""
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    technician_id: Optional[int] = None
    service_type: Optional[str] = Field(None, min_length=1)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None
    work_order_id: Optional[int] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value):
        if value is None:
            return value
        return as_utc(value).astimezone(timezone.utc)


class Appointment(AppointmentBase):
    """Schema for appointment responses."""
    id: int
    work_order_id: Optional[int] = None
    customer: Optional[CustomerSummary] = None
    vehicle: Optional[VehicleSummary] = None
    technician: Optional[TechnicianSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

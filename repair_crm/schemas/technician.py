"""
Pydantic schemas for Technician.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class TechnicianBase(BaseModel):
    """Base technician schema with common fields."""
    name: str = Field(..., min_length=1)
    specialization: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    is_active: bool = True


class TechnicianCreate(TechnicianBase):
    """Schema for creating a technician."""
    pass


class TechnicianUpdate(BaseModel):
    """Schema for updating a technician."""
    name: Optional[str] = Field(None, min_length=1)
    specialization: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class Technician(TechnicianBase):
    """Schema for technician responses."""
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TechnicianSummary(BaseModel):
    """Technician fields embedded in other resources."""
    id: int
    name: str
    specialization: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

"""
Pydantic schemas for Vehicle.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List, Optional


def _check_year(year: Optional[int]) -> Optional[int]:
    if year is None:
        return year
    if year < 1900:
        raise ValueError("Year must be at least 1900")
    if year > datetime.now().year + 1:
        raise ValueError("Year cannot be in the future")
    return year


class MileageEntry(BaseModel):
    """One odometer reading in a vehicle's history."""
    date: datetime
    mileage: float
    source: Optional[str] = None


class MileageReading(BaseModel):
    """Schema for recording a new odometer reading."""
    mileage: float = Field(..., ge=0)
    date: Optional[datetime] = None
    source: Optional[str] = None


class VehicleBase(BaseModel):
    """Base vehicle schema with common fields."""
    customer_id: int
    year: int
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    vin: Optional[str] = None
    license_plate: Optional[str] = None
    license_plate_state: Optional[str] = None
    current_mileage: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("year")
    @classmethod
    def validate_year(cls, value):
        return _check_year(value)


class VehicleCreate(VehicleBase):
    """Schema for creating a vehicle."""
    pass


class VehicleUpdate(BaseModel):
    """Schema for updating a vehicle."""
    customer_id: Optional[int] = None
    year: Optional[int] = None
    make: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = Field(None, min_length=1)
    vin: Optional[str] = None
    license_plate: Optional[str] = None
    license_plate_state: Optional[str] = None
    current_mileage: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("year")
    @classmethod
    def validate_year(cls, value):
        return _check_year(value)


class Vehicle(VehicleBase):
    """Schema for vehicle responses."""
    id: int
    display_name: str
    mileage_history: List[MileageEntry] = []
    service_history: List[int] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VehicleSummary(BaseModel):
    """Vehicle fields embedded in other resources."""
    id: int
    year: int
    make: str
    model: str
    vin: Optional[str] = None
    license_plate: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

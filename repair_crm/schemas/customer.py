"""
Pydantic schemas for Customer.
"""
from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List, Optional
from repair_crm.models.customer import CommunicationPreference
from repair_crm.schemas.vehicle import Vehicle


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Address(BaseModel):
    """Postal address."""
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class CustomerBase(BaseModel):
    """Base customer schema with common fields."""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[Address] = None
    communication_preference: CommunicationPreference = CommunicationPreference.SMS
    notes: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value):
        return _blank_to_none(value)


class CustomerCreate(CustomerBase):
    """Schema for creating a customer."""
    pass


class CustomerUpdate(BaseModel):
    """Schema for updating a customer."""
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    address: Optional[Address] = None
    communication_preference: Optional[CommunicationPreference] = None
    notes: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value):
        return _blank_to_none(value)


class Customer(CustomerBase):
    """Schema for customer responses."""
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CustomerDetail(Customer):
    """Customer with the vehicles they own."""
    vehicles: List[Vehicle] = []


class CustomerSummary(BaseModel):
    """Customer fields embedded in other resources."""
    id: int
    name: str
    phone: str
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PhoneCheck(BaseModel):
    """Result of looking a customer up by phone number."""
    exists: bool
    customer: Optional[Customer] = None
    message: Optional[str] = None

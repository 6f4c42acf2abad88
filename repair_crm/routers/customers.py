"""
Customer routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List
import logging

from repair_crm.database import get_db, get_or_404
from repair_crm.errors import BadRequestError
from repair_crm.models.appointment import Appointment
from repair_crm.models.customer import Customer
from repair_crm.models.vehicle import Vehicle
from repair_crm.models.work_order import WorkOrder
from repair_crm.schemas.customer import (
    Customer as CustomerSchema,
    CustomerCreate,
    CustomerDetail,
    CustomerUpdate,
    PhoneCheck,
)
from repair_crm.schemas.vehicle import Vehicle as VehicleSchema
from repair_crm.services.search import find_customer_by_phone, search_customers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/", response_model=List[CustomerSchema])
async def get_customers(
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
):
    """
    Get all customers with pagination.
    """
    result = await db.execute(select(Customer).order_by(Customer.name).offset(skip).limit(limit))
    customers = result.scalars().all()
    return customers


@router.get("/search", response_model=List[CustomerSchema])
async def search(
    query: str = "",
    db: AsyncSession = Depends(get_db),
):
    """
    Search customers by name, email, address or phone number.
    """
    if not query.strip():
        raise BadRequestError("Please provide a search query")

    return await search_customers(db, query.strip())


@router.get("/check-phone", response_model=PhoneCheck)
async def check_existing_customer_by_phone(
    phone: str = "",
    db: AsyncSession = Depends(get_db),
):
    """
    Check whether a customer already exists with this phone number,
    with or without dashes.
    """
    if not phone.strip():
        raise BadRequestError("Please provide a phone number")

    customer = await find_customer_by_phone(db, phone.strip())
    if customer is None:
        return PhoneCheck(exists=False, message="No customer found with this phone number.")

    return PhoneCheck(exists=True, customer=CustomerSchema.model_validate(customer))


@router.get("/{customer_id}", response_model=CustomerDetail)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a specific customer by ID, with their vehicles.
    """
    return await get_or_404(db, Customer, customer_id, "customer")


@router.get("/{customer_id}/vehicles", response_model=List[VehicleSchema])
async def get_customer_vehicles(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get the vehicles owned by a customer.
    """
    await get_or_404(db, Customer, customer_id, "customer")

    result = await db.execute(
        select(Vehicle).where(Vehicle.customer_id == customer_id).order_by(Vehicle.id)
    )
    return result.scalars().all()


@router.post("/", response_model=CustomerSchema, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new customer.
    """
    db_customer = Customer(**customer.model_dump())
    db.add(db_customer)
    await db.commit()
    logger.info("Created customer #%s", db_customer.id)

    return await get_or_404(db, Customer, db_customer.id, "customer", refresh=True)


@router.put("/{customer_id}", response_model=CustomerSchema)
async def update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a customer.
    """
    db_customer = await get_or_404(db, Customer, customer_id, "customer")

    # Update only provided fields
    update_data = customer_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in ("name", "phone", "communication_preference"):
            continue
        if field == "address" and value is not None:
            # Address parts that were not sent keep their stored values
            value = {**(db_customer.address or {}), **value}
        setattr(db_customer, field, value)

    await db.commit()

    return await get_or_404(db, Customer, customer_id, "customer", refresh=True)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a customer. Customers who still own vehicles or have work orders
    or appointments on record cannot be deleted.
    """
    db_customer = await get_or_404(db, Customer, customer_id, "customer")

    vehicle_count = await db.scalar(
        select(func.count(Vehicle.id)).where(Vehicle.customer_id == customer_id)
    )
    if vehicle_count:
        raise BadRequestError(
            "This customer has associated vehicles. Please delete or reassign them first."
        )

    for model, label in ((WorkOrder, "work orders"), (Appointment, "appointments")):
        count = await db.scalar(select(func.count(model.id)).where(model.customer_id == customer_id))
        if count:
            raise BadRequestError(f"This customer has {label} on record. Please delete them first.")

    await db.delete(db_customer)
    await db.commit()
    logger.info("Deleted customer #%s", customer_id)

    return None

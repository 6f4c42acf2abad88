"""
Vehicle routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update
from typing import List, Optional
import logging

from repair_crm.database import get_db, get_or_404
from repair_crm.errors import BadRequestError
from repair_crm.models.appointment import Appointment
from repair_crm.models.customer import Customer
from repair_crm.models.vehicle import Vehicle
from repair_crm.models.work_order import WorkOrder
from repair_crm.schemas.vehicle import Vehicle as VehicleSchema, VehicleCreate, VehicleUpdate, MileageReading
from repair_crm.schemas.work_order import WorkOrder as WorkOrderSchema
from repair_crm.services.work_orders import record_mileage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("/", response_model=List[VehicleSchema])
async def get_vehicles(
    skip: int = 0,
    limit: int = 100,
    customer_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Get all vehicles with pagination and optional owner filter.
    """
    query = select(Vehicle)

    if customer_id is not None:
        query = query.where(Vehicle.customer_id == customer_id)

    result = await db.execute(query.order_by(Vehicle.id).offset(skip).limit(limit))
    vehicles = result.scalars().all()
    return vehicles


@router.get("/{vehicle_id}", response_model=VehicleSchema)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a specific vehicle by ID.
    """
    return await get_or_404(db, Vehicle, vehicle_id, "vehicle")


@router.get("/{vehicle_id}/service-history", response_model=List[WorkOrderSchema])
async def get_service_history(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get every work order recorded for a vehicle, newest first.
    """
    await get_or_404(db, Vehicle, vehicle_id, "vehicle")

    result = await db.execute(
        select(WorkOrder).where(WorkOrder.vehicle_id == vehicle_id).order_by(WorkOrder.date.desc())
    )
    return result.scalars().all()


@router.post("/", response_model=VehicleSchema, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle: VehicleCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new vehicle for an existing customer.
    """
    await get_or_404(db, Customer, vehicle.customer_id, "customer")

    db_vehicle = Vehicle(**vehicle.model_dump(), mileage_history=[])
    if vehicle.current_mileage is not None:
        record_mileage(db_vehicle, vehicle.current_mileage, source="Initial entry")

    db.add(db_vehicle)
    await db.commit()
    logger.info("Created vehicle #%s for customer #%s", db_vehicle.id, vehicle.customer_id)

    return await get_or_404(db, Vehicle, db_vehicle.id, "vehicle", refresh=True)


@router.put("/{vehicle_id}", response_model=VehicleSchema)
async def update_vehicle(
    vehicle_id: int,
    vehicle_update: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a vehicle. A new mileage reading is added to its history, and a
    new owner takes over the vehicle's work orders and appointments.
    """
    db_vehicle = await get_or_404(db, Vehicle, vehicle_id, "vehicle")

    # Update only provided fields
    update_data = vehicle_update.model_dump(exclude_unset=True)

    new_owner = update_data.get("customer_id")
    if new_owner is not None:
        await get_or_404(db, Customer, new_owner, "customer")

    new_mileage = update_data.pop("current_mileage", None)
    for field, value in update_data.items():
        if value is None and field in ("customer_id", "year", "make", "model"):
            continue
        setattr(db_vehicle, field, value)

    if new_mileage is not None and new_mileage != db_vehicle.current_mileage:
        record_mileage(db_vehicle, new_mileage, source="Manual update")

    if new_owner is not None:
        # The vehicle's records follow it to its new owner
        for model in (WorkOrder, Appointment):
            await db.execute(
                update(model).where(model.vehicle_id == vehicle_id).values(customer_id=new_owner)
            )

    await db.commit()

    return await get_or_404(db, Vehicle, vehicle_id, "vehicle", refresh=True)


@router.post("/{vehicle_id}/mileage", response_model=VehicleSchema)
async def add_mileage_reading(
    vehicle_id: int,
    reading: MileageReading,
    db: AsyncSession = Depends(get_db),
):
    """
    Record an odometer reading and make it the current mileage.
    """
    db_vehicle = await get_or_404(db, Vehicle, vehicle_id, "vehicle")

    record_mileage(db_vehicle, reading.mileage, when=reading.date, source=reading.source or "Manual entry")
    await db.commit()

    return await get_or_404(db, Vehicle, vehicle_id, "vehicle", refresh=True)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a vehicle. Vehicles with recorded work orders cannot be deleted.
    """
    db_vehicle = await get_or_404(db, Vehicle, vehicle_id, "vehicle")

    work_order_count = await db.scalar(
        select(func.count(WorkOrder.id)).where(WorkOrder.vehicle_id == vehicle_id)
    )
    if work_order_count:
        raise BadRequestError(
            "This vehicle has work orders on record. Please delete them first."
        )

    appointment_count = await db.scalar(
        select(func.count(Appointment.id)).where(Appointment.vehicle_id == vehicle_id)
    )
    if appointment_count:
        raise BadRequestError(
            "This vehicle has appointments on record. Please delete them first."
        )

    await db.delete(db_vehicle)
    await db.commit()
    logger.info("Deleted vehicle #%s", vehicle_id)

    return None

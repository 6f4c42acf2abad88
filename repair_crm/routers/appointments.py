"""
Appointment routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from datetime import datetime, timedelta, timezone
import logging

from repair_crm.database import get_db, get_or_404, utcnow
from repair_crm.errors import BadRequestError
from repair_crm.models.appointment import Appointment, AppointmentStatus
from repair_crm.models.technician import Technician
from repair_crm.models.work_order import WorkOrder, WorkOrderStatus
from repair_crm.schemas.appointment import (
    Appointment as AppointmentSchema,
    AppointmentCreate,
    AppointmentUpdate,
    as_utc,
)
from repair_crm.services.work_orders import check_ownership

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


async def _link_work_order(db: AsyncSession, appointment: Appointment, work_order_id: int) -> None:
    """
    Attach a work order to the appointment. The work order picks up the
    appointment's technician and counts as scheduled from now on.
    """
    work_order = await get_or_404(db, WorkOrder, work_order_id, "work order")

    if work_order.vehicle_id != appointment.vehicle_id:
        raise BadRequestError("The work order is for a different vehicle")

    appointment.work_order = work_order
    if appointment.technician_id is not None:
        work_order.assigned_technician_id = appointment.technician_id
    if work_order.status == WorkOrderStatus.CREATED:
        work_order.status = WorkOrderStatus.SCHEDULED


@router.get("/", response_model=List[AppointmentSchema])
async def get_appointments(
    skip: int = 0,
    limit: int = 100,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    technician_id: Optional[int] = None,
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get appointments in start order, optionally filtered by date range,
    technician and status.
    """
    query = select(Appointment)

    if start_date:
        query = query.where(Appointment.start_time >= start_date)
    if end_date:
        query = query.where(Appointment.start_time <= end_date)
    if technician_id is not None:
        query = query.where(Appointment.technician_id == technician_id)
    if status_filter:
        query = query.where(Appointment.status == status_filter)

    result = await db.execute(query.order_by(Appointment.start_time).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/today", response_model=List[AppointmentSchema])
async def get_today_appointments(
    db: AsyncSession = Depends(get_db),
):
    """
    Get the appointments starting today (UTC).
    """
    today = utcnow().date()
    start = datetime(today.year, today.month, today.day, tzinfo=timezone.utc)

    result = await db.execute(
        select(Appointment)
        .where(Appointment.start_time >= start, Appointment.start_time < start + timedelta(days=1))
        .order_by(Appointment.start_time)
    )
    return result.scalars().all()


@router.get("/{appointment_id}", response_model=AppointmentSchema)
async def get_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a specific appointment by ID.
    """
    return await get_or_404(db, Appointment, appointment_id, "appointment")


@router.post("/", response_model=AppointmentSchema, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment: AppointmentCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Book an appointment, optionally linking an existing work order to it.
    """
    await check_ownership(db, appointment.customer_id, appointment.vehicle_id)
    if appointment.technician_id is not None:
        await get_or_404(db, Technician, appointment.technician_id, "technician")

    data = appointment.model_dump(exclude={"work_order_id"})
    db_appointment = Appointment(**data)
    db.add(db_appointment)

    if appointment.work_order_id is not None:
        await _link_work_order(db, db_appointment, appointment.work_order_id)

    await db.commit()
    logger.info("Booked appointment #%s for vehicle #%s", db_appointment.id, appointment.vehicle_id)

    return await get_or_404(db, Appointment, db_appointment.id, "appointment", refresh=True)


@router.put("/{appointment_id}", response_model=AppointmentSchema)
async def update_appointment(
    appointment_id: int,
    appointment_update: AppointmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update an appointment.
    """
    db_appointment = await get_or_404(db, Appointment, appointment_id, "appointment")

    update_data = {
        field: value
        for field, value in appointment_update.model_dump(exclude_unset=True).items()
        if value is not None or field in ("technician_id", "notes")
    }
    work_order_id = update_data.pop("work_order_id", None)

    start_time = update_data.get("start_time", db_appointment.start_time)
    end_time = update_data.get("end_time", db_appointment.end_time)
    if as_utc(end_time) <= as_utc(start_time):
        raise BadRequestError("End time must be after start time")

    if "customer_id" in update_data or "vehicle_id" in update_data:
        await check_ownership(
            db,
            update_data.get("customer_id", db_appointment.customer_id),
            update_data.get("vehicle_id", db_appointment.vehicle_id),
        )
    if update_data.get("technician_id") is not None:
        await get_or_404(db, Technician, update_data["technician_id"], "technician")

    for field, value in update_data.items():
        setattr(db_appointment, field, value)

    if work_order_id is not None:
        await _link_work_order(db, db_appointment, work_order_id)
    elif "technician_id" in update_data and db_appointment.work_order is not None:
        db_appointment.work_order.assigned_technician_id = db_appointment.technician_id

    await db.commit()

    return await get_or_404(db, Appointment, appointment_id, "appointment", refresh=True)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete an appointment. A linked work order is kept but unlinked.
    """
    db_appointment = await get_or_404(db, Appointment, appointment_id, "appointment")

    if db_appointment.work_order is not None:
        db_appointment.work_order.appointment_id = None

    await db.delete(db_appointment)
    await db.commit()
    logger.info("Deleted appointment #%s", appointment_id)

    return None

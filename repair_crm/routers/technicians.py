"""
Technician routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from typing import List
import logging

from repair_crm.database import get_db, get_or_404
from repair_crm.models.appointment import Appointment
from repair_crm.models.technician import Technician
from repair_crm.models.work_order import WorkOrder
from repair_crm.schemas.technician import Technician as TechnicianSchema, TechnicianCreate, TechnicianUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/technicians", tags=["technicians"])


@router.get("/", response_model=List[TechnicianSchema])
async def get_technicians(
    skip: int = 0,
    limit: int = 100,
    active_only: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """
    Get all technicians with pagination.
    """
    query = select(Technician)

    if active_only:
        query = query.where(Technician.is_active.is_(True))

    result = await db.execute(query.order_by(Technician.name).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/{technician_id}", response_model=TechnicianSchema)
async def get_technician(
    technician_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a specific technician by ID.
    """
    return await get_or_404(db, Technician, technician_id, "technician")


@router.post("/", response_model=TechnicianSchema, status_code=status.HTTP_201_CREATED)
async def create_technician(
    technician: TechnicianCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new technician.
    """
    db_technician = Technician(**technician.model_dump())
    db.add(db_technician)
    await db.commit()

    return await get_or_404(db, Technician, db_technician.id, "technician", refresh=True)


@router.put("/{technician_id}", response_model=TechnicianSchema)
async def update_technician(
    technician_id: int,
    technician_update: TechnicianUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update a technician.
    """
    db_technician = await get_or_404(db, Technician, technician_id, "technician")

    update_data = technician_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in ("name", "is_active"):
            continue
        setattr(db_technician, field, value)

    await db.commit()

    return await get_or_404(db, Technician, technician_id, "technician", refresh=True)


@router.delete("/{technician_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_technician(
    technician_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a technician and clear their appointment and work order assignments.
    """
    db_technician = await get_or_404(db, Technician, technician_id, "technician")

    await db.execute(
        update(Appointment).where(Appointment.technician_id == technician_id).values(technician_id=None)
    )
    await db.execute(
        update(WorkOrder)
        .where(WorkOrder.assigned_technician_id == technician_id)
        .values(assigned_technician_id=None)
    )
    await db.delete(db_technician)
    await db.commit()
    logger.info("Deleted technician #%s", technician_id)

    return None

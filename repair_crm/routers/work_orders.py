"""
Work order routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional
from datetime import datetime
import logging

from repair_crm.config import Settings
from repair_crm.database import get_db, get_or_404
from repair_crm.dependencies import get_app_settings
from repair_crm.errors import BadRequestError
from repair_crm.models.work_order import WorkOrder, WorkOrderStatus
from repair_crm.schemas.work_order import (
    Invoice,
    LaborLine,
    Part,
    WorkOrder as WorkOrderSchema,
    WorkOrderCreate,
    WorkOrderStatusUpdate,
    WorkOrderUpdate,
)
from repair_crm.services import work_orders as pipeline
from repair_crm.services.notifications import StatusNotifier, get_notifier
from repair_crm.services.search import search_work_orders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/work-orders", tags=["work orders"])


async def _reload(db: AsyncSession, work_order_id: int) -> WorkOrder:
    return await get_or_404(db, WorkOrder, work_order_id, "work order", refresh=True)


@router.get("/", response_model=List[WorkOrderSchema])
async def get_work_orders(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[WorkOrderStatus] = Query(None, alias="status"),
    customer_id: Optional[int] = None,
    vehicle_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Get work orders, newest first, optionally filtered by status, customer,
    vehicle and date range.
    """
    query = select(WorkOrder)

    if status_filter:
        query = query.where(WorkOrder.status == status_filter)
    if customer_id is not None:
        query = query.where(WorkOrder.customer_id == customer_id)
    if vehicle_id is not None:
        query = query.where(WorkOrder.vehicle_id == vehicle_id)
    if start_date:
        query = query.where(WorkOrder.date >= start_date)
    if end_date:
        query = query.where(WorkOrder.date <= end_date)

    result = await db.execute(query.order_by(WorkOrder.date.desc()).offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/search", response_model=List[WorkOrderSchema])
async def search(
    query: str = "",
    db: AsyncSession = Depends(get_db),
):
    """
    Search work orders by requested services, status or diagnostic notes.
    """
    if not query.strip():
        raise BadRequestError("Please provide a search query")

    return await search_work_orders(db, query.strip())


@router.get("/status/{work_order_status}", response_model=List[WorkOrderSchema])
async def get_work_orders_by_status(
    work_order_status: WorkOrderStatus,
    db: AsyncSession = Depends(get_db),
):
    """
    Get every work order in a status, newest first.
    """
    result = await db.execute(
        select(WorkOrder).where(WorkOrder.status == work_order_status).order_by(WorkOrder.date.desc())
    )
    return result.scalars().all()


@router.get("/{work_order_id}", response_model=WorkOrderSchema)
async def get_work_order(
    work_order_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Get a specific work order by ID.
    """
    return await get_or_404(db, WorkOrder, work_order_id, "work order")


@router.post("/", response_model=WorkOrderSchema, status_code=status.HTTP_201_CREATED)
async def create_work_order(
    work_order: WorkOrderCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a new work order.

    The vehicle must belong to the customer. Totals are derived from the
    parts and labor, and a supplied odometer reading is added to the
    vehicle's mileage history.
    """
    db_work_order = await pipeline.apply_create(db, work_order.model_dump())
    await db.commit()

    return await _reload(db, db_work_order.id)


@router.put("/{work_order_id}", response_model=WorkOrderSchema)
async def update_work_order(
    work_order_id: int,
    work_order_update: WorkOrderUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: StatusNotifier = Depends(get_notifier),
):
    """
    Update a work order.

    Moving to a status the customer cares about sends them a notification
    once the change is saved.
    """
    db_work_order = await get_or_404(db, WorkOrder, work_order_id, "work order")

    notify = await pipeline.apply_update(db, db_work_order, work_order_update.model_dump(exclude_unset=True))
    await db.commit()

    db_work_order = await _reload(db, work_order_id)
    if notify:
        await notifier.notify_status_change(db_work_order)

    return db_work_order


@router.patch("/{work_order_id}/status", response_model=WorkOrderSchema)
async def update_status(
    work_order_id: int,
    status_update: WorkOrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    notifier: StatusNotifier = Depends(get_notifier),
):
    """
    Change the status of a work order.
    """
    if status_update.status is None:
        raise BadRequestError("Please provide a status")

    db_work_order = await get_or_404(db, WorkOrder, work_order_id, "work order")

    notify = pipeline.apply_status(db_work_order, status_update.status)
    await db.commit()

    db_work_order = await _reload(db, work_order_id)
    if notify:
        await notifier.notify_status_change(db_work_order)

    return db_work_order


@router.post("/{work_order_id}/parts", response_model=WorkOrderSchema)
async def add_part(
    work_order_id: int,
    part: Part,
    db: AsyncSession = Depends(get_db),
):
    """
    Add a part to a work order.
    """
    db_work_order = await get_or_404(db, WorkOrder, work_order_id, "work order")

    pipeline.add_line(db_work_order, "parts", part.model_dump())
    await db.commit()

    return await _reload(db, work_order_id)


@router.post("/{work_order_id}/labor", response_model=WorkOrderSchema)
async def add_labor(
    work_order_id: int,
    labor: LaborLine,
    db: AsyncSession = Depends(get_db),
):
    """
    Add a labor line to a work order.
    """
    db_work_order = await get_or_404(db, WorkOrder, work_order_id, "work order")

    pipeline.add_line(db_work_order, "labor", labor.model_dump())
    await db.commit()

    return await _reload(db, work_order_id)


@router.get("/{work_order_id}/invoice", response_model=Invoice)
async def generate_invoice(
    work_order_id: int,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """
    Build the invoice for a work order.
    """
    db_work_order = await get_or_404(db, WorkOrder, work_order_id, "work order")

    parts_cost = pipeline.parts_cost(db_work_order.parts)
    labor_cost = pipeline.labor_cost(db_work_order.labor)
    subtotal = round(parts_cost + labor_cost, 2)
    tax = round(subtotal * settings.tax_rate, 2)

    return Invoice.model_validate(
        {
            "work_order_id": db_work_order.id,
            "customer": db_work_order.customer,
            "vehicle": db_work_order.vehicle,
            "assigned_technician": db_work_order.assigned_technician,
            "date": db_work_order.date,
            "status": db_work_order.status,
            "parts": db_work_order.parts,
            "labor": db_work_order.labor,
            "parts_cost": parts_cost,
            "labor_cost": labor_cost,
            "subtotal": subtotal,
            "tax_rate": settings.tax_rate,
            "tax": tax,
            "total_cost": subtotal,
            "total_with_tax": round(subtotal + tax, 2),
        },
        from_attributes=True,
    )


@router.delete("/{work_order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work_order(
    work_order_id: int,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete a work order, removing it from its vehicle's service history.
    """
    db_work_order = await get_or_404(db, WorkOrder, work_order_id, "work order")

    await db.delete(db_work_order)
    await db.commit()
    logger.info("Deleted work order #%s", work_order_id)

    return None

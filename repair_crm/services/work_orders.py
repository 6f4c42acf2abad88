"""
Work order side effects.

A write to a work order runs the same short pipeline every time:

1. status transition detection (does the customer need to hear about it?)
2. service line sync (``services`` <-> ``service_requested``)
3. totals recalculation from parts and labor
4. vehicle mileage sync
5. assigned technician sync from a linked appointment

Routers own loading and committing; the functions here only mutate the
records they are given.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from repair_crm.database import get_or_404, utcnow
from repair_crm.errors import BadRequestError
from repair_crm.models.appointment import Appointment
from repair_crm.models.customer import Customer
from repair_crm.models.technician import Technician
from repair_crm.models.vehicle import Vehicle
from repair_crm.models.work_order import (
    NOTIFIABLE_STATUSES,
    SETTLED_STATUSES,
    WorkOrder,
    WorkOrderStatus,
)

logger = logging.getLogger(__name__)

# Fields a partial update may explicitly clear
CLEARABLE_FIELDS = frozenset({
    "diagnostic_notes",
    "current_mileage",
    "appointment_id",
    "assigned_technician_id",
})


def parts_cost(parts) -> float:
    return round(sum(part["price"] * part["quantity"] for part in parts or []), 2)


def labor_cost(labor) -> float:
    return round(sum(line["hours"] * line["rate"] for line in labor or []), 2)


def split_service_requested(text: Optional[str]) -> list[dict]:
    """One service line per non-blank line of text."""
    return [{"description": line.strip()} for line in (text or "").split("\n") if line.strip()]


def join_services(services) -> str:
    return "\n".join(service["description"] for service in services or [])


def sync_service_lines(data: dict) -> dict:
    """
    Keep ``services`` and ``service_requested`` consistent within a payload.

    A non-empty services list wins; otherwise service_requested is split into
    lines. An explicitly empty list with no text clears both.
    """
    services = data.get("services")
    requested = data.get("service_requested")

    if services:
        data["service_requested"] = join_services(services)
    elif requested is not None:
        data["services"] = split_service_requested(requested)
        data["service_requested"] = join_services(data["services"])
    elif "services" in data:
        data["services"] = []
        data["service_requested"] = ""

    return data


def recalculate_totals(work_order: WorkOrder) -> None:
    """Derive the estimate, and the actual once settled, from the line items."""
    total = round(parts_cost(work_order.parts) + labor_cost(work_order.labor), 2)
    work_order.total_estimate = total
    if work_order.status in SETTLED_STATUSES:
        work_order.total_actual = total


def needs_notification(old_status: Optional[WorkOrderStatus], new_status: WorkOrderStatus) -> bool:
    return old_status != new_status and new_status in NOTIFIABLE_STATUSES


def _entry_day(value):
    if isinstance(value, datetime):
        return value.date()
    return datetime.fromisoformat(str(value)).date()


def record_mileage(
    vehicle: Vehicle,
    mileage: float,
    when: Optional[datetime] = None,
    source: Optional[str] = None,
    dedupe: bool = False,
) -> bool:
    """
    Append an odometer reading to the vehicle and make it the current mileage.

    With dedupe=True nothing is appended when an entry with the same mileage,
    day and source already exists. Returns whether an entry was appended.
    """
    when = when or utcnow()
    history = list(vehicle.mileage_history or [])

    duplicate = dedupe and any(
        entry.get("mileage") == mileage
        and entry.get("source") == source
        and _entry_day(entry.get("date")) == when.date()
        for entry in history
    )
    if not duplicate:
        history.append({"date": when.isoformat(), "mileage": mileage, "source": source})
        # Assign a new list so the JSON column is flagged as changed
        vehicle.mileage_history = history

    vehicle.current_mileage = mileage
    return not duplicate


def work_order_source(work_order_id: int) -> str:
    return f"Work Order #{work_order_id}"


async def check_ownership(db: AsyncSession, customer_id: int, vehicle_id: int) -> Vehicle:
    """Both records must exist and the vehicle must belong to the customer."""
    vehicle = await get_or_404(db, Vehicle, vehicle_id, "vehicle")
    customer = await get_or_404(db, Customer, customer_id, "customer")

    if vehicle.customer_id != customer.id:
        raise BadRequestError("The vehicle does not belong to this customer")

    return vehicle


async def sync_assigned_technician(db: AsyncSession, work_order: WorkOrder) -> None:
    """A linked appointment's technician becomes the work order's technician."""
    if work_order.assigned_technician_id is not None:
        await get_or_404(db, Technician, work_order.assigned_technician_id, "technician")

    if work_order.appointment_id is None:
        return

    appointment = await get_or_404(db, Appointment, work_order.appointment_id, "appointment")
    if appointment.technician_id is not None:
        work_order.assigned_technician_id = appointment.technician_id


async def apply_create(db: AsyncSession, data: dict) -> WorkOrder:
    """
    Build and flush a new work order, then sync its vehicle.
    The caller commits.
    """
    vehicle = await check_ownership(db, data["customer_id"], data["vehicle_id"])

    sync_service_lines(data)
    data.setdefault("services", [])
    data.setdefault("service_requested", join_services(data["services"]))
    if data.get("date") is None:
        data["date"] = utcnow()

    work_order = WorkOrder(**data)
    recalculate_totals(work_order)
    await sync_assigned_technician(db, work_order)

    db.add(work_order)
    # The mileage source needs the new id
    await db.flush()

    if work_order.current_mileage is not None:
        record_mileage(
            vehicle,
            work_order.current_mileage,
            when=work_order.date,
            source=work_order_source(work_order.id),
        )

    logger.info("Created work order #%s for vehicle #%s", work_order.id, vehicle.id)
    return work_order


async def apply_update(db: AsyncSession, work_order: WorkOrder, data: dict) -> bool:
    """
    Apply a partial update to a loaded work order.
    Returns whether the customer should be notified once the write commits.
    """
    data = {k: v for k, v in data.items() if v is not None or k in CLEARABLE_FIELDS}
    old_status = work_order.status

    if "customer_id" in data or "vehicle_id" in data:
        await check_ownership(
            db,
            data.get("customer_id", work_order.customer_id),
            data.get("vehicle_id", work_order.vehicle_id),
        )

    sync_service_lines(data)
    for field, value in data.items():
        setattr(work_order, field, value)

    notify = needs_notification(old_status, work_order.status)
    if notify:
        logger.info(
            "Work order #%s moved from '%s' to '%s'",
            work_order.id,
            old_status.value if old_status else None,
            work_order.status.value,
        )

    recalculate_totals(work_order)

    if data.get("current_mileage") is not None:
        vehicle = await get_or_404(db, Vehicle, work_order.vehicle_id, "vehicle")
        record_mileage(
            vehicle,
            data["current_mileage"],
            when=data.get("date") or utcnow(),
            source=work_order_source(work_order.id),
            dedupe=True,
        )

    await sync_assigned_technician(db, work_order)
    return notify


def apply_status(work_order: WorkOrder, status: WorkOrderStatus) -> bool:
    """Change only the status; returns whether the customer should be notified."""
    old_status = work_order.status
    work_order.status = status
    recalculate_totals(work_order)
    return needs_notification(old_status, status)


def add_line(work_order: WorkOrder, field: str, line: dict) -> None:
    """Append a part or labor line and refresh the totals."""
    setattr(work_order, field, list(getattr(work_order, field) or []) + [line])
    recalculate_totals(work_order)

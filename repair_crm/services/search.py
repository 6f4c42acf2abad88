"""
Search helpers shared by the customer, work order and global search endpoints.
"""
import json
import re
from datetime import datetime, timedelta, timezone

from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from repair_crm.models.customer import Customer
from repair_crm.models.vehicle import Vehicle
from repair_crm.models.work_order import WorkOrder, WorkOrderStatus

PER_TYPE_LIMIT = 10
DATE_MATCH_LIMIT = 5
PHONE_MATCH_LIMIT = 5
MAX_RESULTS = 20

TYPE_ORDER = {"customer": 1, "vehicle": 2, "workorder": 3}

PHONE_LIKE = re.compile(r"[\d\-\(\)\s\+]+")


def normalize_phone(phone: str) -> str:
    """Strip everything but digits."""
    return re.sub(r"\D", "", phone or "")


def phone_variations(query: str) -> list[str]:
    """
    The query plus its other common spelling: digits only when it has dashes,
    otherwise the XXX-XXX-XXXX form when it has enough characters.
    """
    variations = [query]
    if "-" in query:
        variations.append(normalize_phone(query))
    else:
        formatted = f"{query[0:3]}-{query[3:6]}-{query[6:10]}"
        if len(formatted) == 12:
            variations.append(formatted)
    return variations


def matching_statuses(query: str) -> list[WorkOrderStatus]:
    needle = query.lower()
    return [status for status in WorkOrderStatus if needle in status.value.lower()]


def _status_clause(query: str):
    statuses = matching_statuses(query)
    return WorkOrder.status.in_(statuses) if statuses else None


def _any_of(*clauses):
    return or_(*[clause for clause in clauses if clause is not None])


def _json_text_clause(column, query: str):
    """
    Coarse filter on a JSON column's serialized text. It also matches key
    names and numbers, so rows it lets through are re-checked with
    work_order_matches.
    """
    text = cast(column, String)
    # Non-ASCII text is stored as \uXXXX escapes
    escaped = json.dumps(query.lower())[1:-1]
    return _any_of(
        text.icontains(query, autoescape=True),
        text.icontains(escaped, autoescape=True) if escaped != query.lower() else None,
    )


def _line_texts(work_order: WorkOrder, line_items: bool):
    for service in work_order.services or []:
        yield service.get("description")
    if line_items:
        for part in work_order.parts or []:
            yield part.get("name")
            yield part.get("part_number")
        for line in work_order.labor or []:
            yield line.get("description")


def work_order_matches(work_order: WorkOrder, query: str, line_items: bool = False) -> bool:
    """
    Case-insensitive substring match on the searchable text of a work order:
    requested services, diagnostic notes, status and service descriptions,
    plus part names, part numbers and labor descriptions with line_items=True.
    """
    needle = query.lower()
    texts = [work_order.service_requested, work_order.diagnostic_notes, work_order.status.value]
    texts.extend(_line_texts(work_order, line_items))
    return any(needle in text.lower() for text in texts if text)


async def search_customers(db: AsyncSession, query: str, limit: int = None) -> list[Customer]:
    """Name, email, street, city or any phone variation."""
    phone_clauses = [Customer.phone.icontains(v, autoescape=True) for v in phone_variations(query) if v]
    stmt = select(Customer).where(
        _any_of(
            Customer.name.icontains(query, autoescape=True),
            Customer.email.icontains(query, autoescape=True),
            Customer.street.icontains(query, autoescape=True),
            Customer.city.icontains(query, autoescape=True),
            *phone_clauses,
        )
    ).order_by(Customer.name)
    if limit:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def find_customer_by_phone(db: AsyncSession, phone: str):
    result = await db.execute(
        select(Customer).where(Customer.phone.in_(phone_variations(phone))).limit(1)
    )
    return result.scalar_one_or_none()


async def search_work_orders(db: AsyncSession, query: str) -> list[WorkOrder]:
    """Requested services, service lines, status and diagnostic notes."""
    stmt = select(WorkOrder).where(
        _any_of(
            WorkOrder.service_requested.icontains(query, autoescape=True),
            _json_text_clause(WorkOrder.services, query),
            WorkOrder.diagnostic_notes.icontains(query, autoescape=True),
            _status_clause(query),
        )
    ).order_by(WorkOrder.date.desc())
    result = await db.execute(stmt)
    return [w for w in result.scalars().all() if work_order_matches(w, query)]


def _customer_hit(customer: Customer) -> dict:
    return {
        "type": "customer",
        "id": customer.id,
        "title": customer.name,
        "subtitle": customer.phone,
        "description": customer.email or customer.full_address or "No additional info",
    }


def _vehicle_hit(vehicle: Vehicle) -> dict:
    details = []
    if vehicle.vin:
        details.append(f"VIN: {vehicle.vin}")
    if vehicle.license_plate:
        details.append(f"License: {vehicle.license_plate}")
    return {
        "type": "vehicle",
        "id": vehicle.id,
        "title": vehicle.display_name,
        "subtitle": f"Owner: {vehicle.customer.name}" if vehicle.customer else "Unknown Owner",
        "description": " ".join(details),
    }


def _work_order_hit(work_order: WorkOrder, description: str = None) -> dict:
    vehicle = work_order.vehicle
    customer_name = work_order.customer.name if work_order.customer else "Unknown Customer"
    return {
        "type": "workorder",
        "id": work_order.id,
        "title": f"Work Order - {customer_name}",
        "subtitle": vehicle.display_name if vehicle else "No vehicle",
        "description": description or work_order.service_requested or "No service description",
    }


def _parse_date(query: str):
    if len(query) <= 5:
        return None
    try:
        return datetime.fromisoformat(query)
    except ValueError:
        return None


async def global_search(db: AsyncSession, raw_query: str) -> list[dict]:
    """
    Search customers, vehicles and work orders at once.

    Customers come first, then vehicles, then work orders; within a type,
    hits whose title contains the query lead. Phone-like queries pull phone
    matches to the front of the customers, and date-like queries add the work
    orders created that day.
    """
    query = (raw_query or "").strip()
    if not query:
        return []

    results = []

    customers = await db.execute(
        select(Customer).where(
            _any_of(
                Customer.name.icontains(query, autoescape=True),
                Customer.phone.icontains(query, autoescape=True),
                Customer.email.icontains(query, autoescape=True),
                Customer.street.icontains(query, autoescape=True),
                Customer.city.icontains(query, autoescape=True),
                Customer.state.icontains(query, autoescape=True),
                Customer.zip_code.icontains(query, autoescape=True),
                Customer.notes.icontains(query, autoescape=True),
            )
        ).order_by(Customer.id).limit(PER_TYPE_LIMIT)
    )
    results.extend(_customer_hit(c) for c in customers.scalars().all())

    vehicles = await db.execute(
        select(Vehicle).where(
            _any_of(
                Vehicle.make.icontains(query, autoescape=True),
                Vehicle.model.icontains(query, autoescape=True),
                Vehicle.year == int(query) if query.isdigit() else None,
                Vehicle.vin.icontains(query, autoescape=True),
                Vehicle.license_plate.icontains(query, autoescape=True),
                Vehicle.license_plate_state.icontains(query, autoescape=True),
                Vehicle.notes.icontains(query, autoescape=True),
            )
        ).limit(PER_TYPE_LIMIT)
    )
    results.extend(_vehicle_hit(v) for v in vehicles.scalars().all())

    work_orders = await db.execute(
        select(WorkOrder).where(
            _any_of(
                WorkOrder.service_requested.icontains(query, autoescape=True),
                WorkOrder.diagnostic_notes.icontains(query, autoescape=True),
                _status_clause(query),
                _json_text_clause(WorkOrder.services, query),
                _json_text_clause(WorkOrder.parts, query),
                _json_text_clause(WorkOrder.labor, query),
            )
        ).order_by(WorkOrder.created_at.desc())
    )
    matched = [w for w in work_orders.scalars().all() if work_order_matches(w, query, line_items=True)]
    results.extend(_work_order_hit(w) for w in matched[:PER_TYPE_LIMIT])

    day = _parse_date(query)
    if day is not None:
        start = datetime(day.year, day.month, day.day, tzinfo=day.tzinfo or timezone.utc)
        by_date = await db.execute(
            select(WorkOrder).where(
                WorkOrder.created_at >= start,
                WorkOrder.created_at < start + timedelta(days=1),
            ).limit(DATE_MATCH_LIMIT)
        )
        seen = {r["id"] for r in results if r["type"] == "workorder"}
        for work_order in by_date.scalars().all():
            if work_order.id not in seen:
                created = work_order.created_at.date().isoformat()
                results.append(_work_order_hit(work_order, description=f"Created: {created}"))

    digits = normalize_phone(query)
    if PHONE_LIKE.fullmatch(query) and len(query) > 6 and digits:
        phone_matches = await db.execute(
            select(Customer.id).where(Customer.phone.icontains(digits, autoescape=True)).limit(PHONE_MATCH_LIMIT)
        )
        for customer_id in phone_matches.scalars().all():
            for index, hit in enumerate(results):
                if hit["type"] == "customer" and hit["id"] == customer_id:
                    results.insert(0, results.pop(index))
                    break

    needle = query.lower()
    results.sort(key=lambda hit: (TYPE_ORDER[hit["type"]], 0 if needle in hit["title"].lower() else 1))

    return results[:MAX_RESULTS]

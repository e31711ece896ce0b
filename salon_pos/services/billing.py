"""Checkout: bills and their line items.

A bill is written once, header + items + customer accrual in one transaction,
and never edited afterwards. Line items keep their own copy of the service
name, price and staff name so later catalog edits do not rewrite history.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from ..core.schemas import BillCreate, BillQuery, parse_payload
from ..errors import NotFound, ValidationFailed
from .customers import increment_customer_visits

logger = logging.getLogger(__name__)

LOYALTY_SPEND_PER_POINT = 10
CUSTOM_SERVICE_NAME = "Custom service"


def loyalty_points_for(total: float) -> int:
    return int(math.floor(total / LOYALTY_SPEND_PER_POINT))


def _resolve_lines(store, items, conn) -> List[Dict[str, Any]]:
    lines = []
    for n, item in enumerate(items, start=1):
        service = None
        if item.service_id is not None:
            service = store.get(
                "SELECT id, name, price FROM services WHERE id = :id", {"id": item.service_id}, conn=conn
            )
            if service is None:
                raise NotFound(f"Item {n}: service {item.service_id} not found")

        price = item.price if item.price is not None else (service["price"] if service else None)
        if price is None:
            raise ValidationFailed(f"Item {n}: a price or a service_id is required")

        staff_name = item.staff_name
        if item.staff_id is not None and not staff_name:
            member = store.get("SELECT name FROM staff WHERE id = :id", {"id": item.staff_id}, conn=conn)
            if member is None:
                raise NotFound(f"Item {n}: staff member {item.staff_id} not found")
            staff_name = member["name"]

        lines.append(
            {
                "service_id": item.service_id,
                "service_name": item.service_name or (service["name"] if service else CUSTOM_SERVICE_NAME),
                "price": float(price),
                "quantity": item.quantity,
                "staff_id": item.staff_id,
                "staff_name": staff_name,
                "notes": item.notes or None,
            }
        )
    return lines


def create_bill(store, data) -> Dict[str, Any]:
    payload = parse_payload(BillCreate, data)

    with store.transaction() as conn:
        lines = _resolve_lines(store, payload.items, conn)
        subtotal = round(sum(l["price"] * l["quantity"] for l in lines), 2)

        discount = payload.discount_amount
        if payload.discount_type == "percent" and payload.discount_value is not None:
            discount = round(subtotal * payload.discount_value / 100, 2)
        total = max(0.0, round(subtotal - discount, 2))

        if payload.customer_id is not None:
            found = store.get("SELECT id FROM customers WHERE id = :id", {"id": payload.customer_id}, conn=conn)
            if found is None:
                raise NotFound(f"Customer {payload.customer_id} not found")

        bill_id = store.run(
            """
            INSERT INTO bills (customer_id, subtotal, discount_amount, discount_type, total,
                               payment_method, payment_status, notes)
            VALUES (:customer_id, :subtotal, :discount, :discount_type, :total,
                    :payment_method, :payment_status, :notes)
            """,
            {
                "customer_id": payload.customer_id,
                "subtotal": subtotal,
                "discount": discount,
                "discount_type": payload.discount_type,
                "total": total,
                "payment_method": payload.payment_method,
                "payment_status": payload.payment_status,
                "notes": payload.notes or None,
            },
            conn=conn,
        )

        for line in lines:
            store.run(
                """
                INSERT INTO bill_items (bill_id, service_id, service_name, price, quantity,
                                        staff_id, staff_name, notes)
                VALUES (:bill_id, :service_id, :service_name, :price, :quantity,
                        :staff_id, :staff_name, :notes)
                """,
                {"bill_id": bill_id, **line},
                conn=conn,
            )

        if payload.customer_id is not None:
            increment_customer_visits(store, payload.customer_id, loyalty_points_for(total), conn=conn)

    logger.info("Bill %s created: total=%.2f method=%s", bill_id, total, payload.payment_method)
    return get_bill(store, bill_id)


def get_bill(store, bill_id: int) -> Optional[Dict[str, Any]]:
    bill = store.get(
        """
        SELECT b.*, c.name AS customer_name, c.phone AS customer_phone
        FROM bills b
        LEFT JOIN customers c ON b.customer_id = c.id
        WHERE b.id = :id
        """,
        {"id": bill_id},
    )
    if bill:
        bill["items"] = store.all("SELECT * FROM bill_items WHERE bill_id = :id ORDER BY id", {"id": bill_id})
    return bill


def get_bills(store, options=None) -> List[Dict[str, Any]]:
    query = parse_payload(BillQuery, options)
    sql = """
        SELECT b.*, c.name AS customer_name
        FROM bills b
        LEFT JOIN customers c ON b.customer_id = c.id
    """
    params: Dict[str, Any] = {"limit": query.limit, "offset": query.offset}
    if query.start_date and query.end_date:
        sql += " WHERE date(b.created_at) BETWEEN date(:start) AND date(:end)"
        params["start"] = query.start_date.isoformat()
        params["end"] = query.end_date.isoformat()
    sql += " ORDER BY b.created_at DESC, b.id DESC LIMIT :limit OFFSET :offset"
    return store.all(sql, params)

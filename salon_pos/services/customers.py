from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..core.schemas import CustomerCreate, CustomerUpdate, parse_payload
from ..errors import NotFound, ValidationFailed
from .audit import log_action


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def get_customers(store) -> List[Dict[str, Any]]:
    return store.all("SELECT * FROM customers ORDER BY name")


def search_customers(store, query: str, limit: int = 20) -> List[Dict[str, Any]]:
    like = f"%{query or ''}%"
    return store.all(
        "SELECT * FROM customers WHERE name LIKE :q OR phone LIKE :q ORDER BY name LIMIT :limit",
        {"q": like, "limit": limit},
    )


def get_customer(store, customer_id: int) -> Optional[Dict[str, Any]]:
    return store.get("SELECT * FROM customers WHERE id = :id", {"id": customer_id})


def create_customer(store, data) -> Dict[str, Any]:
    payload = parse_payload(CustomerCreate, data)
    phone = _blank_to_none(payload.phone)
    try:
        new_id = store.run(
            "INSERT INTO customers (name, phone, email, notes) VALUES (:name, :phone, :email, :notes)",
            {
                "name": payload.name,
                "phone": phone,
                "email": _blank_to_none(payload.email),
                "notes": _blank_to_none(payload.notes),
            },
        )
    except IntegrityError as exc:
        raise ValidationFailed(f"A customer with phone {phone} already exists") from exc
    return get_customer(store, new_id)


def update_customer(store, customer_id: int, data) -> Dict[str, Any]:
    patch = parse_payload(CustomerUpdate, data)
    if get_customer(store, customer_id) is None:
        raise NotFound(f"Customer {customer_id} not found")
    try:
        store.run(
            """
            UPDATE customers SET
              name = COALESCE(:name, name),
              phone = COALESCE(:phone, phone),
              email = COALESCE(:email, email),
              notes = COALESCE(:notes, notes),
              updated_at = datetime('now', 'localtime')
            WHERE id = :id
            """,
            {
                "id": customer_id,
                "name": patch.name,
                "phone": _blank_to_none(patch.phone),
                "email": patch.email,
                "notes": patch.notes,
            },
        )
    except IntegrityError as exc:
        raise ValidationFailed(f"A customer with phone {patch.phone} already exists") from exc
    return get_customer(store, customer_id)


def increment_customer_visits(store, customer_id: int, loyalty_points: int = 0, conn=None) -> None:
    store.run(
        """
        UPDATE customers SET
          visits = visits + 1,
          loyalty_points = loyalty_points + :points,
          updated_at = datetime('now', 'localtime')
        WHERE id = :id
        """,
        {"id": customer_id, "points": loyalty_points},
        conn=conn,
    )


def delete_customer(store, customer_id: int) -> None:
    """Delete a customer but keep their bills (the bill reference becomes NULL)."""
    customer = get_customer(store, customer_id)
    with store.transaction() as conn:
        store.run(
            "UPDATE bills SET customer_id = NULL WHERE customer_id = :id", {"id": customer_id}, conn=conn
        )
        store.run("DELETE FROM customers WHERE id = :id", {"id": customer_id}, conn=conn)
    log_action(
        store,
        "customer_deleted",
        customer_id=customer_id,
        name=(customer or {}).get("name"),
        phone=(customer or {}).get("phone"),
    )

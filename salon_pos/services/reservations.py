from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.schemas import ReservationCreate, ReservationUpdate, parse_payload
from ..errors import NotFound, ValidationFailed


def _check(store, start_time: str, end_time: Optional[str], staff_id: Optional[int]) -> None:
    # both normalized to "YYYY-MM-DD HH:MM:SS", so string order is time order
    if end_time is not None and end_time < start_time:
        raise ValidationFailed("end_time must not be before start_time")
    if staff_id is not None and not store.get("SELECT id FROM staff WHERE id = :id", {"id": staff_id}):
        raise NotFound(f"Staff member {staff_id} not found")


def get_reservation(store, reservation_id: int) -> Optional[Dict[str, Any]]:
    return store.get(
        """
        SELECT r.*, s.name AS staff_name
        FROM reservations r
        LEFT JOIN staff s ON r.staff_id = s.id
        WHERE r.id = :id
        """,
        {"id": reservation_id},
    )


def create_reservation(store, data) -> Dict[str, Any]:
    payload = parse_payload(ReservationCreate, data)
    _check(store, payload.start_time, payload.end_time, payload.staff_id)
    new_id = store.run(
        """
        INSERT INTO reservations (customer_name, customer_phone, staff_id, service_name,
                                  notes, status, start_time, end_time)
        VALUES (:customer_name, :customer_phone, :staff_id, :service_name,
                :notes, :status, :start_time, :end_time)
        """,
        payload.model_dump(),
    )
    return get_reservation(store, new_id)


def update_reservation(store, reservation_id: int, data) -> Dict[str, Any]:
    patch = parse_payload(ReservationUpdate, data)
    current = get_reservation(store, reservation_id)
    if current is None:
        raise NotFound(f"Reservation {reservation_id} not found")
    changes = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
    merged = {**current, **changes}
    _check(store, merged["start_time"], merged["end_time"], changes.get("staff_id"))
    if changes:
        assignments = ", ".join(f"{col} = :{col}" for col in changes)
        store.run(f"UPDATE reservations SET {assignments} WHERE id = :id", {**changes, "id": reservation_id})
    return get_reservation(store, reservation_id)


def cancel_reservation(store, reservation_id: int) -> Dict[str, Any]:
    return update_reservation(store, reservation_id, {"status": "cancelled"})

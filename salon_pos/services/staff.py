"""Staff members and their clock-in/clock-out logs."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.schemas import StaffCreate, StaffUpdate, parse_day, parse_payload
from ..errors import NotFound, ValidationFailed

# never select the pin column for display
_COLUMNS = "id, name, commission_rate, active, role, photo_path, created_at"


def _ensure_staff_columns(store) -> None:
    store.ensure_column("staff", "photo_path", "TEXT")


def get_staff(store, active_only: bool = True) -> List[Dict[str, Any]]:
    _ensure_staff_columns(store)
    if active_only:
        return store.all(f"SELECT {_COLUMNS} FROM staff WHERE active = 1 ORDER BY name")
    return store.all(f"SELECT {_COLUMNS} FROM staff ORDER BY name")


def get_staff_member(store, staff_id: int) -> Optional[Dict[str, Any]]:
    _ensure_staff_columns(store)
    return store.get(f"SELECT {_COLUMNS} FROM staff WHERE id = :id", {"id": staff_id})


def _require_staff(store, staff_id: int) -> Dict[str, Any]:
    member = get_staff_member(store, staff_id)
    if member is None:
        raise NotFound(f"Staff member {staff_id} not found")
    return member


def create_staff(store, data) -> Dict[str, Any]:
    payload = parse_payload(StaffCreate, data)
    _ensure_staff_columns(store)
    new_id = store.run(
        "INSERT INTO staff (name, commission_rate, role, pin, photo_path) "
        "VALUES (:name, :rate, :role, :pin, :photo_path)",
        {
            "name": payload.name,
            "rate": payload.commission_rate,
            "role": payload.role,
            "pin": (payload.pin or None) if payload.role == "admin" else None,
            "photo_path": payload.photo_path or None,
        },
    )
    return get_staff_member(store, new_id)


def update_staff(store, staff_id: int, data) -> Dict[str, Any]:
    patch = parse_payload(StaffUpdate, data)
    _require_staff(store, staff_id)
    store.run(
        """
        UPDATE staff SET
          name = COALESCE(:name, name),
          commission_rate = COALESCE(:rate, commission_rate),
          active = COALESCE(:active, active),
          role = COALESCE(:role, role),
          photo_path = COALESCE(:photo_path, photo_path)
        WHERE id = :id
        """,
        {
            "id": staff_id,
            "name": patch.name,
            "rate": patch.commission_rate,
            "active": None if patch.active is None else int(patch.active),
            "role": patch.role,
            "photo_path": patch.photo_path,
        },
    )
    if patch.role == "staff":
        store.run("UPDATE staff SET pin = NULL WHERE id = :id", {"id": staff_id})
    return get_staff_member(store, staff_id)


def delete_staff(store, staff_id: int) -> None:
    _require_staff(store, staff_id)
    store.run("UPDATE staff SET active = 0 WHERE id = :id", {"id": staff_id})


# ---------- time clock ----------
def get_staff_clock_status(store, staff_id: int, day) -> Dict[str, Any]:
    day = parse_day(day)
    params = {"staff_id": staff_id, "day": day}
    open_log = store.get(
        """
        SELECT * FROM staff_time_logs
        WHERE staff_id = :staff_id AND date(clock_in) = date(:day) AND clock_out IS NULL
        ORDER BY clock_in DESC LIMIT 1
        """,
        params,
    )
    bounds = store.get(
        """
        SELECT MIN(clock_in) AS first_clock_in, MAX(clock_out) AS last_clock_out
        FROM staff_time_logs
        WHERE staff_id = :staff_id AND date(clock_in) = date(:day)
        """,
        params,
    ) or {}
    return {
        "open_log": open_log,
        "first_clock_in": bounds.get("first_clock_in"),
        "last_clock_out": bounds.get("last_clock_out"),
    }


def clock_in_staff(store, staff_id: int) -> Dict[str, Any]:
    """Open a new time log. Finding the right log to close is up to the caller."""
    _require_staff(store, staff_id)
    log_id = store.run(
        "INSERT INTO staff_time_logs (staff_id, clock_in) VALUES (:staff_id, datetime('now', 'localtime'))",
        {"staff_id": staff_id},
    )
    return store.get("SELECT * FROM staff_time_logs WHERE id = :id", {"id": log_id})


def clock_out_staff(store, log_id: int) -> Dict[str, Any]:
    log = store.get("SELECT * FROM staff_time_logs WHERE id = :id", {"id": log_id})
    if log is None:
        raise NotFound(f"Time log {log_id} not found")
    if log["clock_out"] is not None:
        raise ValidationFailed(f"Time log {log_id} is already clocked out")
    store.run(
        "UPDATE staff_time_logs SET clock_out = datetime('now', 'localtime') WHERE id = :id",
        {"id": log_id},
    )
    return store.get("SELECT * FROM staff_time_logs WHERE id = :id", {"id": log_id})

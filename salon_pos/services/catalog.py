"""Services and categories.

``category`` on a service is the category *name*, checked against the
categories table on every write. "HOME" is not a real grouping: the landing
view is the set of services flagged ``show_on_home``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..core.schemas import CategoryCreate, ServiceCreate, ServiceUpdate, parse_payload
from ..errors import NotFound, ValidationFailed
from .audit import log_action

logger = logging.getLogger(__name__)

HOME = "HOME"


def _is_home(name) -> bool:
    return str(name).strip().upper() == HOME


def _ensure_service_columns(store) -> None:
    store.ensure_column("services", "show_on_home", "INTEGER NOT NULL DEFAULT 0")


def _check_category(store, name: str) -> None:
    if _is_home(name):
        raise ValidationFailed("HOME is not a service category; use show_on_home instead")
    if not store.get("SELECT id FROM categories WHERE name = :name", {"name": name}):
        raise ValidationFailed(f"Unknown category: {name}")


# ---------- services ----------
def get_services(store, active_only: bool = True) -> List[Dict[str, Any]]:
    _ensure_service_columns(store)
    if active_only:
        return store.all("SELECT * FROM services WHERE active = 1 ORDER BY category, name")
    return store.all("SELECT * FROM services ORDER BY category, name")


def get_home_services(store) -> List[Dict[str, Any]]:
    _ensure_service_columns(store)
    return store.all("SELECT * FROM services WHERE show_on_home = 1 AND active = 1 ORDER BY name")


def get_services_by_category(store, category: str) -> List[Dict[str, Any]]:
    if _is_home(category):
        return get_home_services(store)
    _ensure_service_columns(store)
    return store.all(
        "SELECT * FROM services WHERE category = :category AND active = 1 ORDER BY name",
        {"category": category},
    )


def get_service(store, service_id: int) -> Optional[Dict[str, Any]]:
    _ensure_service_columns(store)
    return store.get("SELECT * FROM services WHERE id = :id", {"id": service_id})


def create_service(store, data) -> Dict[str, Any]:
    payload = parse_payload(ServiceCreate, data)
    _ensure_service_columns(store)
    _check_category(store, payload.category)
    new_id = store.run(
        "INSERT INTO services (name, price, category, show_on_home, active) "
        "VALUES (:name, :price, :category, :show_on_home, :active)",
        {
            "name": payload.name,
            "price": payload.price,
            "category": payload.category,
            "show_on_home": int(payload.show_on_home),
            "active": int(payload.active),
        },
    )
    return get_service(store, new_id)


def update_service(store, service_id: int, data) -> Dict[str, Any]:
    """Patch a service; fields left out (or null) keep their current value."""
    patch = parse_payload(ServiceUpdate, data)
    _ensure_service_columns(store)
    if get_service(store, service_id) is None:
        raise NotFound(f"Service {service_id} not found")
    if patch.category is not None:
        _check_category(store, patch.category)
    store.run(
        """
        UPDATE services SET
          name = COALESCE(:name, name),
          price = COALESCE(:price, price),
          category = COALESCE(:category, category),
          show_on_home = COALESCE(:show_on_home, show_on_home),
          active = COALESCE(:active, active),
          updated_at = datetime('now', 'localtime')
        WHERE id = :id
        """,
        {
            "id": service_id,
            "name": patch.name,
            "price": patch.price,
            "category": patch.category,
            "show_on_home": None if patch.show_on_home is None else int(patch.show_on_home),
            "active": None if patch.active is None else int(patch.active),
        },
    )
    return get_service(store, service_id)


def delete_service(store, service_id: int) -> None:
    """Soft delete: the row stays for bill history."""
    if get_service(store, service_id) is None:
        raise NotFound(f"Service {service_id} not found")
    store.run(
        "UPDATE services SET active = 0, updated_at = datetime('now', 'localtime') WHERE id = :id",
        {"id": service_id},
    )


# ---------- categories ----------
def get_categories(store, active_only: bool = True) -> List[Dict[str, Any]]:
    if active_only:
        return store.all("SELECT * FROM categories WHERE active = 1 ORDER BY display_order")
    return store.all("SELECT * FROM categories ORDER BY display_order")


def create_category(store, data) -> Dict[str, Any]:
    payload = parse_payload(CategoryCreate, data)
    name = payload.name.strip()
    try:
        new_id = store.run(
            "INSERT INTO categories (name, display_order) VALUES (:name, :display_order)",
            {"name": name, "display_order": payload.display_order},
        )
    except IntegrityError as exc:
        raise ValidationFailed(f"Category already exists: {name}") from exc
    return store.get("SELECT * FROM categories WHERE id = :id", {"id": new_id})


def delete_category(store, category_id: int) -> None:
    """Remove a category and switch off every service filed under it.

    The HOME category can never be deleted.
    """
    category = store.get("SELECT * FROM categories WHERE id = :id", {"id": category_id})
    if not category:
        logger.info("delete_category: no category with id %s", category_id)
        return
    if _is_home(category["name"]):
        raise ValidationFailed("Home category cannot be deleted")

    _ensure_service_columns(store)
    with store.transaction() as conn:
        store.run(
            "UPDATE services SET active = 0, show_on_home = 0, updated_at = datetime('now', 'localtime') "
            "WHERE category = :name",
            {"name": category["name"]},
            conn=conn,
        )
        store.run("DELETE FROM categories WHERE id = :id", {"id": category_id}, conn=conn)
    log_action(store, "category_deleted", category_id=category_id, name=category["name"])

# salon_pos/ops/bootstrap.py
"""Schema creation, additive migrations and first-run seed data.

Runs on every ``Store.initialize()``. Each step is idempotent: tables are
created only when missing, columns added only when absent, and each table is
seeded only while it is still empty.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from ..db import Base
from .. import models as _models  # noqa: F401  registers the tables on Base

logger = logging.getLogger(__name__)

# columns shipped after the first release: (table, column, definition)
ADDED_COLUMNS: List[Tuple[str, str, str]] = [
    ("services", "show_on_home", "INTEGER NOT NULL DEFAULT 0"),
    ("staff", "photo_path", "TEXT"),
]

DEFAULT_CATEGORIES: List[Tuple[str, int]] = [
    ("HOME", 0),
    ("Hair", 1),
    ("Facial", 2),
    ("Makeup", 3),
    ("Waxing", 4),
    ("Other", 5),
]

DEFAULT_SERVICES: List[Tuple[str, float, str]] = [
    ("Haircut - Women", 50, "Hair"),
    ("Haircut - Men", 30, "Hair"),
    ("Hair Color", 80, "Hair"),
    ("Highlights", 120, "Hair"),
    ("Blowout", 40, "Hair"),
    ("Facial - Basic", 60, "Facial"),
    ("Facial - Deep Clean", 85, "Facial"),
    ("Makeup - Basic", 50, "Makeup"),
    ("Makeup - Bridal", 150, "Makeup"),
    ("Eyebrow Wax", 15, "Waxing"),
    ("Lip Wax", 10, "Waxing"),
    ("Full Leg Wax", 60, "Waxing"),
]

DEFAULT_SETTINGS: Dict[str, str] = {
    "business_name": "VanisBeauty",
    "admin_pin": "12345",
    "currency_symbol": "$",
    "tax_rate": "0",
}


def prepare(store) -> None:
    create_schema(store)
    migrate(store)
    seed_defaults(store, store.seed_defaults)


def create_schema(store) -> None:
    Base.metadata.create_all(bind=store.engine)


def migrate(store) -> None:
    for table, column, definition in ADDED_COLUMNS:
        store.ensure_column(table, column, definition)
    # older databases stored "Other" with display_order 99
    store.run("UPDATE categories SET display_order = 7 WHERE name = 'Other' AND display_order = 99")


def _is_empty(store, table: str) -> bool:
    row = store.get(f"SELECT COUNT(*) AS count FROM {table}")
    return not row or row["count"] == 0


def seed_defaults(store, overrides: Dict[str, str] | None = None) -> None:
    """Insert the default catalog, staff and settings into empty tables only."""
    if _is_empty(store, "categories"):
        with store.transaction() as conn:
            for name, order in DEFAULT_CATEGORIES:
                store.run(
                    "INSERT INTO categories (name, display_order) VALUES (:name, :display_order)",
                    {"name": name, "display_order": order},
                    conn=conn,
                )
        logger.info("Seeded %d categories", len(DEFAULT_CATEGORIES))

    if _is_empty(store, "services"):
        with store.transaction() as conn:
            for name, price, category in DEFAULT_SERVICES:
                store.run(
                    "INSERT INTO services (name, price, category, show_on_home) "
                    "VALUES (:name, :price, :category, 0)",
                    {"name": name, "price": price, "category": category},
                    conn=conn,
                )
        logger.info("Seeded %d services", len(DEFAULT_SERVICES))

    values = {**DEFAULT_SETTINGS, **{k: v for k, v in (overrides or {}).items() if v is not None}}

    if _is_empty(store, "staff"):
        staff_rows = [
            ("Admin", 0, "admin", values["admin_pin"]),
            ("Staff 1", 10, "staff", None),
            ("Staff 2", 10, "staff", None),
        ]
        with store.transaction() as conn:
            for name, rate, role, pin in staff_rows:
                store.run(
                    "INSERT INTO staff (name, commission_rate, role, pin, photo_path) "
                    "VALUES (:name, :rate, :role, :pin, NULL)",
                    {"name": name, "rate": rate, "role": role, "pin": pin},
                    conn=conn,
                )
        logger.info("Seeded default staff")

    if _is_empty(store, "settings"):
        with store.transaction() as conn:
            for key in ("business_name", "admin_pin", "currency_symbol", "tax_rate"):
                store.run(
                    "INSERT INTO settings (key, value) VALUES (:key, :value)",
                    {"key": key, "value": str(values[key])},
                    conn=conn,
                )
        logger.info("Seeded default settings")

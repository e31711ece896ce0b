"""Key/value settings (business_name, admin_pin, currency_symbol, tax_rate)."""
from __future__ import annotations

import re
from typing import Dict, Optional

from ..errors import ValidationFailed

_PIN = re.compile(r"^\d{5}$")


def get_setting(store, key: str) -> Optional[str]:
    row = store.get("SELECT value FROM settings WHERE key = :key", {"key": key})
    return row["value"] if row else None


def set_setting(store, key: str, value) -> None:
    if not key:
        raise ValidationFailed("setting key is required")
    value = None if value is None else str(value)
    if key == "admin_pin" and (value is None or not _PIN.match(value)):
        raise ValidationFailed("admin_pin must be exactly 5 digits")
    if key == "tax_rate" and value is not None:
        try:
            float(value)
        except ValueError:
            raise ValidationFailed("tax_rate must be a number")
    store.run(
        "INSERT INTO settings (key, value) VALUES (:key, :value) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        {"key": key, "value": value},
    )


def get_settings(store) -> Dict[str, Optional[str]]:
    return {row["key"]: row["value"] for row in store.all("SELECT key, value FROM settings")}

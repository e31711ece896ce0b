"""Request/response bridge for the touch UI.

``POST /ipc/{channel}`` with ``{"args": [...]}`` calls the named operation
with those positional arguments and always answers 200 with an envelope:
``{"success": true, "data": ...}`` or ``{"success": false, "error": "..."}``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from .. import __version__
from ..errors import PosError
from ..services import auth, billing, catalog, customers, reports, reservations, settings_store, staff

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ipc", tags=["ipc"])


class InvokeRequest(BaseModel):
    args: List[Any] = Field(default_factory=list)


def _on_store(fn: Callable) -> Callable:
    def call(ctx, *args):
        return fn(ctx.store, *args)

    call.__name__ = fn.__name__
    return call


def _verify_pin(ctx, pin):
    return {"valid": auth.verify_admin_pin(ctx.store, pin, ctx.pin_guard)}


def _backup(ctx, path):
    return {"path": str(ctx.store.backup(path))}


def _restore(ctx, path):
    ctx.store.restore(path)
    return {"path": str(path)}


def _app_info(ctx):
    return {
        "name": ctx.settings.app_name,
        "version": __version__,
        "data_path": str(ctx.store.db_path.parent),
    }


HANDLERS: Dict[str, Callable] = {
    # services
    "services:getAll": _on_store(catalog.get_services),
    "services:getByCategory": _on_store(catalog.get_services_by_category),
    "services:getHome": _on_store(catalog.get_home_services),
    "services:get": _on_store(catalog.get_service),
    "services:create": _on_store(catalog.create_service),
    "services:update": _on_store(catalog.update_service),
    "services:delete": _on_store(catalog.delete_service),
    # categories
    "categories:getAll": _on_store(catalog.get_categories),
    "categories:create": _on_store(catalog.create_category),
    "categories:delete": _on_store(catalog.delete_category),
    # customers
    "customers:getAll": _on_store(customers.get_customers),
    "customers:search": _on_store(customers.search_customers),
    "customers:get": _on_store(customers.get_customer),
    "customers:create": _on_store(customers.create_customer),
    "customers:update": _on_store(customers.update_customer),
    "customers:delete": _on_store(customers.delete_customer),
    # staff
    "staff:getAll": _on_store(staff.get_staff),
    "staff:get": _on_store(staff.get_staff_member),
    "staff:create": _on_store(staff.create_staff),
    "staff:update": _on_store(staff.update_staff),
    "staff:delete": _on_store(staff.delete_staff),
    "staff:clockStatus": _on_store(staff.get_staff_clock_status),
    "staff:clockIn": _on_store(staff.clock_in_staff),
    "staff:clockOut": _on_store(staff.clock_out_staff),
    # bills
    "bills:create": _on_store(billing.create_bill),
    "bills:get": _on_store(billing.get_bill),
    "bills:getAll": _on_store(billing.get_bills),
    # reservations
    "reservations:get": _on_store(reservations.get_reservation),
    "reservations:create": _on_store(reservations.create_reservation),
    "reservations:update": _on_store(reservations.update_reservation),
    "reservations:cancel": _on_store(reservations.cancel_reservation),
    # reports
    "reports:daily": _on_store(reports.get_daily_summary),
    "reports:dailyJobs": _on_store(reports.get_daily_jobs),
    "reports:staffDaily": _on_store(reports.get_staff_daily_report),
    "reports:reservationsByDate": _on_store(reports.get_reservations_by_date),
    "reports:exportStaffCsv": _on_store(reports.export_staff_csv),
    # settings / admin
    "settings:get": _on_store(settings_store.get_setting),
    "settings:set": _on_store(settings_store.set_setting),
    "settings:getAll": _on_store(settings_store.get_settings),
    "admin:verifyPin": _verify_pin,
    # database / app
    "database:backup": _backup,
    "database:restore": _restore,
    "app:getInfo": _app_info,
}


def dispatch(ctx, channel: str, args: Optional[List[Any]] = None) -> Dict[str, Any]:
    handler = HANDLERS.get(channel)
    if handler is None:
        return {"success": False, "error": f"Unknown channel: {channel}"}
    try:
        return {"success": True, "data": handler(ctx, *(args or []))}
    except PosError as exc:
        logger.info("ipc %s rejected: %s", channel, exc)
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        logger.exception("ipc %s failed", channel)
        return {"success": False, "error": str(exc)}


@router.get("")
def list_channels():
    return {"channels": sorted(HANDLERS)}


@router.post("/{channel}")
def invoke(channel: str, request: Request, payload: Optional[InvokeRequest] = None):
    args = payload.args if payload is not None else []
    return dispatch(request.app.state.ctx, channel, args)

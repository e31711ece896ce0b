"""Read-only daily reports over bills, line items, time logs and reservations.

Every report takes a calendar date (local time, ``YYYY-MM-DD``) and matches
rows with SQLite's ``date()`` on their local timestamps.
"""
from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..core.schemas import parse_day
from ..utils.atomic_file import atomic_write_text

STAFF_CSV_HEADER = ["Section", "Staff", "Clock In", "Clock Out", "Total Minutes", "Jobs", "Total Sales", "Payments"]
RESERVATION_CSV_HEADER = [
    "Section",
    "Start Time",
    "End Time",
    "Staff",
    "Customer",
    "Phone",
    "Service",
    "Status",
    "Notes",
]


def _num(value, ndigits: int = 2):
    """Round money/minutes; whole numbers come back as int (40 rather than 40.0)."""
    value = round(float(value or 0), ndigits)
    return int(value) if value.is_integer() else value


def get_daily_summary(store, day) -> Dict[str, Any]:
    day = parse_day(day)
    summary = store.get(
        """
        SELECT COUNT(*) AS transaction_count,
               COALESCE(SUM(total), 0) AS total_sales,
               COALESCE(SUM(discount_amount), 0) AS total_discounts,
               COALESCE(AVG(total), 0) AS average_sale
        FROM bills
        WHERE date(created_at) = date(:day)
        """,
        {"day": day},
    )
    by_method = store.all(
        """
        SELECT payment_method, COUNT(*) AS count, COALESCE(SUM(total), 0) AS total
        FROM bills
        WHERE date(created_at) = date(:day)
        GROUP BY payment_method
        ORDER BY payment_method
        """,
        {"day": day},
    )
    top_services = store.all(
        """
        SELECT bi.service_id, MAX(bi.service_name) AS service_name,
               SUM(bi.quantity) AS quantity,
               SUM(bi.price * bi.quantity) AS revenue
        FROM bill_items bi
        JOIN bills b ON bi.bill_id = b.id
        WHERE date(b.created_at) = date(:day)
        GROUP BY bi.service_id
        ORDER BY quantity DESC, revenue DESC
        LIMIT 10
        """,
        {"day": day},
    )
    return {
        "date": day,
        "transaction_count": summary["transaction_count"],
        "total_sales": _num(summary["total_sales"]),
        "total_discounts": _num(summary["total_discounts"]),
        "average_sale": _num(summary["average_sale"]),
        "by_payment_method": [
            {"payment_method": r["payment_method"], "count": r["count"], "total": _num(r["total"])}
            for r in by_method
        ],
        "top_services": [
            {
                "service_id": r["service_id"],
                "service_name": r["service_name"],
                "quantity": r["quantity"],
                "revenue": _num(r["revenue"]),
            }
            for r in top_services
        ],
    }


def get_daily_jobs(store, day) -> List[Dict[str, Any]]:
    """Every line item sold on ``day``, newest first, with its service category."""
    return store.all(
        """
        SELECT bi.id, bi.bill_id, bi.service_name, bi.quantity, bi.staff_id, bi.staff_name,
               b.created_at,
               COALESCE(s.category, 'Uncategorized') AS category
        FROM bill_items bi
        JOIN bills b ON bi.bill_id = b.id
        LEFT JOIN services s ON bi.service_id = s.id
        WHERE date(b.created_at) = date(:day)
        ORDER BY b.created_at DESC, bi.id DESC
        """,
        {"day": parse_day(day)},
    )


def get_staff_daily_report(
    store, day, use_now_for_open_logs: bool = False, now: Optional[datetime] = None
) -> List[Dict[str, Any]]:
    """One row per staff member (inactive included) for ``day``.

    Sales, per-method payments and clocked time are grouped separately and
    joined here by staff id. A log without clock_out counts up to ``now``
    only when asked to and only when ``day`` is today; otherwise it adds
    nothing to total_minutes.
    """
    day = parse_day(day)
    now = now or datetime.now()
    extend_open = bool(use_now_for_open_logs) and day == now.date().isoformat()

    staff = store.all("SELECT id, name, active, role FROM staff ORDER BY name")
    sales_rows = store.all(
        """
        SELECT bi.staff_id,
               SUM(bi.quantity) AS jobs_count,
               SUM(bi.price * bi.quantity) AS total_sales
        FROM bill_items bi
        JOIN bills b ON bi.bill_id = b.id
        WHERE date(b.created_at) = date(:day) AND bi.staff_id IS NOT NULL
        GROUP BY bi.staff_id
        """,
        {"day": day},
    )
    payment_rows = store.all(
        """
        SELECT bi.staff_id, b.payment_method,
               SUM(bi.price * bi.quantity) AS total,
               SUM(bi.quantity) AS jobs_count
        FROM bill_items bi
        JOIN bills b ON bi.bill_id = b.id
        WHERE date(b.created_at) = date(:day) AND bi.staff_id IS NOT NULL
        GROUP BY bi.staff_id, b.payment_method
        ORDER BY b.payment_method
        """,
        {"day": day},
    )
    # whole seconds via strftime('%s') so 90 minutes is exactly 90
    time_rows = store.all(
        """
        SELECT staff_id,
               MIN(clock_in) AS first_clock_in,
               MAX(clock_out) AS last_clock_out,
               SUM(
                 strftime('%s', CASE
                   WHEN clock_out IS NULL AND :extend = 1 THEN :now
                   ELSE clock_out
                 END) - strftime('%s', clock_in)
               ) / 60.0 AS total_minutes
        FROM staff_time_logs
        WHERE date(clock_in) = date(:day)
        GROUP BY staff_id
        """,
        {"day": day, "extend": 1 if extend_open else 0, "now": now.strftime("%Y-%m-%d %H:%M:%S")},
    )

    sales = {r["staff_id"]: r for r in sales_rows}
    times = {r["staff_id"]: r for r in time_rows}
    payments: Dict[int, List[Dict[str, Any]]] = {}
    for r in payment_rows:
        payments.setdefault(r["staff_id"], []).append(
            {"method": r["payment_method"], "total": _num(r["total"]), "jobs_count": r["jobs_count"] or 0}
        )

    report = []
    for member in staff:
        s = sales.get(member["id"], {})
        t = times.get(member["id"], {})
        report.append(
            {
                "staff_id": member["id"],
                "staff_name": member["name"],
                "active": member["active"],
                "role": member["role"],
                "jobs_count": s.get("jobs_count") or 0,
                "total_sales": _num(s.get("total_sales")),
                "payments": payments.get(member["id"], []),
                "first_clock_in": t.get("first_clock_in"),
                "last_clock_out": t.get("last_clock_out"),
                "total_minutes": _num(t.get("total_minutes")),
            }
        )
    return report


def get_reservations_by_date(store, day) -> List[Dict[str, Any]]:
    return store.all(
        """
        SELECT r.*, s.name AS staff_name
        FROM reservations r
        LEFT JOIN staff s ON r.staff_id = s.id
        WHERE date(r.start_time) = date(:day)
        ORDER BY r.start_time ASC
        """,
        {"day": parse_day(day)},
    )


def render_staff_csv(store, day) -> str:
    """Staff summary rows, a blank line, then the day's reservations.

    csv.writer quotes any field holding a comma, quote or newline and doubles
    embedded quotes.
    """
    day = parse_day(day)
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")

    w.writerow(STAFF_CSV_HEADER)
    for row in get_staff_daily_report(store, day, False):
        paid = " | ".join(f"{p['method']}:{p['total']}" for p in row["payments"])
        w.writerow(
            [
                "STAFF_SUMMARY",
                row["staff_name"],
                row["first_clock_in"] or "",
                row["last_clock_out"] or "",
                row["total_minutes"] or 0,
                row["jobs_count"] or 0,
                row["total_sales"] or 0,
                paid,
            ]
        )

    w.writerow([])
    w.writerow(RESERVATION_CSV_HEADER)
    for res in get_reservations_by_date(store, day):
        w.writerow(
            [
                "RESERVATION",
                res["start_time"] or "",
                res["end_time"] or "",
                res["staff_name"] or "",
                res["customer_name"] or "",
                res["customer_phone"] or "",
                res["service_name"] or "",
                res["status"] or "",
                res["notes"] or "",
            ]
        )
    return buf.getvalue()


def export_staff_csv(store, day, path) -> Dict[str, str]:
    atomic_write_text(path, render_staff_csv(store, day))
    return {"path": str(path)}


def today() -> str:
    return date.today().isoformat()

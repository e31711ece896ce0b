import csv
import io
from datetime import datetime

import pytest

from salon_pos.errors import ValidationFailed
from salon_pos.services import billing, catalog, reports, reservations

DAY = "2024-03-05"


def _bill_on(store, when, **data):
    bill = billing.create_bill(store, data)
    store.run("UPDATE bills SET created_at = :when WHERE id = :id", {"when": when, "id": bill["id"]})
    return bill


def _log(store, staff_id, clock_in, clock_out=None):
    store.run(
        "INSERT INTO staff_time_logs (staff_id, clock_in, clock_out) VALUES (:s, :i, :o)",
        {"s": staff_id, "i": clock_in, "o": clock_out},
    )


def _row(report, name):
    return next(r for r in report if r["staff_name"] == name)


def test_staff_daily_report(store):
    blowout = catalog.get_services_by_category(store, "Hair")
    blowout = next(s for s in blowout if s["name"] == "Blowout")
    _bill_on(store, f"{DAY} 10:00:00", payment_method="cash", items=[{"service_id": blowout["id"], "staff_id": 2}])
    _log(store, 2, f"{DAY} 09:00:00", f"{DAY} 10:30:00")

    row = _row(reports.get_staff_daily_report(store, DAY), "Staff 1")
    assert row["total_minutes"] == 90
    assert row["jobs_count"] == 1
    assert row["total_sales"] == 40
    assert row["payments"] == [{"method": "cash", "total": 40, "jobs_count": 1}]
    assert row["first_clock_in"] == f"{DAY} 09:00:00"
    assert row["last_clock_out"] == f"{DAY} 10:30:00"


def test_payments_split_by_method(store):
    _bill_on(store, f"{DAY} 10:00:00", payment_method="cash", items=[{"price": 20, "staff_id": 2}])
    _bill_on(store, f"{DAY} 11:00:00", payment_method="card", items=[{"price": 15, "quantity": 2, "staff_id": 2}])

    row = _row(reports.get_staff_daily_report(store, DAY), "Staff 1")
    assert row["jobs_count"] == 3
    assert row["total_sales"] == 50
    assert row["payments"] == [
        {"method": "card", "total": 30, "jobs_count": 2},
        {"method": "cash", "total": 20, "jobs_count": 1},
    ]


def test_open_log_counts_only_when_asked(store):
    _log(store, 2, f"{DAY} 10:00:00")
    now = datetime(2024, 3, 5, 11, 0, 0)

    extended = _row(reports.get_staff_daily_report(store, DAY, True, now=now), "Staff 1")
    plain = _row(reports.get_staff_daily_report(store, DAY, False, now=now), "Staff 1")
    assert extended["total_minutes"] == 60
    assert plain["total_minutes"] == 0


def test_open_log_not_extended_on_past_days(store):
    _log(store, 2, f"{DAY} 10:00:00")
    later = datetime(2024, 3, 6, 11, 0, 0)
    row = _row(reports.get_staff_daily_report(store, DAY, True, now=later), "Staff 1")
    assert row["total_minutes"] == 0


def test_inactive_staff_listed_with_zeros(store):
    store.run("UPDATE staff SET active = 0 WHERE id = 3")
    report = reports.get_staff_daily_report(store, DAY)
    assert [r["staff_name"] for r in report] == ["Admin", "Staff 1", "Staff 2"]
    gone = _row(report, "Staff 2")
    assert gone["active"] == 0
    assert (gone["jobs_count"], gone["total_sales"], gone["total_minutes"], gone["payments"]) == (0, 0, 0, [])


def test_daily_summary(store):
    _bill_on(store, f"{DAY} 10:00:00", payment_method="cash", items=[{"price": 40}])
    _bill_on(store, f"{DAY} 12:00:00", payment_method="card", discount_amount=5, items=[{"price": 35}])
    _bill_on(store, "2024-03-06 09:00:00", payment_method="cash", items=[{"price": 500}])

    summary = reports.get_daily_summary(store, DAY)
    assert summary["date"] == DAY
    assert summary["transaction_count"] == 2
    assert summary["total_sales"] == 70
    assert summary["total_discounts"] == 5
    assert summary["average_sale"] == 35
    assert summary["by_payment_method"] == [
        {"payment_method": "card", "count": 1, "total": 30},
        {"payment_method": "cash", "count": 1, "total": 40},
    ]
    assert {s["service_name"] for s in summary["top_services"]} == {billing.CUSTOM_SERVICE_NAME}


def test_empty_day_summary(store):
    summary = reports.get_daily_summary(store, DAY)
    assert summary["transaction_count"] == 0
    assert summary["total_sales"] == 0
    assert summary["average_sale"] == 0
    assert summary["by_payment_method"] == []
    assert summary["top_services"] == []


def test_daily_jobs(store):
    lip = next(s for s in catalog.get_services_by_category(store, "Waxing") if s["name"] == "Lip Wax")
    _bill_on(store, f"{DAY} 09:00:00", items=[{"service_id": lip["id"], "staff_id": 3}])
    _bill_on(store, f"{DAY} 15:00:00", items=[{"service_name": "Gift wrap", "price": 2}])

    jobs = reports.get_daily_jobs(store, DAY)
    assert [j["service_name"] for j in jobs] == ["Gift wrap", "Lip Wax"]
    assert [j["category"] for j in jobs] == ["Uncategorized", "Waxing"]
    assert jobs[1]["staff_name"] == "Staff 2"


def test_reservations_by_date(store):
    reservations.create_reservation(store, {"start_time": f"{DAY} 14:00", "customer_name": "Late"})
    reservations.create_reservation(store, {"start_time": f"{DAY}T09:30:00", "customer_name": "Early", "staff_id": 2})
    reservations.create_reservation(store, {"start_time": "2024-03-06 09:00", "customer_name": "Tomorrow"})

    rows = reports.get_reservations_by_date(store, DAY)
    assert [r["customer_name"] for r in rows] == ["Early", "Late"]
    assert rows[0]["staff_name"] == "Staff 1"
    assert rows[0]["start_time"] == f"{DAY} 09:30:00"


def test_staff_csv(store):
    _bill_on(store, f"{DAY} 10:00:00", payment_method="cash", items=[{"price": 40, "staff_id": 2}])
    _log(store, 2, f"{DAY} 09:00:00", f"{DAY} 10:30:00")
    reservations.create_reservation(
        store,
        {
            "start_time": f"{DAY} 10:00",
            "end_time": f"{DAY} 11:00",
            "staff_id": 2,
            "customer_name": "Smith, Jr.",
            "customer_phone": "555",
            "service_name": "Cut",
            "notes": 'said "hi"',
        },
    )

    text = reports.render_staff_csv(store, DAY)
    lines = text.split("\n")
    assert lines[0] == ",".join(reports.STAFF_CSV_HEADER)
    assert lines[1] == "STAFF_SUMMARY,Admin,,,0,0,0,"
    assert lines[2] == f"STAFF_SUMMARY,Staff 1,{DAY} 09:00:00,{DAY} 10:30:00,90,1,40,cash:40"
    assert lines[3] == "STAFF_SUMMARY,Staff 2,,,0,0,0,"
    assert lines[4] == ""
    assert lines[5] == ",".join(reports.RESERVATION_CSV_HEADER)
    assert lines[6] == (
        f'RESERVATION,{DAY} 10:00:00,{DAY} 11:00:00,Staff 1,"Smith, Jr.",555,Cut,scheduled,"said ""hi"""'
    )

    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[6][4] == "Smith, Jr."
    assert parsed[6][8] == 'said "hi"'


def test_multiple_payments_joined(store):
    _bill_on(store, f"{DAY} 10:00:00", payment_method="cash", items=[{"price": 12.5, "staff_id": 2}])
    _bill_on(store, f"{DAY} 11:00:00", payment_method="card", items=[{"price": 30, "staff_id": 2}])
    row = next(r for r in csv.reader(io.StringIO(reports.render_staff_csv(store, DAY))) if r[1:2] == ["Staff 1"])
    assert row[7] == "card:30 | cash:12.5"


def test_export_staff_csv_writes_file(store, tmp_path):
    dest = tmp_path / "exports" / "staff.csv"
    result = reports.export_staff_csv(store, DAY, dest)
    assert result == {"path": str(dest)}
    assert dest.read_text(encoding="utf-8") == reports.render_staff_csv(store, DAY)


@pytest.mark.parametrize("fn", [reports.get_daily_summary, reports.get_daily_jobs, reports.get_reservations_by_date])
def test_reports_reject_bad_dates(store, fn):
    with pytest.raises(ValidationFailed):
        fn(store, "not-a-date")


def test_staff_csv_quotes_staff_names(store):
    store.run("INSERT INTO staff (name, role) VALUES (:name, 'staff')", {"name": 'Smith, "Jr."'})
    member = store.get("SELECT id FROM staff WHERE name = :name", {"name": 'Smith, "Jr."'})
    _bill_on(store, f"{DAY} 10:00:00", payment_method="card", items=[{"price": 25, "staff_id": member["id"]}])

    lines = reports.render_staff_csv(store, DAY).split("\n")
    assert 'STAFF_SUMMARY,"Smith, ""Jr.""",,,0,1,25,card:25' in lines
    row = next(r for r in csv.reader(io.StringIO("\n".join(lines))) if r[:1] == ["STAFF_SUMMARY"] and "Smith" in r[1])
    assert row[1] == 'Smith, "Jr."'

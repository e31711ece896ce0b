def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["database"] == "open"


def test_lists_channels(client):
    channels = client.get("/ipc").json()["channels"]
    assert "bills:create" in channels
    assert "reports:exportStaffCsv" in channels


def test_success_envelope(ipc):
    res = ipc("categories:getAll")
    assert res["success"] is True
    assert [c["name"] for c in res["data"]][:2] == ["HOME", "Hair"]


def test_unknown_channel(ipc):
    assert ipc("nope:nothing") == {"success": False, "error": "Unknown channel: nope:nothing"}


def test_validation_error_envelope(ipc):
    res = ipc("services:create", {"name": "", "price": 10, "category": "Hair"})
    assert res["success"] is False
    assert "name" in res["error"]


def test_wrong_arguments_become_an_error_envelope(ipc):
    res = ipc("services:get")
    assert res["success"] is False
    assert res["error"]


def test_home_category_delete_is_refused(ipc):
    home = next(c for c in ipc("categories:getAll")["data"] if c["name"] == "HOME")
    res = ipc("categories:delete", home["id"])
    assert res == {"success": False, "error": "Home category cannot be deleted"}
    assert any(c["id"] == home["id"] for c in ipc("categories:getAll")["data"])


def test_checkout_flow(ipc):
    customer = ipc("customers:create", {"name": "Ana", "phone": "555-0101"})["data"]
    service = ipc("services:create", {"name": "Trim", "price": 10, "category": "Hair", "show_on_home": True})["data"]
    assert [s["id"] for s in ipc("services:getHome")["data"]] == [service["id"]]

    bill = ipc(
        "bills:create",
        {
            "customer_id": customer["id"],
            "discount_amount": 3,
            "items": [{"service_id": service["id"], "quantity": 2, "staff_id": 2}, {"price": 5}],
        },
    )["data"]
    assert (bill["subtotal"], bill["total"]) == (25, 22)

    customer = ipc("customers:get", customer["id"])["data"]
    assert (customer["visits"], customer["loyalty_points"]) == (1, 2)
    assert ipc("bills:get", bill["id"])["data"]["items"][0]["staff_name"] == "Staff 1"
    assert len(ipc("bills:getAll", {"limit": 10})["data"]) == 1


def test_staff_clock_and_daily_report(ipc):
    log = ipc("staff:clockIn", 2)["data"]
    status = ipc("staff:clockStatus", 2, log["clock_in"][:10])["data"]
    assert status["open_log"]["id"] == log["id"]
    assert ipc("staff:clockOut", log["id"])["success"] is True

    report = ipc("reports:staffDaily", log["clock_in"][:10], True)["data"]
    assert {r["staff_name"] for r in report} == {"Admin", "Staff 1", "Staff 2"}


def test_verify_pin_locks_after_three_failures(ipc):
    assert ipc("admin:verifyPin", "12345")["data"] == {"valid": True}
    for _ in range(3):
        assert ipc("admin:verifyPin", "00000")["data"] == {"valid": False}
    res = ipc("admin:verifyPin", "12345")
    assert res["success"] is False
    assert "Too many" in res["error"]


def test_settings_channels(ipc):
    assert ipc("settings:get", "business_name")["data"] == "VanisBeauty"
    assert ipc("settings:set", "admin_pin", "123")["success"] is False
    assert ipc("settings:set", "admin_pin", "67890")["success"] is True
    assert ipc("settings:getAll")["data"]["admin_pin"] == "67890"


def test_reservation_channels(ipc):
    res = ipc("reservations:create", {"start_time": "2024-03-05 10:00", "customer_name": "Ana"})["data"]
    assert ipc("reservations:update", res["id"], {"status": "confirmed"})["data"]["status"] == "confirmed"
    assert ipc("reservations:cancel", res["id"])["data"]["status"] == "cancelled"
    rows = ipc("reports:reservationsByDate", "2024-03-05")["data"]
    assert [r["id"] for r in rows] == [res["id"]]


def test_backup_and_app_info(ipc, tmp_path):
    dest = tmp_path / "backups" / "pos-backup.db"
    res = ipc("database:backup", str(dest))
    assert res["success"] is True
    assert dest.exists()

    ipc("customers:create", {"name": "After backup"})
    assert ipc("database:restore", str(dest))["success"] is True
    assert ipc("customers:getAll")["data"] == []

    info = ipc("app:getInfo")["data"]
    assert info["version"]
    assert info["data_path"] == str(tmp_path / "data")


def test_export_csv_channel(ipc, tmp_path):
    dest = tmp_path / "staff.csv"
    res = ipc("reports:exportStaffCsv", "2024-03-05", str(dest))
    assert res == {"success": True, "data": {"path": str(dest)}}
    assert dest.read_text(encoding="utf-8").startswith("Section,Staff,")


def test_csv_download(client):
    r = client.get("/reports/staff/export.csv", params={"date": "2024-03-05"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert "staff-report-2024-03-05.csv" in r.headers["content-disposition"]
    assert r.text.splitlines()[0].startswith("Section,Staff,Clock In")

    assert client.get("/reports/staff/export.csv", params={"date": "bad"}).status_code == 400

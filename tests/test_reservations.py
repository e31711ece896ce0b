import pytest

from salon_pos.errors import NotFound, ValidationFailed
from salon_pos.services import reservations


def test_create_normalizes_times(store):
    res = reservations.create_reservation(
        store,
        {"start_time": "2024-03-05T10:00", "end_time": "2024-03-05 11:15", "staff_id": 3, "customer_name": "Ana"},
    )
    assert res["start_time"] == "2024-03-05 10:00:00"
    assert res["end_time"] == "2024-03-05 11:15:00"
    assert res["status"] == "scheduled"
    assert res["staff_name"] == "Staff 2"


@pytest.mark.parametrize(
    "data",
    [
        {"start_time": "tomorrow"},
        {"start_time": "2024-03-05 10:00", "status": "no-show"},
        {"start_time": "2024-03-05 10:00", "end_time": "2024-03-05 09:00"},
        {"customer_name": "No start"},
    ],
)
def test_create_rejects_bad_payloads(store, data):
    with pytest.raises(ValidationFailed):
        reservations.create_reservation(store, data)


def test_create_rejects_unknown_staff(store):
    with pytest.raises(NotFound):
        reservations.create_reservation(store, {"start_time": "2024-03-05 10:00", "staff_id": 99})


def test_update_is_a_patch(store):
    res = reservations.create_reservation(
        store, {"start_time": "2024-03-05 10:00", "end_time": "2024-03-05 11:00", "notes": "first visit"}
    )
    updated = reservations.update_reservation(store, res["id"], {"status": "confirmed", "staff_id": 2})
    assert updated["status"] == "confirmed"
    assert updated["staff_name"] == "Staff 1"
    assert updated["notes"] == "first visit"
    assert updated["start_time"] == res["start_time"]


def test_update_checks_merged_times(store):
    res = reservations.create_reservation(
        store, {"start_time": "2024-03-05 10:00", "end_time": "2024-03-05 11:00"}
    )
    with pytest.raises(ValidationFailed):
        reservations.update_reservation(store, res["id"], {"start_time": "2024-03-05 12:00"})
    assert reservations.get_reservation(store, res["id"])["start_time"] == "2024-03-05 10:00:00"


def test_cancel(store):
    res = reservations.create_reservation(store, {"start_time": "2024-03-05 10:00"})
    assert reservations.cancel_reservation(store, res["id"])["status"] == "cancelled"
    with pytest.raises(NotFound):
        reservations.cancel_reservation(store, 999)

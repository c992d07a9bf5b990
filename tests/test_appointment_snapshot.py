from __future__ import annotations

from datetime import datetime

from conftest import raw_appointment

from clinic_notify.services.appointment.appointment_snapshot import AppointmentSnapshot


def test_from_raw_drops_structurally_invalid_records(now, in_hours) -> None:
    raw = [
        raw_appointment("a1", in_hours(5)),
        {"_id": "no-date", "serviceName": "Filling", "time": "2:00 PM", "status": "pending"},
        raw_appointment("blank-date", date="  "),
        {"serviceName": "No id", "date": "2025-10-20", "time": "2:00 PM"},
        "not an object",
        raw_appointment("a2", in_hours(8)),
    ]
    snapshot = AppointmentSnapshot.from_raw(raw)
    assert [r.id for r in snapshot] == ["a1", "a2"]


def test_from_raw_keeps_records_with_bad_time(now) -> None:
    snapshot = AppointmentSnapshot.from_raw([raw_appointment("a1", time="noon-ish")])
    assert len(snapshot) == 1
    assert snapshot.records[0].instant() is None


def test_record_fields_are_mapped(now, in_hours) -> None:
    record = AppointmentSnapshot.from_raw(
        [raw_appointment("a1", in_hours(5), status=" Accepted ", description="Sensitive tooth")]
    ).records[0]

    assert record.service_name == "Teeth Cleaning"
    assert record.status == "accepted"
    assert record.description == "Sensitive tooth"
    assert record.instant() == datetime(2025, 10, 20, 18, 30)
    assert record.updated_at == datetime(2025, 10, 18, 8, 0)


def test_numeric_ids_and_iso_dates_are_accepted() -> None:
    record = AppointmentSnapshot.from_raw(
        [{"id": 42, "date": "2025-10-20T00:00:00.000Z", "time": "9:05 am", "status": None}]
    ).records[0]
    assert record.id == "42"
    assert record.status == "pending"
    assert record.instant() == datetime(2025, 10, 20, 9, 5)
    assert record.display_date == "10/20/2025"


def test_unparsable_timestamps_are_ignored() -> None:
    record = AppointmentSnapshot.from_raw(
        [raw_appointment("a1", updatedAt="yesterday", createdAt="2025-10-01T08:00:00")]
    ).records[0]
    assert record.updated_at is None
    assert record.status_changed_at == datetime(2025, 10, 1, 8, 0)


def test_active_excludes_closed_and_unresolvable(now, in_hours) -> None:
    snapshot = AppointmentSnapshot.from_raw([
        raw_appointment("pending", in_hours(5)),
        raw_appointment("accepted-past", in_hours(-50), status="accepted"),
        raw_appointment("cancelled", in_hours(5), status="cancelled"),
        raw_appointment("completed", in_hours(5), status="completed"),
        raw_appointment("bad-time", status="accepted", time="??"),
    ])
    assert [r.id for r in snapshot.active()] == ["pending", "accepted-past"]


def test_upcoming_starts_at_beginning_of_today_sorted(now, in_hours) -> None:
    snapshot = AppointmentSnapshot.from_raw([
        raw_appointment("next-week", in_hours(24 * 7)),
        raw_appointment("this-morning", datetime(2025, 10, 20, 8, 0)),
        raw_appointment("yesterday", in_hours(-24)),
        raw_appointment("tonight", in_hours(5), status="accepted"),
        raw_appointment("cancelled", in_hours(2), status="cancelled"),
    ])
    assert [r.id for r in snapshot.upcoming(now)] == ["this-morning", "tonight", "next-week"]


def test_stats_counts_statuses() -> None:
    snapshot = AppointmentSnapshot.from_raw([
        raw_appointment("a1", status="pending"),
        raw_appointment("a2", status="Pending"),
        raw_appointment("a3", status="accepted"),
        raw_appointment("a4", status="completed"),
        raw_appointment("a5", status="cancelled"),
    ])
    stats = snapshot.stats()
    assert stats.total == 5
    assert stats.pending == 2
    assert stats.accepted == 1
    assert stats.completed == 1


def test_non_string_optional_fields_do_not_drop_the_record() -> None:
    snapshot = AppointmentSnapshot.from_raw([
        raw_appointment("a1", status="accepted", phone=5550100),
        raw_appointment("a2", serviceName=None, fullname=None),
        raw_appointment("a3", description={"note": "bring x-rays"}),
    ])
    assert [r.id for r in snapshot] == ["a1", "a2", "a3"]
    first, second, third = snapshot.records
    assert first.phone == "5550100"
    assert second.service_name == ""
    assert second.fullname is None
    assert third.description is None

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from conftest import make_appointment

from clinic_notify.core.exceptions import ReminderSinkError
from clinic_notify.schemas.notification import ReminderKind, ReminderPayload
from clinic_notify.services.notification.reminder_scheduler import ReminderScheduler, plan_reminders
from clinic_notify.services.notification.reminder_sink import InMemoryReminderSink


class RecordingSink(InMemoryReminderSink):
    """Remembers the order of calls and rejects chosen appointments."""

    def __init__(self, reject=(), fail_cancel=False):
        super().__init__()
        self.calls = []
        self.reject = set(reject)
        self.fail_cancel = fail_cancel

    async def cancel_all(self) -> None:
        self.calls.append("cancel_all")
        if self.fail_cancel:
            raise ReminderSinkError("sink offline")
        await super().cancel_all()

    async def schedule_at(self, payload: ReminderPayload, fire_at: datetime) -> None:
        self.calls.append("schedule_at")
        if payload.appointment_id in self.reject:
            raise ReminderSinkError("rejected")
        await super().schedule_at(payload, fire_at)


def run_schedule(sink, appointments, now):
    return asyncio.run(ReminderScheduler(sink).schedule(appointments, now))


def test_future_appointment_gets_day_and_hour_reminders(now, in_hours) -> None:
    sink = InMemoryReminderSink()
    report = run_schedule(sink, [make_appointment("a1", in_hours(48), service="Root Canal")], now)

    assert report.cancelled is True
    assert report.submitted == 2
    assert sink.cancel_calls == 1

    by_kind = {r.payload.kind: r for r in sink.scheduled}
    day_before = by_kind[ReminderKind.DAY_BEFORE]
    hour_before = by_kind[ReminderKind.HOUR_BEFORE]
    assert day_before.fire_at == in_hours(24)
    assert day_before.payload.body == "Tomorrow: Root Canal at 1:30 PM"
    assert day_before.payload.title == "Appointment Reminder"
    assert hour_before.fire_at == in_hours(47)
    assert hour_before.payload.body == "Root Canal in 1 hour at 1:30 PM"
    assert hour_before.payload.title == "Appointment Soon!"
    assert {r.payload.appointment_id for r in sink.scheduled} == {"a1"}


def test_past_fire_times_are_skipped(now, in_hours) -> None:
    sink = InMemoryReminderSink()
    report = run_schedule(sink, [make_appointment("a1", in_hours(5))], now)

    assert report.submitted == 1
    assert report.skipped == 1
    assert [r.payload.kind for r in sink.scheduled] == [ReminderKind.HOUR_BEFORE]


def test_fire_time_equal_to_now_is_skipped(now, in_hours) -> None:
    planned, skipped = plan_reminders(make_appointment("a1", in_hours(1)), now)
    assert planned == []
    assert skipped == 2


def test_past_appointment_gets_no_reminders(now, in_hours) -> None:
    sink = InMemoryReminderSink()
    report = run_schedule(sink, [make_appointment("a1", in_hours(-2))], now)
    assert report.submitted == 0
    assert sink.scheduled == []
    assert sink.cancel_calls == 1


def test_inactive_appointments_are_ignored(now, in_hours) -> None:
    sink = InMemoryReminderSink()
    appointments = [
        make_appointment("cancelled", in_hours(48), status="cancelled"),
        make_appointment("completed", in_hours(48), status="Completed"),
        make_appointment("no-time", status="accepted", date="2025-10-25", time=""),
    ]
    report = run_schedule(sink, appointments, now)
    assert report.submitted == 0
    assert sink.scheduled == []


def test_submissions_per_appointment_are_bounded(now, in_hours) -> None:
    sink = InMemoryReminderSink()
    appointments = [make_appointment(f"a{i}", in_hours(h)) for i, h in enumerate([-30, -1, 0.5, 3, 23, 25, 100])]
    run_schedule(sink, appointments, now)

    per_appointment = {}
    for reminder in sink.scheduled:
        per_appointment[reminder.payload.appointment_id] = per_appointment.get(reminder.payload.appointment_id, 0) + 1
    assert all(0 < count <= 2 for count in per_appointment.values())
    assert per_appointment.get("a5") == 2
    assert per_appointment.get("a6") == 2
    assert "a0" not in per_appointment
    assert "a2" not in per_appointment


def test_previous_schedule_is_replaced(now, in_hours) -> None:
    sink = InMemoryReminderSink()
    run_schedule(sink, [make_appointment("old", in_hours(48))], now)
    run_schedule(sink, [make_appointment("new", in_hours(48))], now)

    assert sink.cancel_calls == 2
    assert {r.payload.appointment_id for r in sink.scheduled} == {"new"}


def test_cancel_happens_before_any_submission(now, in_hours) -> None:
    sink = RecordingSink()
    run_schedule(sink, [make_appointment("a1", in_hours(48)), make_appointment("a2", in_hours(72))], now)
    assert sink.calls[0] == "cancel_all"
    assert sink.calls.count("cancel_all") == 1
    assert sink.calls.count("schedule_at") == 4


def test_rejection_for_one_appointment_does_not_stop_others(now, in_hours) -> None:
    sink = RecordingSink(reject={"a1"})
    report = run_schedule(sink, [make_appointment("a1", in_hours(48)), make_appointment("a2", in_hours(48))], now)

    assert report.failed == 2
    assert report.submitted == 2
    assert {r.payload.appointment_id for r in sink.scheduled} == {"a2"}


def test_failed_cancel_submits_nothing(now, in_hours) -> None:
    sink = RecordingSink(fail_cancel=True)
    report = run_schedule(sink, [make_appointment("a1", in_hours(48))], now)

    assert report.cancelled is False
    assert report.submitted == 0
    assert sink.calls == ["cancel_all"]


def test_aware_now_produces_aware_fire_times(in_hours) -> None:
    now = datetime(2025, 10, 20, 13, 30, tzinfo=timezone.utc)
    sink = InMemoryReminderSink()
    run_schedule(sink, [make_appointment("a1", datetime(2025, 10, 22, 13, 30))], now)
    assert {r.fire_at for r in sink.scheduled} == {
        now + timedelta(hours=24),
        now + timedelta(hours=47),
    }


def test_fire_times_are_elapsed_offsets_across_dst_end() -> None:
    new_york = ZoneInfo("America/New_York")
    now = datetime(2025, 11, 1, 13, 30, tzinfo=new_york)
    appointment = make_appointment("a1", status="accepted", date="2025-11-02", time="1:00 PM")
    planned, skipped = plan_reminders(appointment, now)
    instant = datetime(2025, 11, 2, 13, 0, tzinfo=new_york)

    fire_times = {payload.kind: fire_at for payload, fire_at in planned}
    assert skipped == 0
    assert instant - fire_times[ReminderKind.DAY_BEFORE] == timedelta(hours=24)
    assert instant - fire_times[ReminderKind.HOUR_BEFORE] == timedelta(hours=1)
    assert fire_times[ReminderKind.DAY_BEFORE] == datetime(2025, 11, 1, 18, 0, tzinfo=timezone.utc)


def test_day_before_reminder_in_the_past_across_dst_start_is_skipped() -> None:
    # 23.5 real hours before the appointment, so the day-before time has passed
    now = datetime(2025, 3, 8, 13, 30, tzinfo=ZoneInfo("America/New_York"))
    appointment = make_appointment("a1", status="accepted", date="2025-03-09", time="2:00 PM")
    planned, skipped = plan_reminders(appointment, now)
    assert [payload.kind for payload, _ in planned] == [ReminderKind.HOUR_BEFORE]
    assert skipped == 1

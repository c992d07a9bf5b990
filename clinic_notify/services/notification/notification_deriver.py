# ============================================================================
# clinic_notify/services/notification/notification_deriver.py
# Pure business logic: (appointments, now) -> notification events
# ============================================================================
from datetime import datetime
from typing import Iterable, List, Optional

from clinic_notify.schemas.appointment import AppointmentRecord, AppointmentStatus
from clinic_notify.schemas.notification import NotificationEvent, NotificationKind
from clinic_notify.utils.datetime_utils import align_to, to_utc

RECEIPT_HINT = "receipt"

# status -> (kind, title)
STATUS_NOTIFICATIONS = {
    AppointmentStatus.ACCEPTED: (NotificationKind.ACCEPTED, "Appointment Accepted"),
    AppointmentStatus.CANCELLED: (NotificationKind.CANCELLED, "Appointment Cancelled"),
    AppointmentStatus.RESCHEDULED: (NotificationKind.RESCHEDULED, "Appointment Rescheduled"),
    AppointmentStatus.COMPLETED: (NotificationKind.COMPLETED, "Appointment Completed"),
}


def hours_until(instant: datetime, now: datetime) -> float:
    """Signed elapsed hours from ``now`` to ``instant``, DST changes included."""
    return (to_utc(instant) - to_utc(now)).total_seconds() / 3600


def derive_notifications(
        appointments: Iterable[AppointmentRecord],
        now: datetime
) -> List[NotificationEvent]:
    """
    Derive the inbox for one refresh.

    Instants are read in ``now``'s time zone. Records whose date or time
    can't be parsed still get their status notification but no
    time-relative ones. The result is newest first; events with the same
    timestamp keep input order.
    """
    events: List[NotificationEvent] = []
    for appointment in appointments:
        status_event = _status_event(appointment, now)
        if status_event is not None:
            events.append(status_event)

        instant = appointment.instant(now.tzinfo)
        if instant is None:
            continue
        time_event = _time_event(appointment, hours_until(instant, now), now)
        if time_event is not None:
            events.append(time_event)

    # sorted() is stable with reverse=True, ties stay in input order
    return sorted(events, key=lambda e: e.occurred_at, reverse=True)


def unread_count(events: Iterable[NotificationEvent]) -> int:
    return sum(1 for e in events if not e.read)


def _status_event(appointment: AppointmentRecord, now: datetime) -> Optional[NotificationEvent]:
    try:
        status = AppointmentStatus(appointment.status)
    except ValueError:
        return None
    if status not in STATUS_NOTIFICATIONS:
        return None

    kind, title = STATUS_NOTIFICATIONS[status]
    service = appointment.service_name
    date_text = appointment.display_date
    time_text = appointment.display_time

    navigate_hint = None
    if kind == NotificationKind.ACCEPTED:
        message = f"Your appointment for {service} on {date_text} at {time_text} has been accepted."
    elif kind == NotificationKind.CANCELLED:
        message = f"Your appointment for {service} on {date_text} has been cancelled."
    elif kind == NotificationKind.RESCHEDULED:
        message = f"Your appointment for {service} has been rescheduled to {date_text} at {time_text}."
    else:
        message = f"Your appointment for {service} has been completed. Tap to view receipt."
        navigate_hint = RECEIPT_HINT

    changed_at = appointment.status_changed_at
    occurred_at = align_to(changed_at, now) if changed_at else now

    return _event(appointment, kind, title, message, occurred_at, navigate_hint)


def _time_event(appointment: AppointmentRecord, hours: float, now: datetime) -> Optional[NotificationEvent]:
    service = appointment.service_name
    time_text = appointment.display_time

    if 1 < hours <= 24:
        return _event(
            appointment,
            NotificationKind.TODAY,
            "Appointment Today",
            f"You have an appointment for {service} today at {time_text}.",
            now,
        )

    if 0 < hours <= 1:
        return _event(
            appointment,
            NotificationKind.SOON,
            "Appointment in 1 Hour",
            f"Your appointment for {service} is in less than 1 hour at {time_text}.",
            now,
        )

    if -24 < hours < 0 and not appointment.is_closed:
        return _event(
            appointment,
            NotificationKind.MISSED,
            "Missed Appointment",
            f"You missed your appointment for {service} scheduled at {time_text} on {appointment.display_date}.",
            now,
        )

    return None


def _event(
        appointment: AppointmentRecord,
        kind: NotificationKind,
        title: str,
        message: str,
        occurred_at: datetime,
        navigate_hint: Optional[str] = None
) -> NotificationEvent:
    return NotificationEvent(
        id=NotificationEvent.make_id(appointment.id, kind),
        kind=kind,
        title=title,
        message=message,
        occurred_at=occurred_at,
        appointment_id=appointment.id,
        navigate_hint=navigate_hint,
    )

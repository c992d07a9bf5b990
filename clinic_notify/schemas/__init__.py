# clinic_notify/schemas/__init__.py
from .appointment import (
    AppointmentRecord,
    AppointmentStatus
)

from .notification import (
    NotificationEvent,
    NotificationKind,
    ReminderKind,
    ReminderPayload,
    ScheduledReminder,
    InboxResponse,
    AppointmentStats
)

__all__ = [
    "AppointmentRecord",
    "AppointmentStatus",
    "NotificationEvent",
    "NotificationKind",
    "ReminderKind",
    "ReminderPayload",
    "ScheduledReminder",
    "InboxResponse",
    "AppointmentStats",
]

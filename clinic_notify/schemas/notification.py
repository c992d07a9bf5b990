# clinic_notify/schemas/notification.py
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


class NotificationKind(str, Enum):
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"
    COMPLETED = "completed"
    TODAY = "today"
    SOON = "soon"
    MISSED = "missed"


class ReminderKind(str, Enum):
    DAY_BEFORE = "day_before"
    HOUR_BEFORE = "hour_before"


class NotificationEvent(BaseModel):
    """User-facing alert derived from an appointment"""
    id: str = Field(..., description="Stable identity: '{appointment_id}-{kind}'")
    kind: NotificationKind
    title: str
    message: str
    occurred_at: datetime = Field(..., description="Used for ordering and display")
    read: bool = Field(False)
    appointment_id: str
    navigate_hint: Optional[str] = Field(None, description="Screen the UI should open, e.g. 'receipt'")

    @staticmethod
    def make_id(appointment_id: str, kind: NotificationKind) -> str:
        return f"{appointment_id}-{kind.value}"


class ReminderPayload(BaseModel):
    """Content handed to the reminder sink"""
    appointment_id: str
    kind: ReminderKind
    title: str
    body: str


class ScheduledReminder(BaseModel):
    """A reminder request as submitted to the sink"""
    payload: ReminderPayload
    fire_at: datetime


class InboxResponse(BaseModel):
    unread_count: int
    notifications: List[NotificationEvent]


class AppointmentStats(BaseModel):
    total: int = 0
    pending: int = 0
    accepted: int = 0
    completed: int = 0

# clinic_notify/schemas/appointment.py
from __future__ import annotations
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Any
from datetime import datetime, date, tzinfo
from enum import Enum

from clinic_notify.utils.datetime_utils import combine_instant, format_display_date


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"
    COMPLETED = "completed"


CLOSED_STATUSES = frozenset({AppointmentStatus.CANCELLED.value, AppointmentStatus.COMPLETED.value})


class AppointmentRecord(BaseModel):
    """Booked service as returned by the booking backend, read-only per refresh"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("_id", "id"), description="Backend record id")
    service_name: str = Field("", validation_alias=AliasChoices("serviceName", "service_name"))
    appointment_date: str = Field(..., validation_alias=AliasChoices("date", "appointment_date"),
                                  description="Calendar date, no time zone")
    appointment_time: Optional[str] = Field(None, validation_alias=AliasChoices("time", "appointment_time"),
                                            description="Local clock time, e.g. '2:00 PM'")
    status: str = Field("pending", description="pending, accepted, cancelled, rescheduled, completed")
    fullname: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = Field(None, validation_alias=AliasChoices("createdAt", "created_at"))
    updated_at: Optional[datetime] = Field(None, validation_alias=AliasChoices("updatedAt", "updated_at"))

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Appointment id is required")
        return str(v)

    @field_validator("service_name", mode="before")
    @classmethod
    def coerce_service_name(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("appointment_time", "fullname", "phone", "email", "description", mode="before")
    @classmethod
    def coerce_optional_text(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float, bool)):
            return str(v)
        return None

    @field_validator("appointment_date", mode="before")
    @classmethod
    def require_date(cls, v: Any) -> str:
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Appointment date is required")
        return v.strip()

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        if v is None:
            return AppointmentStatus.PENDING.value
        return str(v).strip().lower()

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> Optional[datetime]:
        if v is None or isinstance(v, datetime):
            return v
        if isinstance(v, str):
            try:
                return datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
            except ValueError:
                return None
        return None

    @property
    def display_date(self) -> str:
        return format_display_date(self.appointment_date)

    @property
    def display_time(self) -> str:
        return self.appointment_time or ""

    @property
    def status_changed_at(self) -> Optional[datetime]:
        """Timestamp of the last status change, as far as the backend tells us"""
        return self.updated_at or self.created_at

    def has_status(self, status: AppointmentStatus) -> bool:
        return self.status == status.value

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES

    def instant(self, tz: Optional[tzinfo] = None) -> Optional[datetime]:
        """Combined date and time, or None when either part is unparsable"""
        return combine_instant(self.appointment_date, self.appointment_time, tz)

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest

from clinic_notify.core.exceptions import AppointmentFetchError
from clinic_notify.schemas.appointment import AppointmentRecord


def clock(moment: datetime) -> str:
    """Render a datetime the way the booking backend stores times."""
    hours = moment.hour % 12 or 12
    meridiem = "PM" if moment.hour >= 12 else "AM"
    return f"{hours}:{moment.minute:02d} {meridiem}"


def raw_appointment(
        appointment_id: str,
        at: Optional[datetime] = None,
        status: str = "pending",
        service: str = "Teeth Cleaning",
        **overrides: Any
) -> Dict[str, Any]:
    raw = {
        "_id": appointment_id,
        "serviceName": service,
        "date": at.date().isoformat() if at else "2025-10-20",
        "time": clock(at) if at else "2:00 PM",
        "status": status,
        "fullname": "Ada Patient",
        "phone": "+15550100",
        "email": "ada@example.invalid",
        "createdAt": "2025-10-01T08:00:00",
        "updatedAt": "2025-10-18T08:00:00",
    }
    raw.update(overrides)
    return raw


def make_appointment(*args: Any, **kwargs: Any) -> AppointmentRecord:
    return AppointmentRecord.model_validate(raw_appointment(*args, **kwargs))


class FakeAppointmentSource:
    """Returns canned payloads, or raises when ``error`` is set."""

    def __init__(self, payload: Optional[List[Dict[str, Any]]] = None):
        self.payload = payload or []
        self.error: Optional[AppointmentFetchError] = None
        self.tokens: List[str] = []

    async def fetch(self, token: str) -> List[Dict[str, Any]]:
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return list(self.payload)

    async def close(self) -> None:
        pass


@pytest.fixture
def now() -> datetime:
    # 2025-10-20 13:30 local clinic time
    return datetime(2025, 10, 20, 13, 30)


@pytest.fixture
def in_hours(now):
    def _in_hours(hours: float) -> datetime:
        return now + timedelta(hours=hours)
    return _in_hours

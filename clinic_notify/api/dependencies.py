# ============================================================================
# FILE: clinic_notify/api/dependencies.py
# Request dependencies: bearer token and the patient's notification engine
# ============================================================================
import hashlib
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Dict, Optional

from clinic_notify.config.settings import get_settings
from clinic_notify.config.redis import get_redis
from clinic_notify.services.appointment.appointment_source import AppointmentSource
from clinic_notify.services.notification.notification_engine import NotificationEngine
from clinic_notify.services.notification.reminder_sink import create_reminder_sink

# The token is issued by the booking backend and forwarded as-is
patient_token_security = HTTPBearer(
    scheme_name="Patient Bearer Token",
    description="Access token issued by the booking backend",
    auto_error=False
)

# One engine (inbox, snapshot, reminder schedule) per patient token
_engines: Dict[str, NotificationEngine] = {}
_source: Optional[AppointmentSource] = None


async def get_patient_token(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(patient_token_security)
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


def patient_key(token: str) -> str:
    """Stable owner key for a token; the raw token never ends up in Redis keys or logs"""
    return hashlib.sha256(token.encode()).hexdigest()[:16]


def get_appointment_source() -> AppointmentSource:
    """HTTP client shared by all engines, the token is passed per fetch"""
    global _source
    if _source is None:
        settings = get_settings()
        _source = AppointmentSource(
            base_url=settings.APPOINTMENTS_API_URL,
            path=settings.APPOINTMENTS_PATH,
            timeout=settings.FETCH_TIMEOUT_SECONDS,
        )
    return _source


async def build_engine(owner: str) -> NotificationEngine:
    settings = get_settings()
    redis_client = await get_redis() if settings.REMINDER_SINK == "celery" else None

    return NotificationEngine(
        source=get_appointment_source(),
        sink=create_reminder_sink(settings.REMINDER_SINK, redis_client=redis_client, owner=owner),
        timezone=settings.CLINIC_TIMEZONE,
        preserve_read_state=settings.PRESERVE_READ_STATE,
    )


async def get_engine(token: str = Depends(get_patient_token)) -> NotificationEngine:
    """The calling patient's engine, built on first use"""
    owner = patient_key(token)
    engine = _engines.get(owner)
    if engine is None:
        engine = _engines.setdefault(owner, await build_engine(owner))
    return engine


async def close_engines() -> None:
    global _source
    _engines.clear()
    if _source is not None:
        await _source.close()
        _source = None

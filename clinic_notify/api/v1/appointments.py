# ============================================================================
# FILE: clinic_notify/api/v1/appointments.py
# Views over the last fetched appointment snapshot
# ============================================================================
from fastapi import APIRouter, Depends

from clinic_notify.api.dependencies import get_engine
from clinic_notify.schemas.notification import AppointmentStats
from clinic_notify.services.notification.notification_engine import NotificationEngine

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.get("/upcoming")
async def get_upcoming_appointments(engine: NotificationEngine = Depends(get_engine)):
    """
    Open appointments from today onwards, soonest first.
    Reflects the last successful refresh.
    """
    now = engine.now()
    upcoming = engine.snapshot.upcoming(now)
    return {
        "total_appointments": len(upcoming),
        "last_refreshed_at": engine.last_refreshed_at.isoformat() if engine.last_refreshed_at else None,
        "appointments": [
            {
                "id": appt.id,
                "service_name": appt.service_name,
                "date": appt.appointment_date,
                "time": appt.appointment_time,
                "status": appt.status,
                "description": appt.description,
            }
            for appt in upcoming
        ]
    }


@router.get("/stats", response_model=AppointmentStats)
async def get_appointment_stats(engine: NotificationEngine = Depends(get_engine)):
    return engine.snapshot.stats()

# ============================================================================
# FILE: clinic_notify/api/v1/notifications.py
# Notification inbox endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Path

from clinic_notify.api.dependencies import get_engine, get_patient_token
from clinic_notify.core.exceptions import AppointmentFetchError
from clinic_notify.schemas.notification import InboxResponse
from clinic_notify.services.notification.notification_engine import NotificationEngine

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _inbox_response(engine: NotificationEngine) -> InboxResponse:
    return InboxResponse(
        unread_count=engine.inbox.unread_count,
        notifications=engine.inbox.list()
    )


@router.post("/refresh")
async def refresh_notifications(
        token: str = Depends(get_patient_token),
        engine: NotificationEngine = Depends(get_engine)
):
    """
    Fetch appointments again, rebuild the inbox and reprogram reminders.
    On a backend failure the previous inbox is kept and 502 is returned.
    """
    try:
        result = await engine.refresh(token)
    except AppointmentFetchError as e:
        raise HTTPException(
            status_code=502,
            detail=f"Failed to load appointments: {e}"
        )

    return {
        "appointments": result.appointments,
        "notifications": result.notifications,
        "unread_count": result.unread,
        "reminders": {
            "cancelled_previous": result.reminders.cancelled,
            "submitted": result.reminders.submitted,
            "skipped": result.reminders.skipped,
            "failed": result.reminders.failed,
        },
    }


@router.get("", response_model=InboxResponse)
async def list_notifications(engine: NotificationEngine = Depends(get_engine)):
    """Current inbox, newest first."""
    return _inbox_response(engine)


@router.post("/read-all", response_model=InboxResponse)
async def mark_all_notifications_read(engine: NotificationEngine = Depends(get_engine)):
    engine.inbox.mark_all_read()
    return _inbox_response(engine)


@router.post("/{event_id}/read", response_model=InboxResponse)
async def mark_notification_read(
        event_id: str = Path(..., description="Notification id, '{appointment_id}-{kind}'"),
        engine: NotificationEngine = Depends(get_engine)
):
    """Unknown ids leave the inbox unchanged."""
    engine.inbox.mark_read(event_id)
    return _inbox_response(engine)

# ===== clinic_notify/tasks/reminder_tasks.py =====
import logging

import httpx

from clinic_notify.config.celery_config import celery_app
from clinic_notify.config.settings import get_settings

logger = logging.getLogger(__name__)


@celery_app.task(name="clinic_notify.tasks.reminder_tasks.deliver_reminder", bind=True, max_retries=3)
def deliver_reminder(
        self,
        appointment_id: str,
        kind: str,
        title: str,
        body: str
):
    """
    Deliver a reminder once its ETA is reached

    Args:
        appointment_id: Appointment the reminder belongs to
        kind: day_before or hour_before
        title: Notification title
        body: Notification body
    """
    settings = get_settings()
    payload = {
        "title": title,
        "body": body,
        "data": {"appointment_id": appointment_id, "kind": kind},
    }

    if not settings.PUSH_GATEWAY_URL:
        logger.info(f"Reminder due for appointment {appointment_id} ({kind}): {title} - {body}")
        return {"status": "logged", "appointment_id": appointment_id}

    try:
        response = httpx.post(
            settings.PUSH_GATEWAY_URL,
            json=payload,
            timeout=settings.PUSH_TIMEOUT_SECONDS
        )
        response.raise_for_status()

        logger.info(f"Reminder delivered for appointment {appointment_id} ({kind})")
        return {"status": "delivered", "appointment_id": appointment_id}

    except httpx.HTTPError as exc:
        logger.error(f"Failed to deliver reminder for appointment {appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )

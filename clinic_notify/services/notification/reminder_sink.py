# ============================================================================
# clinic_notify/services/notification/reminder_sink.py
# Delivery sinks for time-triggered reminders
# ============================================================================
import asyncio
import logging
from datetime import datetime
from typing import List, Optional, Protocol

from clinic_notify.config.redis import RedisKeys
from clinic_notify.core.exceptions import ReminderSinkError
from clinic_notify.schemas.notification import ReminderPayload, ScheduledReminder

logger = logging.getLogger(__name__)


class ReminderSink(Protocol):
    """Something that delivers a payload at a given time."""

    async def cancel_all(self) -> None:
        ...

    async def schedule_at(self, payload: ReminderPayload, fire_at: datetime) -> None:
        ...


class InMemoryReminderSink:
    """Keeps reminder requests in a list. Used in tests and local development."""

    def __init__(self):
        self.scheduled: List[ScheduledReminder] = []
        self.cancel_calls = 0

    async def cancel_all(self) -> None:
        self.cancel_calls += 1
        self.scheduled.clear()

    async def schedule_at(self, payload: ReminderPayload, fire_at: datetime) -> None:
        self.scheduled.append(ScheduledReminder(payload=payload, fire_at=fire_at))


class CeleryReminderSink:
    """
    Queues ``deliver_reminder`` with an ETA and tracks the task ids in Redis
    so that ``cancel_all`` can revoke them.
    """

    def __init__(self, redis_client, celery_app=None, owner: str = "default"):
        self.redis = redis_client
        self.owner = owner
        self._celery_app = celery_app

    @property
    def key(self) -> str:
        return RedisKeys.SCHEDULED_REMINDERS.format(owner=self.owner)

    @property
    def celery_app(self):
        if self._celery_app is None:
            from clinic_notify.config.celery_config import celery_app
            self._celery_app = celery_app
        return self._celery_app

    async def cancel_all(self) -> None:
        try:
            task_ids = await self.redis.smembers(self.key)
            ids = [t.decode() if isinstance(t, bytes) else t for t in task_ids]
            if ids:
                # broker round trips are blocking calls
                await asyncio.to_thread(self.celery_app.control.revoke, ids)
            await self.redis.delete(self.key)
        except Exception as e:
            raise ReminderSinkError(f"Could not cancel scheduled reminders: {e}") from e

        logger.info(f"Revoked {len(ids)} scheduled reminder(s) for {self.owner}")

    async def schedule_at(self, payload: ReminderPayload, fire_at: datetime) -> None:
        try:
            result = await asyncio.to_thread(
                self.celery_app.send_task,
                "clinic_notify.tasks.reminder_tasks.deliver_reminder",
                kwargs=payload.model_dump(mode="json"),
                eta=fire_at,
            )
            await self.redis.sadd(self.key, result.id)
        except Exception as e:
            raise ReminderSinkError(
                f"Could not schedule {payload.kind.value} reminder for {payload.appointment_id}: {e}"
            ) from e


def create_reminder_sink(kind: str, redis_client=None, owner: Optional[str] = None) -> ReminderSink:
    """Build the sink selected by ``REMINDER_SINK``."""
    if kind == "memory":
        return InMemoryReminderSink()
    if kind == "celery":
        if redis_client is None:
            raise ValueError("The celery reminder sink needs a Redis client")
        return CeleryReminderSink(redis_client, owner=owner or "default")
    raise ValueError(f"Unsupported reminder sink: {kind}")

# ============================================================================
# clinic_notify/services/notification/notification_engine.py
# One refresh cycle: fetch -> snapshot -> derive -> inbox -> reminders
# ============================================================================
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from clinic_notify.core.exceptions import AppointmentFetchError
from clinic_notify.services.appointment.appointment_snapshot import AppointmentSnapshot
from clinic_notify.services.appointment.appointment_source import AppointmentSource
from clinic_notify.services.notification.notification_deriver import derive_notifications
from clinic_notify.services.notification.notification_inbox import NotificationInbox
from clinic_notify.services.notification.reminder_scheduler import ReminderScheduler, ScheduleReport
from clinic_notify.services.notification.reminder_sink import ReminderSink

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    appointments: int
    notifications: int
    unread: int
    reminders: ScheduleReport = field(default_factory=ScheduleReport)


class NotificationEngine:
    """
    Owns the snapshot and inbox of a single patient session.

    Refreshes run sequentially on the event loop; there is no lock, so two
    overlapping refreshes may leave a stale schedule behind.
    """

    def __init__(
            self,
            source: AppointmentSource,
            sink: ReminderSink,
            timezone: str = "UTC",
            preserve_read_state: bool = False
    ):
        self.source = source
        self.scheduler = ReminderScheduler(sink)
        self.inbox = NotificationInbox(preserve_read_state=preserve_read_state)
        self.tz = ZoneInfo(timezone)
        self.snapshot = AppointmentSnapshot([])
        self.last_refreshed_at: Optional[datetime] = None

    def now(self) -> datetime:
        return datetime.now(self.tz)

    async def refresh(self, token: str, now: Optional[datetime] = None) -> RefreshResult:
        """
        Run one refresh.

        Raises:
            AppointmentFetchError: the backend gave no data; snapshot, inbox
                and reminders are left as they were
        """
        try:
            raw = await self.source.fetch(token)
        except AppointmentFetchError as e:
            logger.warning(f"Refresh skipped, previous notifications kept: {e}")
            raise

        now = now or self.now()
        snapshot = AppointmentSnapshot.from_raw(raw)
        events = derive_notifications(snapshot, now)

        self.snapshot = snapshot
        self.inbox.replace(events)
        self.last_refreshed_at = now

        report = await self.scheduler.schedule(snapshot.active(now.tzinfo), now)

        logger.info(
            f"Refresh complete: {len(snapshot)} appointment(s), "
            f"{len(events)} notification(s), {self.inbox.unread_count} unread"
        )
        return RefreshResult(
            appointments=len(snapshot),
            notifications=len(events),
            unread=self.inbox.unread_count,
            reminders=report,
        )

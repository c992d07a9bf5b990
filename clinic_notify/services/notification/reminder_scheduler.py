# ============================================================================
# clinic_notify/services/notification/reminder_scheduler.py
# Replaces the sink's schedule with day-before / hour-before reminders
# ============================================================================
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Tuple

from clinic_notify.schemas.appointment import AppointmentRecord
from clinic_notify.schemas.notification import ReminderKind, ReminderPayload
from clinic_notify.services.appointment.appointment_snapshot import is_active
from clinic_notify.services.notification.reminder_sink import ReminderSink
from clinic_notify.utils.datetime_utils import to_utc

logger = logging.getLogger(__name__)

DAY_BEFORE = timedelta(hours=24)
HOUR_BEFORE = timedelta(hours=1)


@dataclass
class ScheduleReport:
    cancelled: bool = False
    submitted: int = 0
    skipped: int = 0
    failed: int = 0


def plan_reminders(
        appointment: AppointmentRecord,
        now: datetime
) -> Tuple[List[Tuple[ReminderPayload, datetime]], int]:
    """
    Reminder requests for one appointment.

    Returns the (payload, fire_at) pairs still in the future and the number
    of candidates skipped because their fire time has passed.
    """
    # fire times are computed in UTC so they stay 24h / 1h of elapsed time across DST
    instant = appointment.instant(now.tzinfo)
    if instant is None:
        return [], 0

    service = appointment.service_name
    time_text = appointment.display_time
    candidates = [
        (
            ReminderPayload(
                appointment_id=appointment.id,
                kind=ReminderKind.DAY_BEFORE,
                title="Appointment Reminder",
                body=f"Tomorrow: {service} at {time_text}",
            ),
            to_utc(instant) - DAY_BEFORE,
        ),
        (
            ReminderPayload(
                appointment_id=appointment.id,
                kind=ReminderKind.HOUR_BEFORE,
                title="Appointment Soon!",
                body=f"{service} in 1 hour at {time_text}",
            ),
            to_utc(instant) - HOUR_BEFORE,
        ),
    ]

    reference = to_utc(now)
    planned = [(payload, fire_at) for payload, fire_at in candidates if fire_at > reference]
    return planned, len(candidates) - len(planned)


class ReminderScheduler:
    """Programs the reminder sink from the active appointments."""

    def __init__(self, sink: ReminderSink):
        self.sink = sink

    async def schedule(
            self,
            appointments: Iterable[AppointmentRecord],
            now: datetime
    ) -> ScheduleReport:
        """
        Cancel everything previously scheduled, then submit the reminders
        for every active appointment. Past fire times are skipped; one
        failing appointment or sink request does not stop the others.
        """
        report = ScheduleReport()

        try:
            await self.sink.cancel_all()
        except Exception as e:
            logger.error(f"Reminder cancellation failed, keeping previous schedule: {e}")
            return report
        report.cancelled = True

        requests: List[Tuple[ReminderPayload, datetime]] = []
        for appointment in appointments:
            try:
                if not is_active(appointment, now.tzinfo):
                    continue
                planned, skipped = plan_reminders(appointment, now)
            except Exception as e:
                report.failed += 1
                logger.error(f"Could not plan reminders for appointment {appointment.id}: {e}")
                continue
            requests.extend(planned)
            report.skipped += skipped

        results = await asyncio.gather(
            *(self.sink.schedule_at(payload, fire_at) for payload, fire_at in requests),
            return_exceptions=True,
        )

        for (payload, fire_at), result in zip(requests, results):
            if isinstance(result, Exception):
                report.failed += 1
                logger.error(
                    f"Sink rejected {payload.kind.value} reminder for appointment "
                    f"{payload.appointment_id} at {fire_at.isoformat()}: {result}"
                )
            else:
                report.submitted += 1

        logger.info(
            f"Reminders scheduled: submitted={report.submitted} "
            f"skipped={report.skipped} failed={report.failed}"
        )
        return report

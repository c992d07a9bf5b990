# ============================================================================
# clinic_notify/services/appointment/appointment_snapshot.py
# Read-only view of one fetch from the booking backend
# ============================================================================
import logging
from datetime import datetime, tzinfo
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from clinic_notify.schemas.appointment import AppointmentRecord, AppointmentStatus
from clinic_notify.schemas.notification import AppointmentStats
from clinic_notify.utils.datetime_utils import start_of_day

logger = logging.getLogger(__name__)


class AppointmentSnapshot:
    """Appointments of one refresh cycle, in the order the backend sent them."""

    def __init__(self, records: Sequence[AppointmentRecord]):
        self._records = tuple(records)

    @classmethod
    def from_raw(cls, raw_records: Iterable[Any]) -> "AppointmentSnapshot":
        """
        Validate the backend payload.

        Records that are structurally unusable (no id, no date, not an object)
        are dropped and logged; nothing else is transformed.
        """
        records: List[AppointmentRecord] = []
        dropped = 0
        for index, raw in enumerate(raw_records):
            try:
                records.append(AppointmentRecord.model_validate(raw))
            except ValidationError as e:
                dropped += 1
                logger.warning(f"Dropping appointment record #{index}: {e.error_count()} validation error(s)")

        if dropped:
            logger.info(f"Snapshot built with {len(records)} record(s), {dropped} dropped")
        return cls(records)

    @property
    def records(self) -> List[AppointmentRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def active(self, tz: Optional[tzinfo] = None) -> List[AppointmentRecord]:
        """Not cancelled, not completed, with a resolvable instant."""
        return [r for r in self._records if is_active(r, tz)]

    def upcoming(self, now: datetime) -> List[AppointmentRecord]:
        """Open appointments from the start of today onwards, soonest first."""
        day_start = start_of_day(now)
        upcoming = []
        for record in self._records:
            if record.is_closed:
                continue
            instant = record.instant(now.tzinfo)
            if instant is not None and instant >= day_start:
                upcoming.append((instant, record))

        upcoming.sort(key=lambda pair: pair[0])
        return [record for _, record in upcoming]

    def stats(self) -> AppointmentStats:
        return AppointmentStats(
            total=len(self._records),
            pending=self._count(AppointmentStatus.PENDING),
            accepted=self._count(AppointmentStatus.ACCEPTED),
            completed=self._count(AppointmentStatus.COMPLETED),
        )

    def _count(self, status: AppointmentStatus) -> int:
        return sum(1 for r in self._records if r.has_status(status))


def is_active(record: AppointmentRecord, tz: Optional[tzinfo] = None) -> bool:
    return not record.is_closed and record.instant(tz) is not None

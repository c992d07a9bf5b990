# clinic_notify/services/notification/notification_inbox.py
"""In-memory inbox of derived notifications with read state"""
import logging
from typing import Iterable, List

from clinic_notify.schemas.notification import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationInbox:
    """
    Current-session notification list.

    Events are never removed one by one; each derivation pass replaces the
    whole list. With ``preserve_read_state`` the read markers of events that
    survive a pass (same id) are carried over, otherwise every pass starts
    unread.
    """

    def __init__(self, preserve_read_state: bool = False):
        self.preserve_read_state = preserve_read_state
        self._events: List[NotificationEvent] = []
        self._unread_count = 0

    def replace(self, events: Iterable[NotificationEvent]) -> None:
        """Install the output of a derivation pass."""
        fresh = [event.model_copy() for event in events]

        if self.preserve_read_state:
            read_ids = {event.id for event in self._events if event.read}
            for event in fresh:
                if event.id in read_ids:
                    event.read = True

        self._events = fresh
        self._unread_count = sum(1 for e in fresh if not e.read)
        logger.debug(f"Inbox replaced: {len(fresh)} event(s), {self._unread_count} unread")

    def mark_read(self, event_id: str) -> bool:
        """Mark one event read. Returns False when the id is unknown."""
        for event in self._events:
            if event.id == event_id:
                if not event.read:
                    event.read = True
                    self._unread_count = max(0, self._unread_count - 1)
                return True
        return False

    def mark_all_read(self) -> None:
        for event in self._events:
            event.read = True
        self._unread_count = 0

    def list(self) -> List[NotificationEvent]:
        return list(self._events)

    @property
    def unread_count(self) -> int:
        return self._unread_count

    def __len__(self) -> int:
        return len(self._events)

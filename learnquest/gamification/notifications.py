"""
Notification Feed

Bounded, newest-first log of user-facing progress events.

Rules:
- Entries are prepended; the feed never holds more than `limit` entries
  (oldest silently evicted)
- id and timestamp are assigned on append when the producer left them empty
- read only goes False -> True
- Unknown ids are no-ops
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterator, Optional
from uuid import uuid4

from learnquest.models.notification import NotificationEvent
from learnquest.observability.metrics import notifications_evicted_total
from learnquest.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)

DEFAULT_FEED_LIMIT = 50


@dataclass(frozen=True)
class NotificationFeed:
    """Immutable feed; every operation returns a new feed"""

    entries: tuple = ()
    limit: int = DEFAULT_FEED_LIMIT

    def __post_init__(self):
        if self.limit <= 0:
            raise ValueError(f"Feed limit must be positive, got {self.limit}")

    def append(self, event: NotificationEvent) -> "NotificationFeed":
        """Prepend an event, filling id/timestamp, and trim to the limit"""
        updates = {}
        if not event.id:
            updates["id"] = uuid4().hex
        if event.timestamp is None:
            updates["timestamp"] = now_utc()
        if updates:
            event = event.model_copy(update=updates)

        entries = (event,) + self.entries
        evicted = len(entries) - self.limit
        if evicted > 0:
            entries = entries[:self.limit]
            notifications_evicted_total.inc(evicted)
            logger.debug(f"Feed limit {self.limit} reached, evicted {evicted} oldest entries")

        return replace(self, entries=entries)

    def mark_read(self, notification_id: str) -> "NotificationFeed":
        """Mark one entry read; unknown id leaves the feed unchanged"""
        if self.get(notification_id) is None:
            logger.debug(f"mark_read: notification {notification_id} not in feed")
            return self

        entries = tuple(
            entry.as_read() if entry.id == notification_id else entry
            for entry in self.entries
        )
        return replace(self, entries=entries)

    def mark_all_read(self) -> "NotificationFeed":
        if self.unread_count() == 0:
            return self
        return replace(self, entries=tuple(entry.as_read() for entry in self.entries))

    def unread_count(self) -> int:
        return sum(1 for entry in self.entries if not entry.read)

    def get(self, notification_id: str) -> Optional[NotificationEvent]:
        for entry in self.entries:
            if entry.id == notification_id:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[NotificationEvent]:
        return iter(self.entries)

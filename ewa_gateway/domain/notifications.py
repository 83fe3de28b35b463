"""Self-expiring user-facing notifications"""

import asyncio
import time
from typing import Callable, Dict, List, Optional

from ewa_gateway.domain.models import Notification, NotificationType

DEFAULT_TTL_SECONDS = 5.0


class NotificationQueue:
    """
    Ordered, transient notification list for one session.

    Each push schedules its own removal with loop.call_later when an event loop
    is running. Expired entries are also dropped whenever the queue is read, so
    expiry holds against the injected clock even without a loop (and in tests
    that drive a fake clock).

    remove() is idempotent: manual dismissal may race the scheduled expiry and
    whichever runs second is a no-op.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._items: Dict[str, Notification] = {}  # insertion order = display order
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._last_id_ms = 0

    def push(self, type: NotificationType, message: str) -> Notification:
        now = self._clock()
        notification = Notification(
            notification_id=self._next_id(now),
            type=NotificationType(type),
            message=message,
            timestamp=now,
            expires_at=now + self.ttl_seconds,
        )
        self._items[notification.notification_id] = notification

        loop = _running_loop()
        if loop is not None:
            self._timers[notification.notification_id] = loop.call_later(
                self.ttl_seconds, self._expire, notification.notification_id
            )
        return notification

    def remove(self, notification_id: str) -> None:
        timer = self._timers.pop(notification_id, None)
        if timer is not None:
            timer.cancel()
        self._items.pop(notification_id, None)

    def mark_read(self, notification_id: str) -> None:
        notification = self._items.get(notification_id)
        if notification is not None:
            notification.read = True

    def active(self) -> List[Notification]:
        """Live notifications in display order"""
        now = self._clock()
        for notification_id in [n.notification_id for n in self._items.values() if n.expires_at <= now]:
            self.remove(notification_id)
        return list(self._items.values())

    def clear(self) -> None:
        """Drop everything and cancel pending timers (session teardown)"""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._items.clear()

    def __len__(self) -> int:
        return len(self.active())

    def _expire(self, notification_id: str) -> None:
        self._timers.pop(notification_id, None)
        self._items.pop(notification_id, None)

    def _next_id(self, now: float) -> str:
        # Millisecond timestamp, bumped when two pushes land in the same ms
        candidate = int(now * 1000)
        self._last_id_ms = max(candidate, self._last_id_ms + 1)
        return str(self._last_id_ms)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None

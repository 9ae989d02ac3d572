"""Monitor — the user-facing activity log with subscriber fan-out.

One instance is created per application and handed to the controller and its
collaborators. Every entry is also mirrored into the standard ``logging``
stream.

Inside a running event loop, subscribers are notified through
``loop.call_soon`` and ``log`` returns before any of them runs. Without a
loop (scripts, synchronous tests) they are called inline, in subscription
order: a slow subscriber then delays the ``log`` call that triggered it.
A subscriber that raises is logged and skipped in both cases.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MAX_LOG_ENTRIES = 100


class LogLevel(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_STDLIB_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LogEntry(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:7])
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    level: LogLevel = LogLevel.INFO
    message: str
    details: str | None = None


Subscriber = Callable[[list[LogEntry]], None]


class Monitor:
    def __init__(self, max_entries: int = MAX_LOG_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: list[LogEntry] = []
        self._subscribers: list[Subscriber] = []

    @property
    def entries(self) -> list[LogEntry]:
        """Newest first."""
        return list(self._entries)

    def log(self, level: LogLevel | str, message: str, details: str | None = None) -> LogEntry:
        entry = LogEntry(level=LogLevel(level), message=message, details=details)
        self._entries = [entry, *self._entries][: self.max_entries]

        if details:
            logger.log(_STDLIB_LEVELS[entry.level], "%s (%s)", message, details)
        else:
            logger.log(_STDLIB_LEVELS[entry.level], "%s", message)

        self._notify()
        return entry

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; it receives the current entries right away.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)
        _deliver(callback, self.entries)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.entries
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for callback in list(self._subscribers):
            if loop is not None:
                # Scheduled, not awaited: the producer never waits on a subscriber
                loop.call_soon(_deliver, callback, snapshot)
            else:
                _deliver(callback, snapshot)


def _deliver(callback: Subscriber, snapshot: list[LogEntry]) -> None:
    try:
        callback(snapshot)
    except Exception as e:
        logger.warning("Log subscriber %r failed: %s", callback, e)

"""Transparency log of outbound API activity.

Keeps the most recent request/response/error events in memory for the
session and notifies subscribed observers as entries are recorded. Nothing
is stored permanently.
"""

import logging
import uuid
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class EntryKind(str, Enum):
    """Kind of activity log entry."""

    REQUEST = "REQUEST"
    RESPONSE = "RESPONSE"
    ERROR = "ERROR"
    CLEAR = "CLEAR"


@dataclass(frozen=True)
class ActivityLogEntry:
    """A single immutable transparency log event.

    Attributes:
        kind: Event kind
        method: HTTP method (request/response entries)
        url: Target URL (request/response entries)
        status: HTTP status, "pending" for a request in flight, None otherwise
        ok: Whether the response status was 2xx
        source: Component that reported an error (error entries)
        message: Error description (error entries)
        timestamp: When the entry was emitted
        id: Unique entry identifier
    """

    kind: EntryKind
    method: str | None = None
    url: str | None = None
    status: int | str | None = None
    ok: bool = False
    source: str | None = None
    message: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def describe(self) -> str:
        """One-line human-readable rendering of the entry."""
        time_str = self.timestamp.strftime("%H:%M:%S")
        if self.kind is EntryKind.ERROR:
            return f"{time_str} ERROR    [{self.source}] {self.message}"
        if self.kind is EntryKind.CLEAR:
            return f"{time_str} CLEAR"
        return f"{time_str} {self.kind.value:<8} {self.method} {self.url} ({self.status})"


Observer = Callable[[ActivityLogEntry], None]


class ActivityLog:
    """Capacity-bounded in-memory event buffer with an observer registry."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: deque[ActivityLogEntry] = deque(maxlen=capacity)
        self._observers: list[Observer] = []

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer for entries emitted from now on.

        Existing entries are not replayed; use snapshot() for those.

        Returns:
            Function that removes the observer again
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def record_request_start(self, method: str, url: str) -> ActivityLogEntry:
        return self._emit(
            ActivityLogEntry(kind=EntryKind.REQUEST, method=method, url=url, status="pending")
        )

    def record_request_end(self, method: str, url: str, status: int, ok: bool) -> ActivityLogEntry:
        return self._emit(
            ActivityLogEntry(kind=EntryKind.RESPONSE, method=method, url=url, status=status, ok=ok)
        )

    def record_error(self, source: str, message: str) -> ActivityLogEntry:
        return self._emit(ActivityLogEntry(kind=EntryKind.ERROR, source=source, message=message))

    def clear(self) -> None:
        """Empty the buffer and tell observers to reset their view."""
        self._entries.clear()
        self._broadcast(ActivityLogEntry(kind=EntryKind.CLEAR))

    def snapshot(self) -> tuple[ActivityLogEntry, ...]:
        """Current entries, oldest first."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _emit(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        # deque(maxlen=...) drops the oldest entry on overflow
        self._entries.append(entry)
        if entry.kind is EntryKind.ERROR:
            logger.warning(entry.describe())
        else:
            logger.debug(entry.describe())
        self._broadcast(entry)
        return entry

    def _broadcast(self, entry: ActivityLogEntry) -> None:
        for observer in list(self._observers):
            try:
                observer(entry)
            except Exception as e:
                logger.error(f"Activity log observer failed: {e}")

"""In-memory record of the events one builder emits.

Timers and state changes land here from the event loop and from worker
threads alike, so every access goes through one lock.  The buffer is
bounded; once full, appending drops the oldest event.
"""

import threading
from collections import Counter, deque

from tabby.observability.events import BuildEvent


class EventLog:
    """Bounded, lock-protected list of ``BuildEvent`` objects.

    Args:
        max_events: How many events to keep before the oldest are dropped.

    """

    __slots__ = ("_events", "_lock")

    def __init__(self, max_events: int = 100_000) -> None:
        self._events: deque[BuildEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: BuildEvent) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        key_prefix: str | None = None,
        limit: int | None = 100,
    ) -> list[BuildEvent]:
        """Return matching events, newest first.

        ``key_prefix`` only matches events that carry a ``key`` (timers);
        ``limit=None`` returns every match.
        """

        def matches(event: BuildEvent) -> bool:
            if event_type is not None and not isinstance(event, event_type):
                return False
            if event.timestamp_ns < since_ns:
                return False
            if key_prefix is None:
                return True
            key = getattr(event, "key", None)
            return key is not None and key.startswith(key_prefix)

        with self._lock:
            snapshot = list(self._events)

        found: list[BuildEvent] = []
        for event in reversed(snapshot):
            if limit is not None and len(found) == limit:
                break
            if matches(event):
                found.append(event)
        return found

    def counts(self) -> dict[str, int]:
        """Number of stored events per event class name."""
        with self._lock:
            return dict(Counter(type(event).__name__ for event in self._events))

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

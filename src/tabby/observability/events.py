"""Event model for build observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class TimerRecorded:
    """A profiler timer was stopped.

    Attributes:
        key: Dotted timer key (e.g., ``"builder.build.about.index.html"``).
        label: Human-readable label (e.g., ``"Build: /about/"``).
        duration_ms: Elapsed time in milliseconds.
        meta: Free-form metadata supplied when the timer was started.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    key: str
    label: str
    duration_ms: float
    timestamp_ns: int
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class StateChanged:
    """The export orchestrator moved between states.

    Attributes:
        previous: State name before the transition.
        current: State name after the transition.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    previous: str
    current: str
    timestamp_ns: int


type BuildEvent = TimerRecorded | StateChanged


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()

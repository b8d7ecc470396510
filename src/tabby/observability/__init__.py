"""Build observability — timers and state transitions for an export.

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from the event loop and worker threads.

Quick Start:
    >>> from tabby.observability import BuildProfiler
    >>> profiler = BuildProfiler()
    >>> with profiler.timer("builder.phase.staging", "Phase: staging"):
    ...     pass
    >>> len(profiler.log)
    1

"""

from tabby.observability.events import BuildEvent, StateChanged, TimerRecorded, now_ns
from tabby.observability.log import EventLog
from tabby.observability.profiler import BuildProfiler, Timer, compute_timer_stats

__all__ = [
    "BuildEvent",
    "BuildProfiler",
    "EventLog",
    "StateChanged",
    "Timer",
    "TimerRecorded",
    "compute_timer_stats",
    "now_ns",
]

"""Build profiler — named timers for renders, hooks, and export phases.

Each ``Timer`` records a ``TimerRecorded`` event into the ``EventLog`` when
stopped.  The profiler renders the recorded timers as the plain-text
benchmark written by ``Builder.export_benchmark()``.

Thread Safety:
    Timers may be started and stopped from any task or thread; all storage
    goes through the internally locked ``EventLog``.

"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tabby.observability.events import TimerRecorded, now_ns
from tabby.observability.log import EventLog

if TYPE_CHECKING:
    from types import TracebackType


@dataclass(slots=True)
class Timer:
    """A started timer.  ``stop()`` is idempotent; only the first call records."""

    key: str
    label: str
    meta: dict[str, Any]
    _log: EventLog = field(repr=False)
    _start: float = field(default_factory=time.perf_counter)
    elapsed_ms: float = 0.0
    stopped: bool = False

    def stop(self) -> float:
        """Stop the timer, record it, and return the elapsed milliseconds."""
        if self.stopped:
            return self.elapsed_ms
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000
        self.stopped = True
        self._log.append(
            TimerRecorded(
                key=self.key,
                label=self.label,
                duration_ms=self.elapsed_ms,
                timestamp_ns=now_ns(),
                meta=self.meta,
            )
        )
        return self.elapsed_ms

    def __enter__(self) -> Timer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()


class BuildProfiler:
    """Creates timers and summarizes them.

    Usage::

        profiler = BuildProfiler()

        timer = profiler.timer("builder.build.about", "Build: /about/", kind="doc")
        try:
            content = await route.build()
        finally:
            timer.stop()

        with profiler.timer("builder.phase.hashing", "Phase: hashing"):
            ...

        text = profiler.benchmark_output()

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def timer(self, key: str, label: str, **meta: Any) -> Timer:
        """Start and return a timer for ``key``."""
        return Timer(key=key, label=label, meta=meta, _log=self._log)

    def benchmark_output(self, *, top: int = 25) -> str:
        """Render recorded timers as a plain-text benchmark report.

        The report lists per-group totals (timers grouped by the first two
        segments of their key), render latency percentiles, the ``top``
        slowest individual timers, and the number of logged events per kind.

        """
        timers = [
            event
            for event in self._log.query(event_type=TimerRecorded, limit=None)
            if isinstance(event, TimerRecorded)
        ]
        if not timers:
            return "No timers recorded.\n"

        groups: dict[str, list[float]] = {}
        for event in timers:
            group = ".".join(event.key.split(".")[:2])
            groups.setdefault(group, []).append(event.duration_ms)

        lines = ["Timer groups", "-" * 60]
        for group, durations in sorted(
            groups.items(), key=lambda item: sum(item[1]), reverse=True
        ):
            lines.append(
                f"{sum(durations):>10.1f}ms  {len(durations):>6}x  "
                f"avg {sum(durations) / len(durations):>8.1f}ms  {group}"
            )

        stats = compute_timer_stats(self._log, key_prefix="builder.build")
        if stats["count"]:
            totals = stats["duration_ms"]
            lines.extend([
                "",
                f"Route renders ({stats['count']})",
                "-" * 60,
                f"  p50 {totals['p50']}ms  p95 {totals['p95']}ms  p99 {totals['p99']}ms  "
                f"min {totals['min']}ms  max {totals['max']}ms",
            ])

        lines.extend(["", f"Slowest timers (top {top})", "-" * 60])
        slowest = sorted(timers, key=lambda e: e.duration_ms, reverse=True)[:top]
        lines.extend(f"{e.duration_ms:>10.1f}ms  {e.label}" for e in slowest)

        lines.extend(["", "Events", "-" * 60])
        lines.extend(
            f"{count:>10}  {name}" for name, count in sorted(self._log.counts().items())
        )
        return "\n".join(lines) + "\n"


def compute_timer_stats(
    log: EventLog,
    *,
    key_prefix: str = "",
    limit: int | None = None,
) -> dict:
    """Compute latency statistics for timers whose key starts with ``key_prefix``.

    Returns a dict with the count and p50, p95, p99, min, and max durations.

    """
    events = log.query(event_type=TimerRecorded, key_prefix=key_prefix, limit=limit)
    durations = sorted(e.duration_ms for e in events if isinstance(e, TimerRecorded))
    if not durations:
        return {"count": 0}

    def percentile(data: list[float], pct: float) -> float:
        idx = int(len(data) * pct / 100)
        return data[min(idx, len(data) - 1)]

    return {
        "count": len(durations),
        "duration_ms": {
            "p50": round(percentile(durations, 50), 1),
            "p95": round(percentile(durations, 95), 1),
            "p99": round(percentile(durations, 99), 1),
            "min": round(durations[0], 1),
            "max": round(durations[-1], 1),
        },
    }

"""Terminal progress bars for the build and move phases."""

from __future__ import annotations

import os
import sys
import threading
from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import BarColumn, Progress, ProgressColumn, TextColumn
from rich.text import Text

if TYPE_CHECKING:
    from types import TracebackType

    from rich.progress import Task, TaskID


def format_progress_time(ms: float) -> str:
    """Format elapsed milliseconds the way the progress bars show them.

    ``0.42s`` under ten seconds, ``12.3s`` under a minute, ``2m 5s`` under an
    hour, ``1h 15m`` beyond.

    """
    s = ms / 1000
    if s > 3600:
        return f"{int(s // 3600)}h {round((s % 3600) / 60)}m"
    if s > 60:
        return f"{int(s // 60)}m {round(s % 60)}s"
    if s > 10:
        return f"{s:.1f}s"
    return f"{s:.2f}s"


def terminal_supports_progress() -> bool:
    """Return True if stderr is an interactive, non-dumb terminal."""
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


class _TotalDurationColumn(ProgressColumn):
    def render(self, task: Task) -> Text:
        elapsed = task.finished_time if task.finished else task.elapsed
        return Text(f"Total: {format_progress_time((elapsed or 0.0) * 1000)}", style="dim")


class ProgressBar:
    """A single labelled progress bar.

    Usage::

        bar = ProgressBar("Building", enabled=True)
        bar.start(total=len(routes))
        bar.advance()  # from any task or thread
        bar.stop()

    ``completed`` is tracked even when the bar is disabled.

    Args:
        label: Text shown before the counter (e.g., ``"Building"``).
        enabled: Render to the terminal.  ``None`` auto-detects.
        console: Rich console to render on (defaults to stderr).

    """

    __slots__ = (
        "_completed",
        "_enabled",
        "_label",
        "_lock",
        "_progress",
        "_running",
        "_task_id",
        "_total",
    )

    def __init__(
        self,
        label: str,
        *,
        enabled: bool | None = None,
        console: Console | None = None,
    ) -> None:
        if enabled is None:
            enabled = terminal_supports_progress()
        self._label = label
        self._enabled = enabled
        self._running = False
        self._lock = threading.Lock()
        self._completed = 0
        self._total = 0
        self._task_id: TaskID | None = None
        self._progress = Progress(
            TextColumn(f"[green]{label} ({{task.completed}}/{{task.total}}):"),
            BarColumn(),
            _TotalDurationColumn(),
            console=console or Console(stderr=True),
            disable=not enabled,
            transient=False,
        )

    @property
    def label(self) -> str:
        return self._label

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    @property
    def total(self) -> int:
        return self._total

    def start(self, total: int) -> None:
        self._total = total
        self._task_id = self._progress.add_task(self._label, total=total)
        if self._enabled and not self._running:
            self._progress.start()
            self._running = True

    def advance(self, n: int = 1) -> None:
        with self._lock:
            self._completed += n
        if self._task_id is not None:
            self._progress.advance(self._task_id, n)

    def stop(self) -> None:
        if self._running:
            self._progress.stop()
            self._running = False

    def __enter__(self) -> ProgressBar:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

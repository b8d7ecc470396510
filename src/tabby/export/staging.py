"""Staging — copy or render every selected route into the private staging tree.

Each route is staged by one task; at most ``limit`` tasks run at once.  Every
task, whether it succeeds or raises, records exactly one ``Artifact`` and
fires exactly one completion callback.  The first failure aborts the phase:
it propagates out of ``StagingExecutor.run()`` unchanged.
"""

from __future__ import annotations

import asyncio
import shutil
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabby.export.pool import run_bounded
from tabby.routes import is_static

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator
    from pathlib import Path

    from tabby._types import Content
    from tabby.export.paths import CreatedPath
    from tabby.observability.profiler import BuildProfiler


@dataclass(frozen=True, slots=True)
class Artifact:
    """A staging attempt: where the file was staged and where it belongs."""

    staging_path: Path
    final_path: Path


class ArtifactLog:
    """Append-only, lock-protected list of artifacts."""

    __slots__ = ("_items", "_lock")

    def __init__(self) -> None:
        self._items: list[Artifact] = []
        self._lock = threading.Lock()

    def append(self, artifact: Artifact) -> None:
        with self._lock:
            self._items.append(artifact)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[Artifact]:
        with self._lock:
            return iter(list(self._items))


def copy_file(source: Path, destination: Path) -> None:
    """Copy ``source`` to ``destination``, creating parent dirs as needed."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)


def write_file(destination: Path, content: Content) -> int:
    """Write rendered content (UTF-8 for ``str``) and return the byte count."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    destination.write_bytes(data)
    return len(data)


class StagingExecutor:
    """Stages routes with bounded concurrency.

    Args:
        profiler: Receives one render timer per rendered route.
        artifacts: Shared log that receives one artifact per route.
        limit: Maximum number of routes staged at once.
        on_complete: Called once per route after it finishes (or fails).

    """

    __slots__ = ("_artifacts", "_limit", "_on_complete", "_profiler")

    def __init__(
        self,
        *,
        profiler: BuildProfiler,
        artifacts: ArtifactLog,
        limit: int = 40,
        on_complete: Callable[[], None] | None = None,
    ) -> None:
        self._profiler = profiler
        self._artifacts = artifacts
        self._limit = limit
        self._on_complete = on_complete

    async def run(self, created_paths: Iterable[CreatedPath]) -> None:
        await run_bounded(created_paths, self._limit, self._stage_one)

    async def _stage_one(self, created: CreatedPath) -> None:
        try:
            route = created.route
            if is_static(route):
                await asyncio.to_thread(copy_file, route.source_path, created.staging_path)  # type: ignore[attr-defined]
                return

            # Use the url path as a unique timer key
            stub = route.url_path.replace("/", ".")
            timer = self._profiler.timer(
                f"builder.build{stub}",
                f"Build: {route.url_path}",
                path=route.pod_path,
                kind=route.provider.kind,
                url_path=route.url_path,
            )
            try:
                content = await route.build()
            finally:
                timer.stop()
            await asyncio.to_thread(write_file, created.staging_path, content)
        finally:
            self._artifacts.append(Artifact(
                staging_path=created.staging_path,
                final_path=created.final_path,
            ))
            if self._on_complete is not None:
                self._on_complete()

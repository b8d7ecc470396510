"""Export orchestrator — routes in, output directory and manifest out.

Pipeline order (each phase finishes before the next starts):
    1. ``before_build`` hooks, previous manifest, route selection
    2. Staging: copy or render every route into a private temp tree
    3. Hashing: digest and size of every staged file
    4. Diffing: classify outputs against the previous manifest
    5. Promoting: move staged files into the output directory
    6. Cleaning: delete stale outputs, remove the temp tree
    7. Persisting: write manifest.json and metrics.json
    8. Summary and ``after_build`` hooks

A failure in any phase aborts the export.  The previous manifest and metrics
are only replaced once promotion has succeeded.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tabby._errors import ExportError
from tabby.banner import print_export_summary
from tabby.export.cleaner import delete_output_files, remove_staging_root
from tabby.export.filter import filter_routes
from tabby.export.manifest import (
    BuildDiffPaths,
    BuildManifest,
    PathHash,
    diff_manifests,
    hash_outputs,
    read_manifest,
    write_json,
)
from tabby.export.metrics import BuildMetrics, collect_missing_translations, memory_usage
from tabby.export.paths import plan_paths
from tabby.export.pool import resolve
from tabby.export.progress import ProgressBar
from tabby.export.promote import Promoter
from tabby.export.staging import ArtifactLog, StagingExecutor, write_file
from tabby.observability.events import StateChanged, now_ns
from tabby.routes import is_static
from tabby.vcs import read_vcs_info

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tabby.config import TabbyConfig
    from tabby.context import BuildContext
    from tabby.export.paths import CreatedPath
    from tabby.observability.profiler import BuildProfiler
    from tabby.routes import Route

logger = logging.getLogger(__name__)


class BuildState(StrEnum):
    NOT_STARTED = "not_started"
    STAGING = "staging"
    HASHING = "hashing"
    DIFFING = "diffing"
    PROMOTING = "promoting"
    CLEANING = "cleaning"
    PERSISTED = "persisted"
    DONE = "done"
    FAILED = "failed"


_NEXT_STATE: dict[BuildState, BuildState] = {
    BuildState.NOT_STARTED: BuildState.STAGING,
    BuildState.STAGING: BuildState.HASHING,
    BuildState.HASHING: BuildState.DIFFING,
    BuildState.DIFFING: BuildState.PROMOTING,
    BuildState.PROMOTING: BuildState.CLEANING,
    BuildState.CLEANING: BuildState.PERSISTED,
    BuildState.PERSISTED: BuildState.DONE,
}

@dataclass(frozen=True, slots=True)
class ExportOptions:
    """Options for one export.

    Attributes:
        patterns: Glob patterns matched against route source paths.  When
            given (non-empty), the export is incremental: only matching routes
            are built and nothing is ever deleted.

    """

    patterns: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.patterns is None:
            return
        if isinstance(self.patterns, str):
            patterns: tuple[str, ...] = (self.patterns,)
        else:
            patterns = tuple(self.patterns)
        if not patterns:
            msg = "patterns must be a non-empty list of glob strings"
            raise ExportError(msg)
        object.__setattr__(self, "patterns", patterns)

    @property
    def incremental(self) -> bool:
        return self.patterns is not None


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of a successful export."""

    metrics: BuildMetrics
    manifest: BuildManifest
    diff: BuildDiffPaths

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": self.metrics.to_dict(),
            "manifest": self.manifest.to_dict(),
            "diff": self.diff.to_dict(),
        }


class Builder:
    """Runs exports for one ``BuildContext``.

    A builder runs one export at a time; once an export is done (or failed)
    the same builder can run another.

    """

    __slots__ = ("_context", "_running", "_state")

    def __init__(self, context: BuildContext) -> None:
        self._context = context
        self._running = False
        self._state = BuildState.NOT_STARTED

    @property
    def context(self) -> BuildContext:
        return self._context

    @property
    def config(self) -> TabbyConfig:
        return self._context.config

    @property
    def profiler(self) -> BuildProfiler:
        return self._context.profiler

    @property
    def state(self) -> BuildState:
        return self._state

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def export(self, options: ExportOptions | None = None) -> BuildResult:
        """Build every selected route and update the output directory.

        Raises:
            NothingToBuildError: If no routes are selected.
            PromotionError: If a staged file cannot be moved.
            ExportError: For other export failures.

        Exceptions raised by a route's ``build()`` propagate unchanged.

        """
        if self._running:
            msg = f"An export is already running (state: {self._state})"
            raise ExportError(msg)
        self._running = True
        self._state = BuildState.NOT_STARTED
        options = options or ExportOptions()

        try:
            return await self._export(options)
        except BaseException:
            self._set_state(BuildState.FAILED)
            raise
        finally:
            self._running = False

    async def export_benchmark(self) -> Path:
        """Write the profiler benchmark to ``benchmark.txt`` and return its path."""
        path = self.config.benchmark_path
        await asyncio.to_thread(write_file, path, self.profiler.benchmark_output())
        return path

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _export(self, options: ExportOptions) -> BuildResult:
        config = self.config
        await self._context.plugins.before_build(self, profiler=self.profiler)

        existing = read_manifest(config.manifest_path)
        routes: Sequence[Route] = await resolve(self._context.routes.routes())
        selected = filter_routes(routes, options.patterns, root=config.root)
        logger.debug("Selected %d of %d routes", len(selected), len(routes))

        staging_root = self._make_staging_root()
        try:
            result = await self._run_phases(selected, staging_root, existing, options)
        except BaseException:
            self._discard_staging(staging_root)
            raise

        print_export_summary(result, config.output_path, incremental=options.incremental)
        await self._context.plugins.after_build(result, profiler=self.profiler)
        self._advance(BuildState.DONE)
        return result

    async def _run_phases(
        self,
        selected: list[Route],
        staging_root: Path,
        existing: BuildManifest | None,
        options: ExportOptions,
    ) -> BuildResult:
        config = self.config
        created = plan_paths(selected, staging_root, config.output_path)
        artifacts = ArtifactLog()

        self._advance(BuildState.STAGING)
        await self._stage(created, artifacts)

        self._advance(BuildState.HASHING)
        manifest, metrics = await self._hash(created)

        self._advance(BuildState.DIFFING)
        diff = diff_manifests(existing, manifest, incremental=options.incremental)

        self._advance(BuildState.PROMOTING)
        await self._promote(created, len(artifacts))
        metrics.memory_usage = memory_usage()
        if self._context.translations is not None:
            collect_missing_translations(metrics, self._context.translations)

        self._advance(BuildState.CLEANING)
        with self.profiler.timer("builder.phase.cleaning", "Phase: cleaning"):
            # Incremental builds only saw a subset of routes; never delete.
            if not options.incremental and diff.deletes:
                deleted = await asyncio.to_thread(
                    delete_output_files, config.output_path, diff.deletes,
                )
                logger.debug("Deleted %d stale output(s)", deleted)
            await asyncio.to_thread(remove_staging_root, staging_root)

        await asyncio.to_thread(write_json, config.manifest_path, manifest.to_dict())
        await asyncio.to_thread(write_json, config.metrics_path, metrics.to_dict())
        self._advance(BuildState.PERSISTED)

        return BuildResult(metrics=metrics, manifest=manifest, diff=diff)

    async def _stage(self, created: list[CreatedPath], artifacts: ArtifactLog) -> None:
        bar = ProgressBar("Building", enabled=self.config.progress)
        executor = StagingExecutor(
            profiler=self.profiler,
            artifacts=artifacts,
            limit=self.config.build_concurrency,
            on_complete=bar.advance,
        )
        with (
            self.profiler.timer("builder.phase.staging", "Phase: staging", routes=len(created)),
            bar,
        ):
            bar.start(len(created))
            await executor.run(created)

    async def _hash(self, created: list[CreatedPath]) -> tuple[BuildManifest, BuildMetrics]:
        branch, commit = (None, None)
        if self.config.vcs:
            branch, commit = await asyncio.to_thread(read_vcs_info, self.config.root)

        manifest = BuildManifest(branch=branch, commit=commit)
        metrics = BuildMetrics()
        with self.profiler.timer("builder.phase.hashing", "Phase: hashing"):
            hashed = await hash_outputs(created, limit=self.config.copy_concurrency)

        for item in hashed:
            manifest.files.append(PathHash(path=item.created.output_path, sha=item.sha))
            metrics.record_output(static=is_static(item.created.route), size=item.size)
        return manifest, metrics

    async def _promote(self, created: list[CreatedPath], artifact_count: int) -> None:
        # Small builds move quickly enough that a second bar is just noise.
        show_bar = artifact_count >= self.config.move_progress_threshold
        bar = ProgressBar("  Moving", enabled=self.config.progress if show_bar else False)
        promoter = Promoter(limit=self.config.copy_concurrency, on_complete=bar.advance)
        with self.profiler.timer("builder.phase.promoting", "Phase: promoting"), bar:
            if show_bar:
                bar.start(artifact_count)
            fallbacks = await promoter.run(created)
        if fallbacks:
            logger.debug("%d file(s) were copied across filesystems", fallbacks)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _make_staging_root(self) -> Path:
        tmp_dir = self.config.tmp_dir
        if tmp_dir is not None:
            tmp_dir.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix="tabby-build-", dir=tmp_dir)).resolve()

    def _discard_staging(self, staging_root: Path) -> None:
        if self.config.keep_failed_staging:
            logger.warning("Export failed; staging files kept at %s", staging_root)
            return
        try:
            remove_staging_root(staging_root)
        except OSError as exc:
            logger.warning("Unable to remove staging directory %s (%s)", staging_root, exc)

    def _advance(self, state: BuildState) -> None:
        expected = _NEXT_STATE.get(self._state)
        if expected is not state:
            msg = f"Invalid export transition {self._state} -> {state}"
            raise ExportError(msg)
        self._set_state(state)

    def _set_state(self, state: BuildState) -> None:
        previous = self._state
        self._state = state
        self.profiler.log.append(
            StateChanged(previous=str(previous), current=str(state), timestamp_ns=now_ns())
        )

"""Tests for tabby.export.staging — staging executor and file helpers."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from tabby.export.paths import plan_paths
from tabby.export.staging import Artifact, ArtifactLog, StagingExecutor, copy_file, write_file
from tabby.observability.events import TimerRecorded
from tabby.observability.profiler import BuildProfiler
from tabby.routes import RenderedRoute

from .conftest import make_doc, make_static


class TestFileHelpers:
    """copy_file / write_file — create parents, report sizes."""

    def test_copy_creates_parents(self, tmp_path: Path) -> None:
        src = tmp_path / "a.txt"
        src.write_bytes(b"abc")
        dest = tmp_path / "x" / "y" / "a.txt"
        copy_file(src, dest)
        assert dest.read_bytes() == b"abc"

    def test_write_str_as_utf8(self, tmp_path: Path) -> None:
        dest = tmp_path / "out" / "index.html"
        size = write_file(dest, "héllo")
        assert dest.read_bytes() == "héllo".encode()
        assert size == 6

    def test_write_bytes(self, tmp_path: Path) -> None:
        dest = tmp_path / "blob.bin"
        assert write_file(dest, b"\x00\x01") == 2
        assert dest.read_bytes() == b"\x00\x01"


class TestArtifactLog:
    """ArtifactLog — append-only, snapshot iteration."""

    def test_append_and_iterate(self, tmp_path: Path) -> None:
        log = ArtifactLog()
        first = Artifact(staging_path=tmp_path / "s", final_path=tmp_path / "f")
        log.append(first)
        snapshot = iter(log)
        log.append(first)
        assert len(log) == 2
        assert list(snapshot) == [first]


class TestStagingExecutor:
    """StagingExecutor — copy static routes, render the rest."""

    @pytest.mark.asyncio
    async def test_stages_static_and_rendered(self, tmp_site: Path, tmp_path: Path) -> None:
        stage = tmp_path / "stage"
        created = plan_paths(
            [make_static(tmp_site, "app.css"), make_doc("/about/", "<p>About</p>")],
            stage,
            tmp_path / "out",
        )
        artifacts = ArtifactLog()
        completed: list[None] = []

        await StagingExecutor(
            profiler=BuildProfiler(),
            artifacts=artifacts,
            on_complete=lambda: completed.append(None),
        ).run(created)

        assert (stage / "static" / "app.css").read_text() == "body { margin: 0; }\n"
        assert (stage / "about" / "index.html").read_text() == "<p>About</p>"
        assert len(artifacts) == 2
        assert len(completed) == 2
        assert {a.final_path for a in artifacts} == {c.final_path for c in created}

    @pytest.mark.asyncio
    async def test_render_timer_recorded(self, tmp_path: Path) -> None:
        profiler = BuildProfiler()
        created = plan_paths([make_doc("/docs/intro/")], tmp_path / "s", tmp_path / "o")

        await StagingExecutor(profiler=profiler, artifacts=ArtifactLog()).run(created)

        [event] = profiler.log.query(event_type=TimerRecorded)
        assert isinstance(event, TimerRecorded)
        assert event.key == "builder.build.docs.intro."
        assert event.label == "Build: /docs/intro/"
        assert event.meta == {"path": "/content/docs/intro.md", "kind": "doc", "url_path": "/docs/intro/"}

    @pytest.mark.asyncio
    async def test_static_copies_not_timed(self, tmp_site: Path, tmp_path: Path) -> None:
        profiler = BuildProfiler()
        created = plan_paths([make_static(tmp_site, "app.css")], tmp_path / "s", tmp_path / "o")
        await StagingExecutor(profiler=profiler, artifacts=ArtifactLog()).run(created)
        assert len(profiler.log) == 0

    @pytest.mark.asyncio
    async def test_failure_still_records_bookkeeping(self, tmp_path: Path) -> None:
        class Boom(Exception):
            pass

        async def fail() -> str:
            raise Boom("render failed")

        profiler = BuildProfiler()
        artifacts = ArtifactLog()
        completed: list[None] = []
        created = plan_paths(
            [RenderedRoute(pod_path="/bad.md", url_path="/bad/", render=fail)],
            tmp_path / "s",
            tmp_path / "o",
        )

        with pytest.raises(Boom, match="render failed"):
            await StagingExecutor(
                profiler=profiler,
                artifacts=artifacts,
                on_complete=lambda: completed.append(None),
            ).run(created)

        assert len(artifacts) == 1
        assert len(completed) == 1
        # Timer stopped despite the failure
        assert len(profiler.log) == 1

    @pytest.mark.asyncio
    async def test_concurrency_bounded(self, tmp_path: Path) -> None:
        in_flight = 0
        peak = 0

        async def render() -> str:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return "x"

        routes = [
            RenderedRoute(pod_path=f"/p{i}.md", url_path=f"/p{i}/", render=render)
            for i in range(12)
        ]
        created = plan_paths(routes, tmp_path / "s", tmp_path / "o")
        await StagingExecutor(profiler=BuildProfiler(), artifacts=ArtifactLog(), limit=4).run(created)
        assert peak == 4

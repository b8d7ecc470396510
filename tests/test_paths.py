"""Tests for tabby.export.paths — URL to file path mapping."""

from __future__ import annotations

from pathlib import Path

import pytest

from tabby._errors import ExportError
from tabby.export.paths import CreatedPath, normalize_path, plan_paths

from .conftest import make_doc


class TestNormalizePath:
    """normalize_path — clean URLs become index.html files."""

    @pytest.mark.parametrize(
        ("url_path", "expected"),
        [
            ("/", "/index.html"),
            ("/about/", "/about/index.html"),
            ("/search", "/search/index.html"),
            ("/static/app.css", "/static/app.css"),
            ("/feed.xml", "/feed.xml"),
            ("/docs/v1.2/", "/docs/v1.2/index.html"),
        ],
    )
    def test_mapping(self, url_path: str, expected: str) -> None:
        assert normalize_path(url_path) == expected

    @pytest.mark.parametrize("url_path", ["/", "/a/b/", "/a/b", "/a/b.json"])
    def test_idempotent(self, url_path: str) -> None:
        once = normalize_path(url_path)
        assert normalize_path(once) == once


class TestPlanPaths:
    """plan_paths — staging and final locations per route."""

    def test_locations(self, tmp_path: Path) -> None:
        staging = tmp_path / "stage"
        output = tmp_path / "out"
        route = make_doc("/about/")

        [created] = plan_paths([route], staging, output)

        assert created == CreatedPath(
            route=route,
            staging_path=staging / "about" / "index.html",
            output_path="/about/index.html",
            final_path=output / "about" / "index.html",
        )

    def test_preserves_route_order(self, tmp_path: Path) -> None:
        routes = [make_doc("/b/"), make_doc("/a/"), make_doc("/")]
        planned = plan_paths(routes, tmp_path / "s", tmp_path / "o")
        assert [c.output_path for c in planned] == ["/b/index.html", "/a/index.html", "/index.html"]

    def test_duplicate_output_rejected(self, tmp_path: Path) -> None:
        routes = [make_doc("/about/"), make_doc("/about", pod_path="/x.md")]
        with pytest.raises(ExportError, match="produced by both"):
            plan_paths(routes, tmp_path / "s", tmp_path / "o")

    def test_escape_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ExportError, match="outside the output directory"):
            plan_paths([make_doc("/../../etc/passwd.txt")], tmp_path / "s", tmp_path / "o")

    def test_dot_segments_collapsed(self, tmp_path: Path) -> None:
        [created] = plan_paths([make_doc("/a/../b/")], tmp_path / "s", tmp_path / "o")
        assert created.final_path == tmp_path / "o" / "b" / "index.html"
        assert created.output_path == "/b/index.html"

"""Tests for tabby.export.filter — glob-based route selection."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from tabby._errors import NothingToBuildError
from tabby.export.filter import filter_routes
from tabby.routes import RenderedRoute

from .conftest import make_doc


def _pods(routes: list) -> list[str]:
    return [r.pod_path for r in routes]


class TestFilterRoutes:
    """filter_routes — keep routes whose source path matches a pattern."""

    def setup_method(self) -> None:
        self.routes = [
            make_doc("/", pod_path="/content/index.md"),
            make_doc("/blog/a/", pod_path="/content/blog/a.md"),
            make_doc("/blog/2024/b/", pod_path="/content/blog/2024/b.md"),
            make_doc("/about/", pod_path="/content/about.yaml"),
            make_doc("/secret/", pod_path="/content/.hidden.md"),
        ]

    def test_no_patterns_keeps_everything(self) -> None:
        assert filter_routes(self.routes) == self.routes

    def test_recursive_pattern(self) -> None:
        selected = filter_routes(self.routes, ["/content/blog/**"])
        assert _pods(selected) == ["/content/blog/a.md", "/content/blog/2024/b.md"]

    def test_single_star_does_not_cross_directories(self) -> None:
        selected = filter_routes(self.routes, ["/content/blog/*"])
        assert _pods(selected) == ["/content/blog/a.md"]

    def test_leading_slash_optional(self) -> None:
        assert filter_routes(self.routes, ["content/about.yaml"]) == [self.routes[3]]

    def test_basename_match_without_slash(self) -> None:
        selected = filter_routes(self.routes, ["*.md"])
        assert _pods(selected) == [
            "/content/index.md",
            "/content/blog/a.md",
            "/content/blog/2024/b.md",
        ]

    def test_hidden_files_not_matched_by_star(self) -> None:
        assert "/content/.hidden.md" not in _pods(filter_routes(self.routes, ["*.md"]))

    def test_any_pattern_may_match(self) -> None:
        selected = filter_routes(self.routes, ["*.yaml", "/content/index.md"])
        assert _pods(selected) == ["/content/index.md", "/content/about.yaml"]

    def test_route_without_pod_path_never_matches(self) -> None:
        orphan = RenderedRoute(pod_path=None, url_path="/x/", render=lambda: "x")
        with pytest.raises(NothingToBuildError):
            filter_routes([orphan], ["**"])

    def test_empty_routes_raise(self, tmp_path: Path) -> None:
        with pytest.raises(NothingToBuildError, match=re.escape(f"site rooted at: {tmp_path}")):
            filter_routes([], root=tmp_path)

    def test_no_match_lists_patterns(self) -> None:
        with pytest.raises(NothingToBuildError, match="Patterns: \\*.txt"):
            filter_routes(self.routes, ["*.txt"])

"""Shared test fixtures for tabby."""

from __future__ import annotations

from pathlib import Path

import pytest

from tabby.config import TabbyConfig
from tabby.context import BuildContext
from tabby.export.builder import Builder, BuildResult, ExportOptions
from tabby.routes import DOCUMENT, Provider, RenderedRoute, RouteList, StaticFileRoute


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site with a static/ directory.

    Returns the site root.  Static files: ``static/app.css`` and
    ``static/js/app.js``.
    """
    root = tmp_path / "site"
    static = root / "static"
    (static / "js").mkdir(parents=True)
    (static / "app.css").write_text("body { margin: 0; }\n")
    (static / "js" / "app.js").write_text("console.log('hi');\n")
    return root


@pytest.fixture
def config(tmp_site: Path, tmp_path: Path) -> TabbyConfig:
    """Quiet config: no progress bars, no git lookups, staging under tmp_path."""
    return TabbyConfig(
        root=tmp_site,
        tmp_dir=tmp_path / "staging",
        progress=False,
        vcs=False,
    )


def make_doc(
    url_path: str,
    body: str = "<p>Test content</p>",
    *,
    pod_path: str | None = None,
) -> RenderedRoute:
    """Create a rendered document route returning ``body``."""
    return RenderedRoute(
        pod_path=pod_path if pod_path is not None else f"/content{url_path.rstrip('/') or '/index'}.md",
        url_path=url_path,
        render=lambda: body,
        provider=Provider(DOCUMENT),
    )


def make_static(root: Path, relative: str) -> StaticFileRoute:
    """Create a static route for ``root/static/<relative>``."""
    return StaticFileRoute(
        pod_path=f"/static/{relative}",
        url_path=f"/static/{relative}",
        source_path=root / "static" / relative,
    )


async def run_export(
    config: TabbyConfig,
    routes: list,
    *,
    patterns: tuple[str, ...] | None = None,
    **context: object,
) -> BuildResult:
    """Run one export over ``routes`` with a fresh builder."""
    builder = Builder(BuildContext(config=config, routes=RouteList(routes), **context))  # type: ignore[arg-type]
    return await builder.export(ExportOptions(patterns=patterns))

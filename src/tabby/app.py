"""Tabby entry point — load config, run one export, print the result.

``build()`` is the synchronous front door used by scripts and deploy jobs.
Hosts that already run an event loop construct a ``Builder`` directly and
await ``Builder.export()``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from tabby.config_loader import load_config
from tabby.context import BuildContext
from tabby.export.builder import Builder, BuildResult, ExportOptions
from tabby.log_setup import configure_logging
from tabby.plugins import Plugins
from tabby.routes import RouteList

if TYPE_CHECKING:
    from tabby.plugins import BuildPlugin
    from tabby.routes import Route, RouteSource
    from tabby.translations import TranslationCache

logger = logging.getLogger(__name__)


def _as_route_source(routes: RouteSource | Sequence[Route]) -> RouteSource:
    if isinstance(routes, Sequence):
        return RouteList(tuple(routes))
    return routes


def build(
    routes: RouteSource | Sequence[Route],
    root: str | Path = ".",
    *,
    patterns: Sequence[str] | None = None,
    plugins: Sequence[BuildPlugin] | None = None,
    translations: TranslationCache | None = None,
    benchmark: bool = False,
    **kwargs: object,
) -> BuildResult:
    """Export a site to its output directory.

    Args:
        routes: The site's routes, or an object whose ``routes()`` returns them.
        root: Path to the site root directory.
        patterns: Glob patterns for an incremental export.  ``None`` builds
            every route and deletes stale outputs.
        plugins: Build plugins whose hooks run around the export.
        translations: Missing-translation source for the metrics.
        benchmark: Also write ``benchmark.txt`` to the control directory.
        **kwargs: Override TabbyConfig fields.

    Returns:
        The metrics, manifest, and diff of the export.

    """
    from tabby.banner import print_banner

    configure_logging()
    config = load_config(Path(root), **kwargs)
    options = ExportOptions(patterns=tuple(patterns) if patterns is not None else None)

    context = BuildContext(
        config=config,
        routes=_as_route_source(routes),
        plugins=Plugins(list(plugins or ())),
        translations=translations,
    )
    print_banner(config, patterns=options.patterns, plugin_count=len(context.plugins))

    builder = Builder(context)

    async def _run() -> BuildResult:
        result = await builder.export(options)
        if benchmark:
            path = await builder.export_benchmark()
            logger.info("Benchmark written to %s", path)
        return result

    return asyncio.run(_run())

"""Tabby — static-site export orchestrator.

Builds every route of a site into a private staging directory, diffs the
result against the previous build's manifest, and promotes the new files into
the output directory.  Stale outputs are removed; incremental builds (driven
by glob patterns) only ever add or replace files.

Quick start::

    from pathlib import Path

    import tabby
    from tabby.routes import StaticDirectory

    tabby.build(StaticDirectory(Path("my-site/static")), "my-site/")

Inside a running event loop::

    builder = tabby.Builder(tabby.BuildContext(config=config, routes=routes))
    result = await builder.export(tabby.ExportOptions(patterns=("/docs/**",)))

Each export writes ``manifest.json`` and ``metrics.json`` to the control
directory (``<output>/.tabby`` by default).

"""

__version__ = "0.1.0.dev0"
__all__ = [
    "BuildContext",
    "Builder",
    "ExportOptions",
    "TabbyConfig",
    "__version__",
    "build",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import tabby`` fast; rich and psutil load on first use.
    """
    if name == "TabbyConfig":
        from tabby.config import TabbyConfig

        return TabbyConfig

    if name == "BuildContext":
        from tabby.context import BuildContext

        return BuildContext

    if name == "Builder":
        from tabby.export.builder import Builder

        return Builder

    if name == "ExportOptions":
        from tabby.export.builder import ExportOptions

        return ExportOptions

    if name == "build":
        from tabby.app import build

        return build

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

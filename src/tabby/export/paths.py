"""Output path normalization and per-route path planning."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabby._errors import ExportError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from tabby._types import OutputPath, UrlPath
    from tabby.routes import Route


def normalize_path(url_path: UrlPath) -> OutputPath:
    """Map a route URL to the file path it is written to.

    Clean URL convention:
        ``/``               -> ``/index.html``
        ``/about/``         -> ``/about/index.html``
        ``/search``         -> ``/search/index.html``
        ``/static/app.css`` -> ``/static/app.css``

    Idempotent: a normalized path always has an extension.

    """
    if url_path.endswith("/"):
        return f"{url_path}index.html"
    if posixpath.splitext(url_path)[1]:
        return url_path
    return f"{url_path}/index.html"


@dataclass(frozen=True, slots=True)
class CreatedPath:
    """Where one route is staged and where it finally lands.

    Attributes:
        route: The route being exported.
        staging_path: Absolute path inside the private staging tree.
        output_path: Normalized path relative to the output directory
            (leading slash); the manifest key.
        final_path: Absolute path inside the output directory.

    """

    route: Route
    staging_path: Path
    output_path: OutputPath
    final_path: Path


def plan_paths(
    routes: Iterable[Route],
    staging_root: Path,
    output_dir: Path,
) -> list[CreatedPath]:
    """Bind every route to its staging and final locations.

    Raises:
        ExportError: If two routes normalize to the same output path, or a
            path would escape the output directory.

    """
    planned: list[CreatedPath] = []
    owners: dict[str, Route] = {}

    for route in routes:
        output_path = normalize_path(route.url_path)
        relative = posixpath.normpath(output_path.lstrip("/"))
        if relative.startswith("../") or relative in ("..", "."):
            msg = f"Route {route.url_path!r} resolves outside the output directory"
            raise ExportError(msg)

        output_path = f"/{relative}"
        previous = owners.get(output_path)
        if previous is not None:
            msg = (
                f"Output path {output_path!r} is produced by both "
                f"{previous.pod_path or previous.url_path!r} and "
                f"{route.pod_path or route.url_path!r}"
            )
            raise ExportError(msg)
        owners[output_path] = route

        planned.append(CreatedPath(
            route=route,
            staging_path=staging_root / relative,
            output_path=output_path,
            final_path=output_dir / relative,
        ))

    return planned

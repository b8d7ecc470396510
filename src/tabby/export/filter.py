"""Route selection for incremental (pattern-filtered) exports."""

from __future__ import annotations

import functools
import glob
import posixpath
import re
from typing import TYPE_CHECKING

from tabby._errors import NothingToBuildError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from pathlib import Path

    from tabby.routes import Route


def filter_routes(
    routes: Iterable[Route],
    patterns: Sequence[str] | None = None,
    *,
    root: Path | None = None,
) -> list[Route]:
    """Keep routes whose source path matches at least one glob pattern.

    Leading slashes are ignored on both sides.  ``**`` spans directories,
    ``*`` does not match dot files, and a pattern without a slash is matched
    against the base name of the source path (``*.md`` matches
    ``blog/post.md``).  Routes without a source path never match.

    With ``patterns=None`` every route is kept.

    Raises:
        NothingToBuildError: If no routes remain.

    """
    if patterns is None:
        selected = list(routes)
    else:
        matchers = [_compile(pattern) for pattern in patterns]
        selected = [
            route
            for route in routes
            if route.pod_path and any(
                match(route.pod_path.lstrip("/")) for match in matchers
            )
        ]

    if not selected:
        where = f" for site rooted at: {root}" if root is not None else ""
        msg = (
            f"Nothing to build. No routes found{where}. "
            "Ensure this is the right directory, and that there is either "
            "content or static files to build."
        )
        if patterns is not None:
            msg += f" Patterns: {', '.join(patterns)}"
        raise NothingToBuildError(msg)

    return selected


@functools.lru_cache(maxsize=256)
def _compile(pattern: str) -> Callable[[str], bool]:
    """Compile one glob pattern into a path predicate."""
    clean = pattern.lstrip("/")
    regex = re.compile(glob.translate(clean, recursive=True, include_hidden=False, seps="/"))
    if "/" not in clean:
        return lambda path: regex.match(posixpath.basename(path)) is not None
    return lambda path: regex.match(path) is not None

"""Route interfaces consumed by the exporter, plus small concrete routes.

The exporter never resolves routes itself.  It asks a ``RouteSource`` for an
ordered sequence of ``Route`` objects and only touches ``url_path``,
``pod_path``, ``provider.kind`` and ``build()`` (and ``source_path`` for static
routes).

The concrete classes here cover the common cases: a static file copied
verbatim, a document rendered by a callable, a fixed list of routes, and a
static asset directory.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tabby._errors import RouteError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable, Sequence

    from tabby._types import Content, PodPath, ProviderKind, RenderFunc, UrlPath

STATIC_DIR: ProviderKind = "static_dir"
DOCUMENT: ProviderKind = "doc"

# Files/directories skipped when collecting static routes
_HIDDEN_PREFIXES = (".", "_")


@dataclass(frozen=True, slots=True)
class Provider:
    """Where a route came from.  ``kind == "static_dir"`` means copy."""

    kind: ProviderKind


@runtime_checkable
class Route(Protocol):
    """A single output file."""

    @property
    def pod_path(self) -> PodPath | None: ...

    @property
    def url_path(self) -> UrlPath: ...

    @property
    def provider(self) -> Provider: ...

    async def build(self) -> Content: ...


@runtime_checkable
class StaticRoute(Route, Protocol):
    """A route whose output is a verbatim copy of ``source_path``."""

    @property
    def source_path(self) -> Path: ...


class RouteSource(Protocol):
    """Produces the ordered route list for one export."""

    def routes(self) -> Sequence[Route] | Awaitable[Sequence[Route]]: ...


def is_static(route: Route) -> bool:
    """Return True if the route is copied rather than rendered."""
    return route.provider.kind == STATIC_DIR


@dataclass(frozen=True, slots=True)
class StaticFileRoute:
    """Copy ``source_path`` to ``url_path``."""

    pod_path: PodPath
    url_path: UrlPath
    source_path: Path
    provider: Provider = field(default=Provider(STATIC_DIR))

    async def build(self) -> bytes:
        return await asyncio.to_thread(self.source_path.read_bytes)


@dataclass(frozen=True, slots=True)
class RenderedRoute:
    """Render ``url_path`` by calling ``render``.

    ``render`` may be a plain function (run in a worker thread) or a
    coroutine function (awaited on the event loop).
    """

    pod_path: PodPath | None
    url_path: UrlPath
    render: RenderFunc
    provider: Provider = field(default=Provider(DOCUMENT))

    def __post_init__(self) -> None:
        if self.provider.kind == STATIC_DIR:
            msg = f"RenderedRoute {self.url_path!r} cannot use the {STATIC_DIR!r} provider"
            raise RouteError(msg)

    async def build(self) -> Content:
        if inspect.iscoroutinefunction(self.render):
            return await self.render()
        result = await asyncio.to_thread(self.render)
        if inspect.isawaitable(result):
            return await result
        return result


class RouteList:
    """A ``RouteSource`` over a fixed, ordered collection of routes."""

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes = tuple(routes)

    def routes(self) -> tuple[Route, ...]:
        return self._routes

    def __len__(self) -> int:
        return len(self._routes)


class StaticDirectory:
    """A ``RouteSource`` that copies every file under a directory.

    Skips hidden files (names starting with ``.`` or ``_``) and anything
    inside ``__pycache__``.  A missing directory yields no routes.

    Args:
        directory: Absolute path to the asset directory.
        url_prefix: URL prefix for every route (e.g., ``"/static/"``).
        pod_prefix: Source-identity prefix for every route.

    """

    __slots__ = ("_directory", "_pod_prefix", "_url_prefix")

    def __init__(
        self,
        directory: Path,
        *,
        url_prefix: str = "/static/",
        pod_prefix: str | None = None,
    ) -> None:
        self._directory = directory
        self._url_prefix = "/" + url_prefix.strip("/") + "/" if url_prefix.strip("/") else "/"
        self._pod_prefix = pod_prefix if pod_prefix is not None else f"/{directory.name}/"

    def routes(self) -> tuple[StaticFileRoute, ...]:
        if not self._directory.is_dir():
            return ()

        results: list[StaticFileRoute] = []
        for src_file in sorted(self._directory.rglob("*")):
            if not src_file.is_file():
                continue
            relative = src_file.relative_to(self._directory)
            if "__pycache__" in relative.parts:
                continue
            if src_file.name.startswith(_HIDDEN_PREFIXES):
                continue
            rel = relative.as_posix()
            results.append(StaticFileRoute(
                pod_path=f"{self._pod_prefix.rstrip('/')}/{rel}",
                url_path=f"{self._url_prefix}{rel}",
                source_path=src_file,
            ))
        return tuple(results)

"""Build plugins — explicit before/after lifecycle hooks.

A plugin is a named record of optional hook callables.  Dispatch is a
presence check on each field; there is no lookup by method name.

Hooks may be plain functions or coroutine functions.  All hooks registered
for one event run concurrently and are awaited before the export continues.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from tabby.export.builder import Builder, BuildResult
    from tabby.observability.profiler import BuildProfiler

    type BeforeBuildHook = Callable[[Builder], Awaitable[None] | None]
    type AfterBuildHook = Callable[[BuildResult], Awaitable[None] | None]


@dataclass(frozen=True, slots=True)
class BuildPlugin:
    """Lifecycle hooks contributed by one plugin.

    Attributes:
        name: Unique plugin name (used for lookup and timer keys).
        before_build: Called with the ``Builder`` before staging starts.
        after_build: Called with the ``BuildResult`` after files are persisted.

    """

    name: str
    before_build: BeforeBuildHook | None = None
    after_build: AfterBuildHook | None = None


class Plugins:
    """Registry of build plugins."""

    __slots__ = ("_plugins",)

    def __init__(self, plugins: list[BuildPlugin] | None = None) -> None:
        self._plugins: list[BuildPlugin] = []
        for plugin in plugins or ():
            self.register(plugin)

    def register(self, plugin: BuildPlugin) -> None:
        """Register a plugin.  Names must be unique."""
        if self.get(plugin.name) is not None:
            msg = f"Plugin {plugin.name!r} is already registered"
            raise ValueError(msg)
        self._plugins.append(plugin)

    def get(self, name: str) -> BuildPlugin | None:
        """Return the plugin registered under ``name``, if any."""
        for plugin in self._plugins:
            if plugin.name == name:
                return plugin
        return None

    def __len__(self) -> int:
        return len(self._plugins)

    async def before_build(
        self, builder: Builder, *, profiler: BuildProfiler | None = None,
    ) -> None:
        hooks = [(p.name, p.before_build) for p in self._plugins if p.before_build is not None]
        await self._trigger("before_build", hooks, builder, profiler)

    async def after_build(
        self, result: BuildResult, *, profiler: BuildProfiler | None = None,
    ) -> None:
        hooks = [(p.name, p.after_build) for p in self._plugins if p.after_build is not None]
        await self._trigger("after_build", hooks, result, profiler)

    @staticmethod
    async def _trigger(
        event: str,
        hooks: list[tuple[str, Callable[[Any], Awaitable[None] | None]]],
        arg: object,
        profiler: BuildProfiler | None,
    ) -> None:
        if not hooks:
            return

        async def _run(name: str, hook: Callable[[Any], Awaitable[None] | None]) -> None:
            timer = (
                profiler.timer(
                    f"plugins.hook.{event}.{name}",
                    f"{name} hook: {event}",
                    hook=event,
                    plugin=name,
                )
                if profiler is not None
                else None
            )
            try:
                result = hook(arg)
                if inspect.isawaitable(result):
                    await result
            finally:
                if timer is not None:
                    timer.stop()

        await asyncio.gather(*(_run(name, hook) for name, hook in hooks))

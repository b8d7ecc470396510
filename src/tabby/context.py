"""Per-export context shared by every build component.

Created once per build invocation and passed explicitly; nothing here is
process-global.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tabby.observability.profiler import BuildProfiler
from tabby.plugins import Plugins

if TYPE_CHECKING:
    from tabby.config import TabbyConfig
    from tabby.routes import RouteSource
    from tabby.translations import TranslationCache


@dataclass(slots=True)
class BuildContext:
    """Everything one export needs from the outside world.

    Attributes:
        config: Frozen Tabby configuration.
        routes: Source of the ordered route list.
        plugins: Lifecycle hooks.
        translations: Missing-translation counts, if the site is localized.
        profiler: Collects render, hook, and phase timers.

    """

    config: TabbyConfig
    routes: RouteSource
    plugins: Plugins = field(default_factory=Plugins)
    translations: TranslationCache | None = None
    profiler: BuildProfiler = field(default_factory=BuildProfiler)

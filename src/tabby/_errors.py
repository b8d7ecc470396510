"""Tabby error hierarchy.

All tabby-specific errors inherit from TabbyError for easy catching.
Exceptions raised by a route's own ``build()`` are never wrapped.
"""


class TabbyError(Exception):
    """Base error for all tabby operations."""


class ConfigError(TabbyError):
    """Invalid or missing configuration."""


class RouteError(TabbyError):
    """A route (or route source) is malformed."""


class ExportError(TabbyError):
    """Error during static export."""


class NothingToBuildError(ExportError):
    """The export selected zero routes."""


class PromotionError(ExportError):
    """A staged file could not be moved to its final location."""


class ManifestError(ExportError):
    """The persisted build manifest could not be read."""

"""Shared type definitions for tabby."""

from collections.abc import Awaitable, Callable
from typing import Literal

# Mode of operation shown in the banner
type TabbyMode = Literal["build", "incremental"]

# Source identity of a route (e.g., "/content/pages/about.md")
type PodPath = str

# Route URL path (e.g., "/about/", "/static/app.css")
type UrlPath = str

# Normalized output path relative to the output directory, with a leading slash
type OutputPath = str

# Provider discriminator (``"static_dir"`` means copy, anything else renders)
type ProviderKind = str

# Rendered route content
type Content = str | bytes

# Render callable: sync or async, no arguments
type RenderFunc = Callable[[], Content | Awaitable[Content]]

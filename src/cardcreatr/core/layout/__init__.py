"""Page layout and SVG assembly."""
from __future__ import annotations

from cardcreatr.core.layout.page import (
    EVEN_SPACING,
    STRATEGIES,
    TIGHT,
    PageLayout,
    PageRenderer,
    PageSpec,
    Placeholder,
)

__all__ = [
    "EVEN_SPACING",
    "STRATEGIES",
    "TIGHT",
    "PageLayout",
    "PageRenderer",
    "PageSpec",
    "Placeholder",
]

"""Card rendering and the read-and-render pipeline."""
from __future__ import annotations

from cardcreatr.core.render.read_and_render import ALL_PAGES, FIRST_CARD, ReadAndRender
from cardcreatr.core.render.renderer import CardRenderer

__all__ = ["ALL_PAGES", "CardRenderer", "FIRST_CARD", "ReadAndRender"]

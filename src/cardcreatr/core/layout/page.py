"""Page Layout Engine.

Computes a grid of fixed-size cells on a fixed-size sheet and places
pre-rendered items into consecutive pages. Two strategies are supported:

- ``tight``: cells packed with no gap, centered as a block on the
  printable area.
- ``evenSpacing``: equal gaps between cells and around them on each axis.

Reversed (back-side) placement swaps column ``j`` with column
``h_cap - 1 - j`` so that fronts and backs line up when the sheet is
flipped along its vertical axis.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from cardcreatr.core.exceptions import ConfigFormatError, LayoutOverflow
from cardcreatr.core.layout.svg import element, format_number

logger = logging.getLogger(__name__)

TIGHT = "tight"
EVEN_SPACING = "evenSpacing"
STRATEGIES = (TIGHT, EVEN_SPACING)

FILLER_COLOR = "#D9D9D9"


@dataclass(frozen=True)
class PageSpec:
    """Sheet and item geometry in page viewport units."""

    width: float
    height: float
    item_width: float
    item_height: float
    print_margin: float = 0.0
    strategy: str = TIGHT

    @classmethod
    def from_viewport(cls, viewport: Mapping[str, Any], strategy: str = TIGHT) -> "PageSpec":
        """Build from a ``/viewports/page`` mapping."""
        return cls(
            width=float(viewport["width"]),
            height=float(viewport["height"]),
            item_width=float(viewport["cardWidth"]),
            item_height=float(viewport["cardHeight"]),
            print_margin=float(viewport.get("printMargin") or 0),
            strategy=strategy,
        )

    @property
    def printable_width(self) -> float:
        return self.width - 2 * self.print_margin

    @property
    def printable_height(self) -> float:
        return self.height - 2 * self.print_margin


@dataclass(frozen=True)
class Placeholder:
    """Top-left offset of one grid cell.

    ``mirror_x`` is the horizontal offset used when the sheet is rendered
    reversed.
    """

    x: float
    y: float
    mirror_x: float

    def position(self, reversed: bool = False) -> Tuple[float, float]:
        return (self.mirror_x if reversed else self.x, self.y)


class PageLayout:
    """Placement grid for one :class:`PageSpec`.

    Raises:
        LayoutOverflow: If not a single item fits on the printable area.
        ConfigFormatError: For an unknown strategy name or an item without area.
    """

    def __init__(self, spec: PageSpec) -> None:
        if spec.strategy not in STRATEGIES:
            raise ConfigFormatError(
                f"Unknown layout strategy: {spec.strategy}",
                context={"strategy": spec.strategy, "allowed": list(STRATEGIES)},
            )
        if spec.item_width <= 0 or spec.item_height <= 0:
            raise ConfigFormatError(
                "Card width and height must be positive.",
                context={"item": [spec.item_width, spec.item_height]},
            )
        self.spec = spec
        self.h_cap = max(0, math.floor(spec.printable_width / spec.item_width))
        self.v_cap = max(0, math.floor(spec.printable_height / spec.item_height))
        self.capacity = self.h_cap * self.v_cap
        if self.capacity == 0:
            raise LayoutOverflow(
                "Cannot fit any cards onto the page.",
                context={
                    "sheet": [spec.width, spec.height],
                    "item": [spec.item_width, spec.item_height],
                    "printMargin": spec.print_margin,
                },
            )
        self.placeholders = self._compute()
        logger.debug(
            "Layout %s: %dx%d cells (capacity %d)", spec.strategy, self.h_cap, self.v_cap, self.capacity
        )

    def _compute(self) -> List[Placeholder]:
        spec = self.spec
        unused_w = spec.printable_width - self.h_cap * spec.item_width
        unused_h = spec.printable_height - self.v_cap * spec.item_height
        if spec.strategy == EVEN_SPACING:
            h_gap = unused_w / (self.h_cap + 1)
            v_gap = unused_h / (self.v_cap + 1)
            h_start, v_start = h_gap, v_gap
        else:
            h_gap = v_gap = 0.0
            h_start, v_start = unused_w / 2, unused_h / 2

        def column_x(j: int) -> float:
            return h_start + (h_gap + spec.item_width) * j + spec.print_margin

        cells: List[Placeholder] = []
        for i in range(self.v_cap):
            y = v_start + (v_gap + spec.item_height) * i + spec.print_margin
            for j in range(self.h_cap):
                cells.append(Placeholder(x=column_x(j), y=y, mirror_x=column_x(self.h_cap - 1 - j)))
        return cells

    def cell(self, row: int, col: int) -> Placeholder:
        return self.placeholders[row * self.h_cap + col]

    def positions(self, reversed: bool = False) -> List[Tuple[float, float]]:
        """Cell offsets in placement order."""
        return [p.position(reversed) for p in self.placeholders]

    def paginate(self, items: Sequence[Any]) -> List[Sequence[Any]]:
        """Split ``items`` into consecutive chunks of at most ``capacity``."""
        return [items[i:i + self.capacity] for i in range(0, len(items), self.capacity)]


class PageRenderer:
    """Places rendered items (SVG fragments) onto pages of a :class:`PageLayout`."""

    def __init__(self, layout: PageLayout, reversed: bool = False) -> None:
        self.layout = layout
        self.reversed = reversed
        self.filler = element("rect", {"x": 0, "y": 0, "width": 1, "height": 1, "fill": FILLER_COLOR})

    @classmethod
    def from_viewport(
        cls, viewport: Mapping[str, Any], strategy: str = TIGHT, reversed: bool = False
    ) -> "PageRenderer":
        return cls(PageLayout(PageSpec.from_viewport(viewport, strategy)), reversed=reversed)

    @property
    def capacity(self) -> int:
        return self.layout.capacity

    def render_page(
        self,
        items: Sequence[Optional[str]],
        page_index: int = 0,
        *,
        reversed: Optional[bool] = None,
        fill: bool = False,
    ) -> str:
        """One page as a nested ``<svg>`` occupying unit square ``page_index``."""
        if len(items) > self.capacity:
            raise LayoutOverflow(
                f"{len(items)} items do not fit on one page of capacity {self.capacity}",
                context={"items": len(items), "capacity": self.capacity},
            )
        spec = self.layout.spec
        flip = self.reversed if reversed is None else reversed
        cells: List[str] = []
        for index, (x, y) in enumerate(self.layout.positions(flip)):
            item = items[index] if index < len(items) else None
            if not item:
                if not fill:
                    continue
                item = self.filler
            inner = element(
                "svg",
                {
                    "width": spec.item_width,
                    "height": spec.item_height,
                    "viewBox": "0 0 1 1",
                    "preserveAspectRatio": "none",
                },
                item,
            )
            transform = f"translate({format_number(x)},{format_number(y)})"
            cells.append(element("g", {"transform": transform}, inner))
        return element(
            "svg",
            {
                "width": 1,
                "height": 1,
                "x": 0,
                "y": page_index,
                "viewBox": f"0 0 {format_number(spec.width)} {format_number(spec.height)}",
                "preserveAspectRatio": "none",
            },
            "".join(cells),
        )

    def render(self, items: Sequence[str]) -> List[str]:
        """Discrete pages; empty cells of the last page get the filler."""
        return [self.render_page(chunk, 0, fill=True) for chunk in self.layout.paginate(items)]

    def render_concatenated(
        self, items: Sequence[str], backs: Optional[Sequence[str]] = None
    ) -> Tuple[str, int]:
        """All pages stacked vertically; returns ``(content, page_count)``.

        With ``backs`` (same length as ``items``), each front page is
        followed by the mirrored page of the matching back items.
        """
        if backs is not None and len(backs) != len(items):
            raise ValueError(f"Expected {len(items)} back items, got {len(backs)}")
        parts: List[str] = []
        num_pages = 0
        for start in range(0, len(items), self.capacity):
            end = start + self.capacity
            parts.append(self.render_page(items[start:end], num_pages))
            num_pages += 1
            if backs is not None:
                parts.append(self.render_page(backs[start:end], num_pages, reversed=not self.reversed))
                num_pages += 1
        return "".join(parts), num_pages


__all__ = [
    "EVEN_SPACING",
    "PageLayout",
    "PageRenderer",
    "PageSpec",
    "Placeholder",
    "STRATEGIES",
    "TIGHT",
]

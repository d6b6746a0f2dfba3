"""Font handles: measurement, word wrapping and glyph outlines.

A :class:`FontHandle` is built once per ``font`` field from the field's
bytes. Templates use it to wrap text to a box width and, in ``paths``
render mode, to turn text into SVG path data so output does not depend on
fonts installed on the viewing machine.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Dict, List, Optional
from xml.sax.saxutils import quoteattr

from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont

from cardcreatr.core.exceptions import AssetDecodeError

logger = logging.getLogger(__name__)

NOTDEF = ".notdef"


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


class FontHandle:
    """Parsed font plus the metrics needed for layout."""

    def __init__(self, data: bytes, *, path: str = "") -> None:
        self.data = bytes(data)
        self.path = path
        try:
            self._font = TTFont(BytesIO(self.data))
            self._cmap: Dict[int, str] = self._font.getBestCmap() or {}
            self._glyph_set = self._font.getGlyphSet()
            self.units_per_em: int = self._font["head"].unitsPerEm
            hhea = self._font["hhea"]
            self.ascender: int = hhea.ascent
            self.descender: int = hhea.descent
        except Exception as exc:
            raise AssetDecodeError(path, "font", str(exc)) from exc
        logger.debug("Loaded font %s (%d glyphs)", path or "<bytes>", len(self._font.getGlyphOrder()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FontHandle):
            return NotImplemented
        return self.data == other.data

    def __hash__(self) -> int:
        return hash(self.data)

    def __repr__(self) -> str:
        return f"FontHandle(path={self.path!r}, units_per_em={self.units_per_em})"

    def glyph_name(self, char: str) -> str:
        return self._cmap.get(ord(char), NOTDEF)

    def _advance_units(self, char: str) -> int:
        name = self.glyph_name(char)
        if name not in self._glyph_set:
            return 0
        return self._glyph_set[name].width

    def measure(self, text: str, size: float) -> float:
        """Advance width of ``text`` at font size ``size``."""
        units = sum(self._advance_units(ch) for ch in text)
        return units * size / self.units_per_em

    def wrap(self, text: str, width: float, size: float) -> List[str]:
        """Greedy word wrap of ``text`` into lines no wider than ``width``.

        Explicit newlines always break. A single word wider than ``width``
        gets a line of its own.
        """
        lines: List[str] = []
        space = self.measure(" ", size)
        for paragraph in str(text).split("\n"):
            current: List[str] = []
            current_width = 0.0
            for word in paragraph.split():
                word_width = self.measure(word, size)
                needed = word_width if not current else current_width + space + word_width
                if current and needed > width:
                    lines.append(" ".join(current))
                    current, current_width = [word], word_width
                else:
                    current.append(word)
                    current_width = needed
            lines.append(" ".join(current))
        return lines

    def glyph_path(self, char: str, x: float = 0.0, y: float = 0.0, size: Optional[float] = None) -> str:
        """SVG path data for one glyph with its origin at ``(x, y)``."""
        name = self.glyph_name(char)
        if name not in self._glyph_set:
            return ""
        scale = (size if size is not None else self.units_per_em) / self.units_per_em
        pen = SVGPathPen(self._glyph_set, ntos=_num)
        # Font units grow upwards; SVG user space grows downwards.
        self._glyph_set[name].draw(TransformPen(pen, (scale, 0, 0, -scale, x, y)))
        return pen.getCommands()

    def text_path(self, text: str, x: float, y: float, size: float) -> str:
        """SVG path data for a run of text starting at baseline ``(x, y)``."""
        parts: List[str] = []
        cursor = x
        for char in text:
            commands = self.glyph_path(char, cursor, y, size)
            if commands:
                parts.append(commands)
            cursor += self._advance_units(char) * size / self.units_per_em
        return "".join(parts)

    def to_svg(self, alias: str) -> str:
        """Export an SVG ``<font>`` definition block under ``alias``."""
        out: List[str] = [
            "<defs><font>",
            f"<font-face font-family={quoteattr(alias)} units-per-em=\"{self.units_per_em}\" "
            f"ascent=\"{self.ascender}\" descent=\"{self.descender}\"/>",
            '<missing-glyph><path d="M0,0h200v200h-200z"/></missing-glyph>',
        ]
        for codepoint, name in sorted(self._cmap.items()):
            glyph = self._glyph_set[name]
            pen = SVGPathPen(self._glyph_set, ntos=_num)
            glyph.draw(TransformPen(pen, (1, 0, 0, -1, 0, 0)))
            out.append(
                f"<glyph glyph-name={quoteattr(name)} unicode={quoteattr(chr(codepoint))} "
                f"horiz-adv-x=\"{glyph.width}\" d={quoteattr(pen.getCommands())}/>"
            )
        out.append("</font></defs>")
        return "".join(out)


__all__ = ["FontHandle"]

"""Small SVG string builders.

Output is assembled by string concatenation; item content produced by
templates is inserted raw.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional
from xml.sax.saxutils import quoteattr

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XML_DECLARATION = '<?xml version="1.0"?>'


def format_number(value: Any) -> str:
    """Render a coordinate the way it reads in hand-written SVG (``216``, ``40.5``)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def attrs(values: Mapping[str, Any]) -> str:
    """Serialize attributes in insertion order; ``None`` values are skipped."""
    return "".join(
        f" {name}={quoteattr(format_number(value))}"
        for name, value in values.items()
        if value is not None
    )


def element(tag: str, values: Mapping[str, Any], content: Optional[str] = None) -> str:
    if content is None:
        return f"<{tag}{attrs(values)}/>"
    return f"<{tag}{attrs(values)}>{content}</{tag}>"


def length(value: Any, unit: str = "") -> str:
    return f"{format_number(value)}{unit or ''}"


def document(
    content: str,
    width: str,
    height: str,
    *,
    view_box: str = "0 0 1 1",
    defs: Iterable[str] = (),
    font_family: str = "body",
) -> str:
    """Wrap finished content in a standalone SVG document."""
    body = "".join(defs) + element("g", {"font-family": font_family}, content)
    root = element(
        "svg",
        {
            "version": "1.1",
            "xmlns": SVG_NS,
            "xmlns:xlink": XLINK_NS,
            "width": width,
            "height": height,
            "viewBox": view_box,
            "preserveAspectRatio": "none",
        },
        body,
    )
    return f"{XML_DECLARATION}\n{root}\n"


__all__ = ["attrs", "document", "element", "format_number", "length"]

"""Card renderer: Jinja2 templates to SVG fragments.

Every card template gets the ``text`` and ``text_wrap`` helpers from the
bundled ``mixins.svg.j2`` and is rendered with:

- the keys of the resolved config tree, then the keys of the card tree on
  top of them
- ``config`` and ``card``: the two trees themselves
- ``fonts``: font handles by name, taken from the config's ``fonts``
- ``viewport``: the card viewport
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, Template, TemplateError

from cardcreatr.core.assets.fonts import FontHandle
from cardcreatr.core.exceptions import TemplateRenderError
from cardcreatr.core.layout.svg import element, format_number
from cardcreatr.core.options.leaf import Asset
from cardcreatr.data import get_data_path

logger = logging.getLogger(__name__)

MIXINS_NAME = "mixins.svg.j2"
MIXINS_IMPORT = '{% from "' + MIXINS_NAME + '" import text, text_wrap with context %}'

RENDER_MODE_AUTO = "auto"

_ANCHORS = {
    "left": "start",
    "start": "start",
    "center": "middle",
    "middle": "middle",
    "right": "end",
    "end": "end",
}


def text_anchor(align: str) -> str:
    return _ANCHORS.get(str(align), "start")


def align_x(handle: Optional[FontHandle], content: Any, x: float, size: float, align: str) -> float:
    """Left edge of a run of text drawn as paths, for the given alignment."""
    anchor = text_anchor(align)
    if handle is None or anchor == "start":
        return x
    width = handle.measure(str(content), size)
    return x - width / 2 if anchor == "middle" else x - width


def wrap_lines(handle: Optional[FontHandle], content: Any, width: float, size: float) -> List[str]:
    if content is None:
        return []
    if handle is None:
        return str(content).split("\n")
    return handle.wrap(str(content), width, size)


def font_handles(fonts: Any) -> Dict[str, FontHandle]:
    """Font handles from a resolved ``fonts`` mapping (non-font entries skipped)."""
    handles: Dict[str, FontHandle] = {}
    if isinstance(fonts, Mapping):
        for name, value in fonts.items():
            if isinstance(value, Asset) and value.font is not None:
                handles[name] = value.font
    return handles


def font_face_defs(fonts: Any) -> str:
    """``<defs>`` embedding every loaded font as an ``@font-face`` data URI."""
    rules = [
        f'@font-face{{font-family:"{name}";src:url({value.data_uri});}}'
        for name, value in (fonts.items() if isinstance(fonts, Mapping) else [])
        if isinstance(value, Asset) and value.font is not None
    ]
    if not rules:
        return ""
    return element("defs", {}, element("style", {"type": "text/css"}, "".join(rules)))


class CardRenderer:
    """Compiles one card template and renders cards with it."""

    def __init__(self) -> None:
        self.env = Environment(
            loader=FileSystemLoader(str(get_data_path("templates"))),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(
            text_anchor=text_anchor,
            align_x=align_x,
            wrap_lines=wrap_lines,
        )
        self.template: Optional[Template] = None

    def build(self, source: str) -> "CardRenderer":
        """Compile ``source`` with the mixins in scope.

        Raises:
            TemplateRenderError: If the template does not compile.
        """
        try:
            self.template = self.env.from_string(MIXINS_IMPORT + "\n" + source)
        except TemplateError as exc:
            raise TemplateRenderError(f"Cannot compile card template: {exc}") from exc
        logger.debug("Compiled card template (%d chars)", len(source))
        return self

    def render(self, card: Mapping[str, Any], config: Mapping[str, Any]) -> str:
        """Render one card as an ``<svg>`` fragment filling the unit square."""
        if self.template is None:
            raise TemplateRenderError("build() must be called before render()")
        viewport = dict(config.get("viewports", {}).get("card", {}))
        local_vars: Dict[str, Any] = {}
        local_vars.update(config)
        local_vars.update(card)
        local_vars.update(
            config=config,
            card=card,
            fonts=font_handles(config.get("fonts")),
            viewport=viewport,
            fontRenderMode=config.get("fontRenderMode", RENDER_MODE_AUTO),
        )
        try:
            body = self.template.render(**local_vars)
        except TemplateError as exc:
            raise TemplateRenderError(f"Cannot render card: {exc}") from exc

        view_box = " ".join(
            format_number(viewport.get(key, 0)) for key in ("xOffset", "yOffset", "width", "height")
        )
        return element(
            "svg",
            {
                "x": 0,
                "y": 0,
                "width": 1,
                "height": 1,
                "viewBox": view_box,
                "preserveAspectRatio": "none",
            },
            body,
        )


__all__ = [
    "CardRenderer",
    "TemplateRenderError",
    "align_x",
    "font_face_defs",
    "font_handles",
    "text_anchor",
    "wrap_lines",
]

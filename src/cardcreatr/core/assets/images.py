"""Image dimension decoding."""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image

from cardcreatr.core.exceptions import AssetDecodeError

_SVG_LENGTH_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$")


@dataclass(frozen=True)
class ImageDims:
    """Pixel dimensions of an image asset."""

    width: float
    height: float
    type: str


def image_dimensions(data: bytes, path: str = "") -> ImageDims:
    """Decode the dimensions of ``data``.

    Raster formats are read with Pillow (header only); SVG documents are
    measured from their ``width``/``height`` attributes or ``viewBox``.

    Raises:
        AssetDecodeError: If the bytes are not a readable image.
    """
    if _looks_like_svg(data):
        return _svg_dimensions(data, path)
    try:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
            fmt = (img.format or "").lower()
    except Exception as exc:
        raise AssetDecodeError(path, "image", str(exc)) from exc
    return ImageDims(width=width, height=height, type=fmt)


def _looks_like_svg(data: bytes) -> bool:
    head = data[:512].lstrip()
    return head.startswith(b"<?xml") or head.startswith(b"<svg")


def _svg_dimensions(data: bytes, path: str) -> ImageDims:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise AssetDecodeError(path, "image", str(exc)) from exc

    width = _svg_length(root.get("width"))
    height = _svg_length(root.get("height"))
    if width is None or height is None:
        view_box = (root.get("viewBox") or "").replace(",", " ").split()
        if len(view_box) != 4:
            raise AssetDecodeError(path, "image", "SVG has no usable width/height or viewBox")
        try:
            width, height = float(view_box[2]), float(view_box[3])
        except ValueError as exc:
            raise AssetDecodeError(path, "image", str(exc)) from exc
    return ImageDims(width=width, height=height, type="svg")


def _svg_length(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    match = _SVG_LENGTH_RE.match(raw)
    if match is None:
        return None
    return float(match.group(1))


__all__ = ["ImageDims", "image_dimensions"]

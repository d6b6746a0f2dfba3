"""Leaf Resolver: materialize one terminal field.

Dispatch is on the field's capability set:

- no capabilities: the raw value unchanged
- ``uint``: a non-negative ``int``
- ``number``: a ``float``
- any of ``path``/``img``/``font``: an :class:`Asset` with the file bytes,
  a data URI, and image dimensions and/or a font handle when declared

A missing file for an ``img`` field resolves to the built-in placeholder
image instead of failing. That is the only failure absorbed here.
"""
from __future__ import annotations

import base64
import logging
import mimetypes
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from cardcreatr.core.assets.fonts import FontHandle
from cardcreatr.core.assets.images import ImageDims, image_dimensions
from cardcreatr.core.exceptions import AssetLoadError, NumericParseError
from cardcreatr.core.options.context import ResolutionContext
from cardcreatr.core.options.effects import ReadBytes, Resolution
from cardcreatr.core.options.fields import (
    ASSET_CAPABILITIES,
    Capability,
    Field,
    FieldDescriptor,
)
from cardcreatr.data import read_bytes

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "placeholder.png"

_UINT_RE = re.compile(r"^\s*\+?\d+\s*$")


def placeholder_image() -> bytes:
    """Bytes substituted for unreadable ``img`` fields."""
    return read_bytes("images", PLACEHOLDER_NAME)


@dataclass
class Asset:
    """A file-backed leaf value."""

    path: str
    data: bytes
    mime_type: Optional[str]
    data_uri: str
    dims: Optional[ImageDims] = None
    font: Optional[FontHandle] = None
    context: Optional[ResolutionContext] = field(default=None, compare=False, repr=False)

    def text(self, encoding: str = "utf-8") -> str:
        return self.data.decode(encoding)


def guess_mime_type(path: str) -> Optional[str]:
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type


def make_data_uri(data: bytes, mime_type: Optional[str]) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or ''};base64,{encoded}"


def parse_uint(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise NumericParseError(path, value, "an unsigned integer")
    if isinstance(value, int):
        if value < 0:
            raise NumericParseError(path, value, "an unsigned integer")
        return value
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    if isinstance(value, str) and _UINT_RE.match(value):
        return int(value)
    raise NumericParseError(path, value, "an unsigned integer")


def parse_number(value: Any, path: str) -> float:
    if isinstance(value, bool):
        raise NumericParseError(path, value, "a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            pass
    raise NumericParseError(path, value, "a number")


def resolve_leaf(item: Field, context: ResolutionContext, path: str) -> Resolution:
    """Resolve a terminal field; array fields resolve element by element."""
    descriptor = item.descriptor
    if descriptor.is_array and descriptor.capabilities:
        results = []
        for index, element in enumerate(item.value):
            results.append((yield from resolve_value(descriptor, element, context, f"{path}[{index}]")))
        return results
    return (yield from resolve_value(descriptor, item.value, context, path))


def resolve_value(
    descriptor: FieldDescriptor,
    value: Any,
    context: ResolutionContext,
    path: str,
) -> Resolution:
    if isinstance(value, Asset):
        return value
    if descriptor.has(Capability.UINT):
        return parse_uint(value, path)
    if descriptor.has(Capability.NUMBER):
        return parse_number(value, path)
    if not descriptor.has(ASSET_CAPABILITIES):
        return value
    return (yield from _load_asset(descriptor, value, context, path))


def _load_asset(
    descriptor: FieldDescriptor,
    value: Any,
    context: ResolutionContext,
    path: str,
) -> Resolution:
    is_image = descriptor.has(Capability.IMG)
    name = "" if value is None else str(value)
    location = context.locate(name) if name else ""
    mime_type = guess_mime_type(location)

    try:
        if not name:
            raise AssetLoadError(path, "cannot load file from empty path")
        data = yield ReadBytes(context, name)
    except AssetLoadError as exc:
        if not is_image:
            raise
        logger.debug("Using placeholder image for %s: %s", path, exc)
        data = placeholder_image()
        mime_type = guess_mime_type(PLACEHOLDER_NAME)

    asset = Asset(
        path=location,
        data=data,
        mime_type=mime_type,
        data_uri=make_data_uri(data, mime_type),
        context=context,
    )
    if is_image:
        asset.dims = image_dimensions(data, location or path)
    if descriptor.has(Capability.FONT):
        asset.font = FontHandle(data, path=location)
    return asset


__all__ = [
    "Asset",
    "PLACEHOLDER_NAME",
    "guess_mime_type",
    "make_data_uri",
    "parse_number",
    "parse_uint",
    "placeholder_image",
    "resolve_leaf",
    "resolve_value",
]

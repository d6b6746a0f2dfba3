"""Decoders for file-backed field values (images, fonts)."""
from cardcreatr.core.assets.fonts import FontHandle
from cardcreatr.core.assets.images import ImageDims, image_dimensions

__all__ = ["FontHandle", "ImageDims", "image_dimensions"]

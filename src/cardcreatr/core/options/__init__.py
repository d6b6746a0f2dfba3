"""
Layered configuration resolution.

Sources are plain mappings whose keys carry a field grammar
(``"image (img,path)"``, ``"body[]"``). :class:`Options` merges them by
priority and materializes file-backed values, either blocking or
concurrently.
"""
from cardcreatr.core.options.context import (
    DirectoryContext,
    ReaderContext,
    ResolutionContext,
    as_context,
)
from cardcreatr.core.options.fields import (
    Capability,
    FieldDescriptor,
    parse_field_key,
    serialize_field_key,
)
from cardcreatr.core.options.layering import Options
from cardcreatr.core.options.leaf import Asset
from cardcreatr.core.options.registry import ABSENT, CompletionRegistry
from cardcreatr.core.options.resolver import lookup

__all__ = [
    "ABSENT",
    "Asset",
    "Capability",
    "CompletionRegistry",
    "DirectoryContext",
    "FieldDescriptor",
    "Options",
    "ReaderContext",
    "ResolutionContext",
    "as_context",
    "lookup",
    "parse_field_key",
    "serialize_field_key",
]

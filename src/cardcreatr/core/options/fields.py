"""Field key grammar.

Mapping keys carry a small schema of their own::

    "template (path)"    -> name "template", properties {"path"}
    "image (img,path)"   -> name "image", properties {"img", "path"}
    "body[]"             -> name "body", array field

Properties select how the Leaf Resolver materializes a value; the array
suffix lets a key repeat within one source, each occurrence appending one
element. Keys starting with ``_`` are layering metadata, not fields.
"""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple, Union

from cardcreatr.core.exceptions import DuplicateField, FieldKeyParseError

FIELD_NAME_RE = re.compile(r"^\w+")
PROPERTIES_RE = re.compile(r"\(([\w,]+)\)")
ARRAY_RE = re.compile(r"\[\]$")

METADATA_PREFIX = "_"

RawSource = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


class Capability(enum.Flag):
    """Resolution capabilities a field declares through its properties."""

    NONE = 0
    PATH = enum.auto()
    IMG = enum.auto()
    FONT = enum.auto()
    UINT = enum.auto()
    NUMBER = enum.auto()


ASSET_CAPABILITIES = Capability.PATH | Capability.IMG | Capability.FONT
NUMERIC_CAPABILITIES = Capability.UINT | Capability.NUMBER

_CAPABILITY_BY_PROPERTY: Dict[str, Capability] = {
    "path": Capability.PATH,
    "img": Capability.IMG,
    "font": Capability.FONT,
    "uint": Capability.UINT,
    "number": Capability.NUMBER,
}


@dataclass(frozen=True)
class FieldDescriptor:
    """Structured form of one mapping key."""

    name: str
    properties: FrozenSet[str] = frozenset()
    is_array: bool = False
    capabilities: Capability = Capability.NONE

    def has(self, capability: Capability) -> bool:
        return bool(self.capabilities & capability)


@dataclass
class Field:
    """A descriptor paired with the raw value one source gives it."""

    descriptor: FieldDescriptor
    value: Any

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def is_consumable(self) -> bool:
        """Whether the value is a nested mapping to recurse into."""
        return isinstance(self.value, Mapping)


@dataclass
class ParsedSource:
    """One source level with its keys parsed into fields."""

    fields: Dict[str, Field] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)


def parse_field_key(key: str) -> FieldDescriptor:
    """Parse a raw mapping key into a :class:`FieldDescriptor`.

    Raises:
        FieldKeyParseError: If the key does not begin with a word character,
            or combines ``uint``/``number`` with any other known property.
    """
    name_match = FIELD_NAME_RE.match(key)
    if name_match is None:
        raise FieldKeyParseError(key)

    properties: FrozenSet[str] = frozenset()
    props_match = PROPERTIES_RE.search(key)
    if props_match is not None:
        properties = frozenset(p for p in props_match.group(1).split(",") if p)

    # The array marker may sit before or after the property group.
    is_array = ARRAY_RE.search(PROPERTIES_RE.sub("", key).rstrip()) is not None

    capabilities = Capability.NONE
    for prop in properties:
        capabilities |= _CAPABILITY_BY_PROPERTY.get(prop, Capability.NONE)

    numeric = capabilities & NUMERIC_CAPABILITIES
    if (numeric and capabilities != numeric) or numeric == NUMERIC_CAPABILITIES:
        raise FieldKeyParseError(key)

    return FieldDescriptor(
        name=name_match.group(0),
        properties=properties,
        is_array=is_array,
        capabilities=capabilities,
    )


def serialize_field_key(descriptor: FieldDescriptor) -> str:
    """Build a raw key from a descriptor; inverse of :func:`parse_field_key`."""
    key = descriptor.name
    if descriptor.properties:
        key += " (" + ",".join(sorted(descriptor.properties)) + ")"
    if descriptor.is_array:
        key += "[]"
    return key


def iter_source_items(source: RawSource) -> Iterable[Tuple[str, Any]]:
    """Yield ``(key, value)`` pairs from a mapping or a sequence of pairs."""
    if isinstance(source, Mapping):
        return source.items()
    return source


def convert_keys_to_fields(source: RawSource, parent_path: str = "") -> ParsedSource:
    """Parse every key of one source level.

    Repeated array keys accumulate in order; any other repeat of a field
    name within the same source is a :class:`DuplicateField` error.
    """
    parsed = ParsedSource()
    for key, value in iter_source_items(source):
        if key.startswith(METADATA_PREFIX):
            parsed.metadata[key] = value
            continue

        descriptor = parse_field_key(key)
        existing = parsed.fields.get(descriptor.name)
        if existing is None:
            if descriptor.is_array:
                value = _as_list(value)
            parsed.fields[descriptor.name] = Field(descriptor, value)
            continue

        if not (descriptor.is_array and existing.descriptor == descriptor):
            raise DuplicateField(f"{parent_path}/{descriptor.name}")
        existing.value.extend(_as_list(value))
    return parsed


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def get_all_field_names(sources: Iterable[ParsedSource]) -> List[str]:
    """Union of field names across sources, in first-seen order."""
    seen: Dict[str, None] = {}
    for source in sources:
        for name in source.fields:
            seen.setdefault(name, None)
    return list(seen)


__all__ = [
    "ARRAY_RE",
    "ASSET_CAPABILITIES",
    "Capability",
    "Field",
    "FieldDescriptor",
    "ParsedSource",
    "RawSource",
    "convert_keys_to_fields",
    "get_all_field_names",
    "iter_source_items",
    "parse_field_key",
    "serialize_field_key",
]

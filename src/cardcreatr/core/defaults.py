"""Starter content for new bundles."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from cardcreatr.core import bundle as ccsb
from cardcreatr.core.cards import objects_to_csv, write_csv
from cardcreatr.core.options.fields import FieldDescriptor, parse_field_key, serialize_field_key
from cardcreatr.data import read_text


def get_base_field() -> Dict[str, Any]:
    """Editor metadata for one card-data column."""
    return {
        "name": "",
        "properties": [],
        "display": "string",
        "width": 150,
        "array": False,
        "dropdownV1": "",
    }


def get_base_font_info() -> Dict[str, Any]:
    return {
        "name": "",
        "filename": None,
        "source": "",
        "sourceName": "",
        "sourceVariant": "",
    }


def get_default_fields() -> List[Dict[str, Any]]:
    qty = get_base_field()
    qty.update(name="qty", properties=["uint"], display="number", width=50)
    title = get_base_field()
    title.update(name="title", width=200)
    return [qty, title]


def get_default_template() -> str:
    return read_text("templates", "starter.svg.j2")


def get_default_config() -> str:
    return read_text("templates", "starter-config.hjson")


def field_key(field_info: Dict[str, Any]) -> str:
    """Column header for an editor field definition."""
    descriptor = FieldDescriptor(
        name=field_info["name"],
        properties=frozenset(field_info.get("properties") or ()),
        is_array=bool(field_info.get("array")),
    )
    key = serialize_field_key(descriptor)
    # Reject definitions the grammar cannot read back.
    parse_field_key(key)
    return key


def get_default_cards() -> str:
    keys = [field_key(info) for info in get_default_fields()]
    sample = dict(zip(keys, [1, "Hello, World!"]))
    return write_csv(objects_to_csv([sample]))


def create_starter_bundle(path: Union[str, Path]) -> ccsb.CcsbReader:
    """Write a new bundle at ``path`` holding the starter content."""
    bundle = ccsb.CcsbReader.new(path)
    bundle.write_file(ccsb.CONFIG_PATH, get_default_config())
    bundle.write_file(ccsb.TEMPLATE_PATH, get_default_template())
    bundle.write_file(ccsb.DATA_PATH, get_default_cards())
    bundle.write_file(ccsb.FIELDS_PATH, json.dumps(get_default_fields(), indent=2))
    bundle.save()
    return bundle


__all__ = [
    "create_starter_bundle",
    "field_key",
    "get_base_field",
    "get_base_font_info",
    "get_default_cards",
    "get_default_config",
    "get_default_fields",
    "get_default_template",
]

from __future__ import annotations

import pytest

from cardcreatr.core.exceptions import DuplicateField, FieldKeyParseError
from cardcreatr.core.options.fields import (
    Capability,
    FieldDescriptor,
    convert_keys_to_fields,
    get_all_field_names,
    parse_field_key,
    serialize_field_key,
)


def test_plain_key() -> None:
    d = parse_field_key("title")
    assert d.name == "title"
    assert d.properties == frozenset()
    assert d.is_array is False
    assert d.capabilities == Capability.NONE


@pytest.mark.parametrize(
    "key, name, props, is_array",
    [
        ("template (path)", "template", {"path"}, False),
        ("image (img,path)", "image", {"img", "path"}, False),
        ("body[]", "body", set(), True),
        ("art (img)[]", "art", {"img"}, True),
        ("art[] (img)", "art", {"img"}, True),
        ("extra (shiny)", "extra", {"shiny"}, False),
    ],
)
def test_key_forms(key: str, name: str, props: set, is_array: bool) -> None:
    d = parse_field_key(key)
    assert d.name == name
    assert d.properties == frozenset(props)
    assert d.is_array is is_array


def test_capabilities_decided_at_parse_time() -> None:
    d = parse_field_key("face (font,path)")
    assert d.has(Capability.FONT)
    assert d.has(Capability.PATH)
    assert not d.has(Capability.IMG)
    # Unknown properties are kept but grant nothing.
    assert parse_field_key("x (shiny)").capabilities == Capability.NONE


@pytest.mark.parametrize("key", ["", " title", "(path)", "-x"])
def test_key_must_start_with_identifier(key: str) -> None:
    with pytest.raises(FieldKeyParseError):
        parse_field_key(key)


@pytest.mark.parametrize("key", ["n (uint,path)", "n (number,img)", "n (uint,number)"])
def test_numeric_properties_are_exclusive(key: str) -> None:
    with pytest.raises(FieldKeyParseError):
        parse_field_key(key)


def test_serialize_sorts_properties() -> None:
    d = FieldDescriptor(name="image", properties=frozenset({"path", "img"}), is_array=True)
    assert serialize_field_key(d) == "image (img,path)[]"
    assert parse_field_key(serialize_field_key(d)).properties == d.properties


def test_metadata_keys_are_not_fields() -> None:
    parsed = convert_keys_to_fields({"_dirname": "/tmp", "title": "x"})
    assert list(parsed.fields) == ["title"]
    assert parsed.metadata == {"_dirname": "/tmp"}


def test_array_keys_accumulate_in_order() -> None:
    parsed = convert_keys_to_fields([("tags[]", "a"), ("tags[]", "b"), ("tags[]", "c")])
    assert parsed.fields["tags"].value == ["a", "b", "c"]


def test_duplicate_field_in_one_source() -> None:
    with pytest.raises(DuplicateField) as exc:
        convert_keys_to_fields([("title", "a"), ("title (path)", "b")], "/card")
    assert exc.value.path == "/card/title"


def test_field_names_first_seen_order() -> None:
    a = convert_keys_to_fields({"b": 1, "a": 2})
    b = convert_keys_to_fields({"c": 3, "a": 4})
    assert get_all_field_names([a, b]) == ["b", "a", "c"]

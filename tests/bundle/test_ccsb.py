from __future__ import annotations

import asyncio
import json
import zipfile
from pathlib import Path

import pytest

from cardcreatr.core import bundle as ccsb
from cardcreatr.core.defaults import (
    create_starter_bundle,
    field_key,
    get_base_field,
    get_base_font_info,
    get_default_cards,
    get_default_fields,
)
from cardcreatr.core.exceptions import BundleError, FieldKeyParseError, SchemaValidationError
from helpers.images import png_bytes
from helpers.projects import write_bundle


def test_is_bundle_path():
    assert ccsb.is_bundle_path("deck.ccsb")
    assert ccsb.is_bundle_path(Path("/x/Deck.CCSB"))
    assert not ccsb.is_bundle_path("deck.zip")
    assert not ccsb.is_bundle_path("config.yaml")


def test_round_trip_through_disk(tmp_path: Path):
    path = write_bundle(tmp_path / "deck.ccsb", extra={"art/a.png": png_bytes(4, 4)})
    assert zipfile.is_zipfile(path)

    bundle = ccsb.CcsbReader(path).load()
    assert bundle.read_file(ccsb.CONFIG_PATH) == b"layoutStrategy: tight\n"
    assert bundle.contains_file("art/a.png")
    assert not bundle.contains_file("art/b.png")
    assert bundle.list_assets() == ["art/a.png"]


def test_read_before_load(tmp_path: Path):
    bundle = ccsb.CcsbReader(write_bundle(tmp_path / "deck.ccsb"))
    assert not bundle.loaded
    with pytest.raises(BundleError, match="load"):
        bundle.read_file(ccsb.DATA_PATH)


def test_missing_entry(tmp_path: Path):
    bundle = ccsb.CcsbReader(write_bundle(tmp_path / "deck.ccsb")).load()
    with pytest.raises(BundleError) as exc:
        bundle.read_file("nope.png")
    assert exc.value.context["entry"] == "nope.png"
    with pytest.raises(BundleError):
        bundle.read_file("")


def test_missing_or_corrupt_container(tmp_path: Path):
    with pytest.raises(BundleError):
        ccsb.CcsbReader(tmp_path / "absent.ccsb").load()
    bad = tmp_path / "bad.ccsb"
    bad.write_bytes(b"not a zip")
    with pytest.raises(BundleError):
        ccsb.CcsbReader(bad).load()


def test_async_load_and_read(tmp_path: Path):
    path = write_bundle(tmp_path / "deck.ccsb")

    async def scenario():
        bundle = await ccsb.CcsbReader(path).load_async()
        return await bundle.read_file_async(ccsb.DATA_PATH)

    assert asyncio.run(scenario()).startswith(b"id,title")


def test_list_assets_skips_canonical_and_macos_entries(tmp_path: Path):
    bundle = ccsb.CcsbReader.new(tmp_path / "deck.ccsb")
    for name in (ccsb.DATA_PATH, ccsb.FONTS_PATH, "__MACOSX/._a.png", "a.png", "fonts/b.ttf"):
        bundle.write_file(name, b"x")
    assert bundle.list_assets() == ["a.png", "fonts/b.ttf"]
    assert bundle.list_assets(lambda name: name.endswith(".ttf")) == ["fonts/b.ttf"]


def test_create_and_remove_file(tmp_path: Path):
    bundle = ccsb.CcsbReader.new(tmp_path / "deck.ccsb")
    name = bundle.create_file("image/png", "images/", png_bytes(2, 2))
    assert name.startswith("images/")
    assert name.endswith(".png")
    assert bundle.contains_file(name)
    bundle.remove_file(name)
    assert not bundle.contains_file(name)
    bundle.remove_file("never-there")


def test_edits_stay_in_memory_until_saved(tmp_path: Path):
    path = write_bundle(tmp_path / "deck.ccsb")
    bundle = ccsb.CcsbReader(path).load()
    bundle.write_file("notes.txt", "draft")
    assert not ccsb.CcsbReader(path).load().contains_file("notes.txt")
    bundle.save()
    assert ccsb.CcsbReader(path).load().read_file("notes.txt") == b"draft"


def test_font_source(tmp_path: Path):
    fonts = [
        dict(get_base_font_info(), name="title", filename="fonts/title.ttf"),
        dict(get_base_font_info(), name="unused"),
    ]
    path = write_bundle(tmp_path / "deck.ccsb", extra={ccsb.FONTS_PATH: json.dumps(fonts).encode()})
    bundle = ccsb.CcsbReader(path).load()
    assert bundle.font_source() == {"fonts": {"title (font)": "fonts/title.ttf"}}


def test_font_source_without_fonts_json(tmp_path: Path):
    bundle = ccsb.CcsbReader(write_bundle(tmp_path / "deck.ccsb")).load()
    assert bundle.font_source() == {}


def test_malformed_fonts_json(tmp_path: Path):
    fonts = [{"name": "has space", "filename": "a.ttf"}]
    path = write_bundle(tmp_path / "deck.ccsb", extra={ccsb.FONTS_PATH: json.dumps(fonts).encode()})
    bundle = ccsb.CcsbReader(path).load()
    with pytest.raises(SchemaValidationError) as exc:
        bundle.font_source()
    assert exc.value.context["schema"] == "fonts"


def test_starter_bundle(tmp_path: Path):
    created = create_starter_bundle(tmp_path / "new.ccsb")
    bundle = ccsb.CcsbReader(created.path).load()
    assert bundle.read_fields() == get_default_fields()
    assert b"{{ text(" in bundle.read_file(ccsb.TEMPLATE_PATH)
    assert bundle.read_file(ccsb.DATA_PATH).decode() == get_default_cards()
    assert bundle.list_assets() == []


def test_default_cards_header_uses_field_grammar():
    assert get_default_cards().splitlines() == ["qty (uint),title", '1,"Hello, World!"']


def test_field_key():
    info = dict(get_base_field(), name="art", properties=["path", "img"], array=True)
    assert field_key(info) == "art (img,path)[]"
    with pytest.raises(FieldKeyParseError):
        field_key(dict(get_base_field(), name="n", properties=["uint", "path"]))

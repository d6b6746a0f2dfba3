from __future__ import annotations

import pytest

from cardcreatr.core.assets.fonts import FontHandle
from cardcreatr.core.exceptions import AssetDecodeError


@pytest.fixture
def handle(font_bytes: bytes) -> FontHandle:
    return FontHandle(font_bytes, path="body.ttf")


def test_metrics(handle: FontHandle) -> None:
    assert handle.units_per_em == 1000
    assert handle.ascender == 800
    assert handle.descender == -200


def test_measure(handle: FontHandle) -> None:
    assert handle.measure("AB", 10) == pytest.approx(10.0)
    assert handle.measure("A B", 10) == pytest.approx(12.5)
    assert handle.measure("", 10) == 0


def test_wrap_greedy(handle: FontHandle) -> None:
    # words are 10 wide at size 10, spaces 2.5
    assert handle.wrap("AB CD EF", 25, 10) == ["AB CD", "EF"]
    assert handle.wrap("AB CD EF", 100, 10) == ["AB CD EF"]


def test_wrap_keeps_explicit_newlines(handle: FontHandle) -> None:
    assert handle.wrap("AB\nCD", 100, 10) == ["AB", "CD"]


def test_wrap_long_word_gets_own_line(handle: FontHandle) -> None:
    assert handle.wrap("A ABCDEFG B", 20, 10) == ["A", "ABCDEFG", "B"]


def test_glyph_path_flips_y_axis(handle: FontHandle) -> None:
    commands = handle.glyph_path("A", 0, 0, 1000)
    assert commands.startswith("M")
    assert "-700" in commands
    assert "450" in commands


def test_glyph_path_scales_and_offsets(handle: FontHandle) -> None:
    commands = handle.glyph_path("A", 100, 50, 10)
    assert "100.5" in commands
    assert "43" in commands


def test_empty_glyph_has_no_path(handle: FontHandle) -> None:
    assert handle.glyph_path(" ") == ""


def test_text_path_advances_cursor(handle: FontHandle) -> None:
    single = handle.glyph_path("A", 0, 0, 10)
    both = handle.text_path("AA", 0, 0, 10)
    assert both.startswith(single)
    assert "5.5" in both[len(single):]


def test_to_svg(handle: FontHandle) -> None:
    svg = handle.to_svg("body")
    assert svg.startswith("<defs><font>")
    assert 'font-family="body"' in svg
    assert 'units-per-em="1000"' in svg
    assert 'unicode="A"' in svg
    assert 'horiz-adv-x="500"' in svg


def test_equality_by_bytes(font_bytes: bytes) -> None:
    assert FontHandle(font_bytes, path="a.ttf") == FontHandle(font_bytes, path="b.ttf")


def test_bad_bytes() -> None:
    with pytest.raises(AssetDecodeError) as exc:
        FontHandle(b"nope", path="bad.ttf")
    assert exc.value.path == "bad.ttf"

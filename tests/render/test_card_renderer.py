from __future__ import annotations

import pytest

from cardcreatr.core.assets.fonts import FontHandle
from cardcreatr.core.exceptions import TemplateRenderError
from cardcreatr.core.options.leaf import Asset
from cardcreatr.core.render import CardRenderer
from cardcreatr.core.render.renderer import align_x, font_face_defs, font_handles, text_anchor, wrap_lines

CONFIG = {
    "title": "from config",
    "fontRenderMode": "auto",
    "viewports": {"card": {"width": 180, "height": 252, "xOffset": 0, "yOffset": 0}},
}


def _font_asset(font_bytes: bytes) -> Asset:
    return Asset(
        path="body.ttf",
        data=font_bytes,
        mime_type="font/ttf",
        data_uri="data:font/ttf;base64,AAAA",
        font=FontHandle(font_bytes),
    )


def test_card_values_shadow_config_values():
    out = CardRenderer().build("<t>{{ title }}|{{ config.title }}|{{ card.title }}</t>").render(
        {"title": "from card"}, CONFIG
    )
    assert "<t>from card|from config|from card</t>" in out


def test_output_is_unit_square_with_card_viewbox():
    config = dict(CONFIG, viewports={"card": {"width": 200, "height": 300, "xOffset": 5, "yOffset": 0}})
    out = CardRenderer().build("<g/>").render({}, config)
    assert out.startswith('<svg x="0" y="0" width="1" height="1" viewBox="5 0 200 300" preserveAspectRatio="none">')
    assert out.endswith("</svg>")


def test_viewport_variable():
    out = CardRenderer().build("{{ viewport.width }}x{{ viewport.height }}").render({}, CONFIG)
    assert "180x252" in out


def test_text_helper_emits_text_element():
    out = CardRenderer().build('{{ text(title, size=10, x=90, y=20, align="center") }}').render(
        {"title": "Fish & Chips"}, CONFIG
    )
    assert '<text x="90" y="20" font-family="body" font-size="10" text-anchor="middle" fill="black">' in out
    assert "Fish &amp; Chips</text>" in out


def test_text_helper_draws_paths_in_paths_mode(font_bytes):
    config = dict(CONFIG, fontRenderMode="paths", fonts={"body": _font_asset(font_bytes)})
    out = CardRenderer().build("{{ text(title, size=10, x=0, y=20) }}").render({"title": "AB"}, config)
    assert "<path d=" in out
    assert "<text" not in out


def test_paths_mode_without_font_falls_back_to_text():
    config = dict(CONFIG, fontRenderMode="paths")
    out = CardRenderer().build("{{ text(title) }}").render({"title": "AB"}, config)
    assert "<text" in out


def test_text_wrap_breaks_lines(font_bytes):
    config = dict(CONFIG, fonts={"body": _font_asset(font_bytes)})
    out = CardRenderer().build("{{ text_wrap(title, size=10, width=25, y=10) }}").render(
        {"title": "AB CD EF"}, config
    )
    assert out.count("<text") == 2
    assert ">AB CD</text>" in out
    assert 'y="22.0"' in out


def test_broken_template_does_not_compile():
    with pytest.raises(TemplateRenderError):
        CardRenderer().build("{% if %}")


def test_render_errors_are_wrapped():
    renderer = CardRenderer().build("{{ missing.attr.deeper }}")
    with pytest.raises(TemplateRenderError):
        renderer.render({}, CONFIG)


def test_render_before_build():
    with pytest.raises(TemplateRenderError):
        CardRenderer().render({}, CONFIG)


@pytest.mark.parametrize("align, anchor", [("left", "start"), ("center", "middle"), ("right", "end"), ("?", "start")])
def test_text_anchor(align, anchor):
    assert text_anchor(align) == anchor


def test_align_x(font_bytes):
    handle = FontHandle(font_bytes)
    assert align_x(handle, "AB", 50, 10, "left") == 50
    assert align_x(handle, "AB", 50, 10, "center") == pytest.approx(45)
    assert align_x(handle, "AB", 50, 10, "right") == pytest.approx(40)
    assert align_x(None, "AB", 50, 10, "right") == 50


def test_wrap_lines_without_font():
    assert wrap_lines(None, "a\nb", 10, 10) == ["a", "b"]
    assert wrap_lines(None, None, 10, 10) == []


def test_font_handles_and_defs(font_bytes):
    fonts = {"body": _font_asset(font_bytes), "other": "not a font"}
    assert list(font_handles(fonts)) == ["body"]
    defs = font_face_defs(fonts)
    assert defs.startswith("<defs><style")
    assert '@font-face{font-family:"body";src:url(data:font/ttf;base64,AAAA);}' in defs
    assert font_face_defs({}) == ""
    assert font_face_defs(None) == ""

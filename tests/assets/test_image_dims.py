import pytest

from cardcreatr.core.assets.images import image_dimensions
from cardcreatr.core.exceptions import AssetDecodeError
from cardcreatr.core.options.leaf import placeholder_image
from helpers.images import png_bytes


def test_png_dimensions():
    dims = image_dimensions(png_bytes(12, 7))
    assert (dims.width, dims.height, dims.type) == (12, 7, "png")


def test_placeholder_is_64_square():
    dims = image_dimensions(placeholder_image())
    assert (dims.width, dims.height) == (64, 64)


def test_svg_width_and_height_attributes():
    data = b'<?xml version="1.0"?><svg xmlns="http://www.w3.org/2000/svg" width="30px" height="12.5"/>'
    dims = image_dimensions(data)
    assert (dims.width, dims.height, dims.type) == (30.0, 12.5, "svg")


def test_svg_falls_back_to_view_box():
    data = b'<svg xmlns="http://www.w3.org/2000/svg" width="100%" viewBox="0,0,8,9"/>'
    dims = image_dimensions(data)
    assert (dims.width, dims.height) == (8.0, 9.0)


@pytest.mark.parametrize(
    "data",
    [b"garbage", b"<svg xmlns='http://www.w3.org/2000/svg'/>", b"<svg><unclosed></svg>"],
)
def test_unreadable_images(data):
    with pytest.raises(AssetDecodeError):
        image_dimensions(data, "x")

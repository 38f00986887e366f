"""Tests for the render pipeline."""

import pytest
from PyQt6.QtGui import QImage

from profile_image_cropper.errors import RenderUnavailable
from profile_image_cropper.models import OutputSpec
from profile_image_cropper.renderer import CropRenderer
from profile_image_cropper.session import CropSession

from conftest import make_image

RED = (200, 40, 40)


def _session(shape="rect", size=(400, 400)):
    s = CropSession(make_image(*size, color=RED), OutputSpec(aspect_ratio=1.0, crop_shape=shape))
    s.initialize()
    return s


def _rgb(image: QImage, x: int, y: int) -> tuple[int, int, int]:
    c = image.pixelColor(x, y)
    return c.red(), c.green(), c.blue()


def test_frame_matches_display_size():
    frame = CropRenderer().render(_session(size=(1000, 800)))
    assert (frame.width(), frame.height()) == (400, 320)


def test_crop_interior_is_not_dimmed():
    frame = CropRenderer().render(_session())
    assert _rgb(frame, 200, 200) == RED


def test_outside_crop_is_dimmed():
    frame = CropRenderer().render(_session())
    r, g, b = _rgb(frame, 10, 200)
    assert r < RED[0] * 0.6
    assert r > 0


def test_rect_draws_handles():
    frame = CropRenderer().render(_session())
    # Inside the nw handle marker, away from its outline
    assert _rgb(frame, 38, 38) == (255, 255, 255)


def test_circle_has_no_handles_and_dims_corners():
    frame = CropRenderer().render(_session(shape="circle"))
    # Crop-rect corner lies outside the inscribed circle
    assert _rgb(frame, 50, 50)[0] < RED[0] * 0.6
    assert _rgb(frame, 38, 38)[0] < RED[0] * 0.6
    assert _rgb(frame, 200, 200) == RED


def test_zoomed_out_image_leaves_empty_surface():
    s = _session()
    s.apply_zoom(1, 0, 0)
    s.apply_zoom(1, 0, 0)
    frame = CropRenderer().render(s)
    # Image now covers only 320x320 from the origin; beyond it only the overlay remains
    assert frame.pixelColor(390, 200).red() == 0


def test_render_reuses_target():
    s = _session()
    renderer = CropRenderer()
    first = renderer.render(s)
    second = renderer.render(s, first)
    assert second is first


def test_render_without_image_fails():
    s = _session()
    s.image = None
    with pytest.raises(RenderUnavailable):
        CropRenderer().render(s)


def test_render_null_target_fails():
    with pytest.raises(RenderUnavailable):
        CropRenderer().render(_session(), QImage())

"""Tests for CropSession state and mutations."""

import math

import pytest

from profile_image_cropper.errors import RenderUnavailable
from profile_image_cropper.models import Handle, OutputSpec
from profile_image_cropper.session import CropSession

from conftest import make_image


@pytest.fixture
def session():
    s = CropSession(make_image(400, 400), OutputSpec(type="avatar", aspect_ratio=1.0))
    s.initialize()
    return s


def test_initialize_scenario(session):
    assert session.crop.as_tuple() == pytest.approx((40, 40, 320, 320))
    assert (session.metrics.display_w, session.metrics.display_h) == (400, 400)
    assert session.view.scale == 1.0


def test_initialize_without_image_fails():
    with pytest.raises(RenderUnavailable):
        CropSession(None, OutputSpec()).initialize()


def test_apply_resize_uses_drag_start(session):
    session.begin_drag(Handle.SE, 360, 360)
    session.apply_resize(Handle.SE, 10, 10)
    session.apply_resize(Handle.SE, 20, 20)
    # Absolute from the drag start, not cumulative
    assert session.crop.as_tuple() == pytest.approx((40, 40, 340, 340))


def test_apply_resize_ignores_non_finite(session):
    before = session.crop.as_tuple()
    session.begin_drag(Handle.SE, 360, 360)
    assert session.apply_resize(Handle.SE, math.nan, 0) is False
    assert session.crop.as_tuple() == before


def test_apply_pan_is_unbounded(session):
    session.apply_pan(-1000, 25)
    session.apply_pan(-5, 5)
    assert (session.view.offset_x, session.view.offset_y) == (-1005, 30)
    assert session.crop.as_tuple() == pytest.approx((40, 40, 320, 320))


def test_zoom_in_scenario(session):
    before = session.image_point_at(200, 200)
    assert session.apply_zoom(-1, 200, 200) is True
    assert session.view.scale == pytest.approx(1.1)
    assert session.image_point_at(200, 200) == pytest.approx(before)


def test_zoom_out_direction(session):
    session.apply_zoom(1, 10, 10)
    assert session.view.scale == pytest.approx(0.9)


def test_zoom_zero_delta_is_noop(session):
    assert session.apply_zoom(0, 100, 100) is False
    assert session.view.scale == 1.0


def test_zoom_is_clamped(session):
    for _ in range(50):
        session.apply_zoom(-120, 50, 50)
    assert session.view.scale == 3.0
    assert session.apply_zoom(-120, 50, 50) is False
    for _ in range(50):
        session.apply_zoom(120, 50, 50)
    assert session.view.scale == 0.5


def test_zoom_preserves_focal_point_after_pan(session):
    session.apply_pan(37, -12)
    for delta, px, py in [(-1, 120, 80), (-1, 300, 310), (1, 10, 390), (-1, 222, 111)]:
        before = session.image_point_at(px, py)
        session.apply_zoom(delta, px, py)
        assert session.image_point_at(px, py) == pytest.approx(before)


def test_nudge_and_reset(session):
    session.nudge(10, -5)
    assert (session.crop.x, session.crop.y) == pytest.approx((50, 35))
    session.apply_zoom(-1, 0, 0)
    session.reset()
    assert session.crop.as_tuple() == pytest.approx((40, 40, 320, 320))
    assert session.view.scale == 1.0


def test_snapshot_is_a_copy(session):
    crop, view = session.snapshot()
    session.apply_pan(5, 5)
    session.nudge(1, 1)
    assert view.offset_x == 0
    assert crop.x == pytest.approx(40)

"""Tests for the InteractionController state machine."""

import pytest
from PyQt6.QtCore import Qt

from profile_image_cropper.controller import ControllerState, InteractionController
from profile_image_cropper.models import Handle, OutputSpec
from profile_image_cropper.session import CropSession

from conftest import make_image


@pytest.fixture
def controller():
    session = CropSession(make_image(400, 400), OutputSpec(type="avatar", aspect_ratio=1.0))
    session.initialize()
    return InteractionController(session)


@pytest.fixture
def changes(controller):
    seen = []
    controller.crop_changed.connect(lambda: seen.append(controller.session.crop.as_tuple()))
    return seen


def test_pointer_down_on_handle_starts_resize(controller):
    controller.pointer_down(360, 360)
    assert controller.state is ControllerState.DRAGGING
    assert controller.session.drag.handle is Handle.SE


def test_pointer_down_outside_starts_pan(controller):
    controller.pointer_down(10, 10)
    assert controller.state is ControllerState.DRAGGING
    assert controller.session.drag.handle is None
    assert controller.cursor == Qt.CursorShape.ClosedHandCursor


def test_resize_drag_scenario(controller, changes):
    controller.pointer_down(360, 360)
    controller.pointer_move(380, 380)
    controller.pointer_move(410, 410)
    controller.pointer_up()
    assert controller.state is ControllerState.IDLE
    assert controller.session.drag is None
    assert controller.session.crop.as_tuple() == pytest.approx((40, 40, 360, 360))
    assert len(changes) == 2


def test_move_drag_translates_crop(controller):
    controller.pointer_down(200, 200)
    controller.pointer_move(205, 203)
    controller.pointer_move(210, 210)
    controller.pointer_up()
    assert controller.session.crop.as_tuple() == pytest.approx((50, 50, 320, 320))


def test_pan_is_incremental(controller):
    controller.pointer_down(10, 10)
    controller.pointer_move(15, 12)
    controller.pointer_move(25, 22)
    controller.pointer_up()
    view = controller.session.view
    assert (view.offset_x, view.offset_y) == (15, 12)
    assert controller.session.crop.as_tuple() == pytest.approx((40, 40, 320, 320))


def test_pointer_leave_ends_drag(controller):
    controller.pointer_down(200, 200)
    controller.pointer_leave()
    assert controller.state is ControllerState.IDLE
    assert controller.pointer_move(250, 250) is False
    assert controller.session.crop.x == pytest.approx(40)


def test_hover_only_updates_cursor(controller, changes):
    cursors = []
    controller.cursor_changed.connect(cursors.append)
    before = controller.session.crop.as_tuple()
    assert controller.pointer_move(40, 200) is False
    assert controller.cursor == Qt.CursorShape.SizeHorCursor
    controller.pointer_move(200, 200)
    assert controller.cursor == Qt.CursorShape.SizeAllCursor
    controller.pointer_move(5, 5)
    assert controller.cursor == Qt.CursorShape.OpenHandCursor
    assert changes == []
    assert controller.session.crop.as_tuple() == before
    assert len(cursors) == 3


def test_wheel_zooms_in_any_state(controller, changes):
    assert controller.wheel(-120, 200, 200) is True
    assert controller.session.view.scale == pytest.approx(1.1)
    controller.pointer_down(200, 200)
    assert controller.wheel(120, 200, 200) is True
    assert controller.session.view.scale == pytest.approx(1.0)
    assert controller.state is ControllerState.DRAGGING
    assert len(changes) == 2


def test_wheel_at_limit_does_not_emit(controller, changes):
    for _ in range(40):
        controller.wheel(120, 0, 0)
    count = len(changes)
    assert controller.wheel(120, 0, 0) is False
    assert len(changes) == count


def test_circle_shape_has_no_resize_handles():
    session = CropSession(make_image(400, 400), OutputSpec(aspect_ratio=1.0, crop_shape="circle"))
    session.initialize()
    controller = InteractionController(session)
    controller.pointer_down(360, 360)
    assert session.drag.handle is Handle.MOVE


def test_key_nudge_and_reset(controller, changes):
    assert controller.key_nudge(0, 10) is True
    assert controller.session.crop.y == pytest.approx(50)
    controller.reset()
    assert controller.session.crop.y == pytest.approx(40)
    assert len(changes) == 2

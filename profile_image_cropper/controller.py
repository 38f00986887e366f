"""
Interaction controller: pointer and wheel events in, session mutations out.

A two-state machine (``IDLE`` / ``DRAGGING``).  Pointer-down hit-tests the
crop and records a drag; every pointer-move while dragging mutates the
session and emits ``crop_changed`` so the renderer can redraw
synchronously.  Resize and move use the displacement since the drag
started; panning uses the displacement since the previous move.

Wheel zoom is orthogonal to the drag state and works in both states.
"""

import logging
from enum import Enum

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from profile_image_cropper.geometry import hit_test_handle
from profile_image_cropper.models import Handle
from profile_image_cropper.session import CropSession

logger = logging.getLogger(__name__)


class ControllerState(Enum):
    IDLE = 0
    DRAGGING = 1


HANDLE_CURSORS = {
    Handle.NW: Qt.CursorShape.SizeFDiagCursor,
    Handle.SE: Qt.CursorShape.SizeFDiagCursor,
    Handle.NE: Qt.CursorShape.SizeBDiagCursor,
    Handle.SW: Qt.CursorShape.SizeBDiagCursor,
    Handle.N: Qt.CursorShape.SizeVerCursor,
    Handle.S: Qt.CursorShape.SizeVerCursor,
    Handle.E: Qt.CursorShape.SizeHorCursor,
    Handle.W: Qt.CursorShape.SizeHorCursor,
    Handle.MOVE: Qt.CursorShape.SizeAllCursor,
}
PAN_CURSOR = Qt.CursorShape.OpenHandCursor
PANNING_CURSOR = Qt.CursorShape.ClosedHandCursor


class InteractionController(QObject):
    """Maps pointer/wheel/key input onto a ``CropSession``."""

    crop_changed = pyqtSignal()
    cursor_changed = pyqtSignal(object)  # Qt.CursorShape

    def __init__(self, session: CropSession, parent=None):
        super().__init__(parent)
        self._session = session
        self._state = ControllerState.IDLE
        self._cursor = PAN_CURSOR

    @property
    def session(self) -> CropSession:
        return self._session

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def cursor(self) -> Qt.CursorShape:
        return self._cursor

    def _set_cursor(self, cursor: Qt.CursorShape):
        if cursor != self._cursor:
            self._cursor = cursor
            self.cursor_changed.emit(cursor)

    def cursor_for(self, handle: Handle | None) -> Qt.CursorShape:
        return HANDLE_CURSORS[handle] if handle is not None else PAN_CURSOR

    # --- Pointer events ---

    def pointer_down(self, x: float, y: float):
        s = self._session
        handle = hit_test_handle(x, y, s.crop, s.shape)
        s.begin_drag(handle, x, y)
        self._state = ControllerState.DRAGGING
        self._set_cursor(self.cursor_for(handle) if handle is not None else PANNING_CURSOR)
        logger.debug("Drag start at (%s, %s) on %s", x, y, handle.value if handle else "pan")

    def pointer_move(self, x: float, y: float) -> bool:
        """Handle a move; returns True if the session was mutated."""
        s = self._session
        drag = s.drag
        if self._state is not ControllerState.DRAGGING or drag is None:
            # Hover: cursor affordance only
            self._set_cursor(self.cursor_for(hit_test_handle(x, y, s.crop, s.shape)))
            return False

        if drag.handle is None:
            s.apply_pan(x - drag.last_x, y - drag.last_y)
        else:
            s.apply_resize(drag.handle, x - drag.start_x, y - drag.start_y)
        drag.last_x, drag.last_y = x, y
        self.crop_changed.emit()
        return True

    def pointer_up(self):
        if self._state is ControllerState.DRAGGING:
            logger.debug("Drag end, crop %s", self._session.crop.as_tuple())
        self._session.end_drag()
        self._state = ControllerState.IDLE
        self._set_cursor(PAN_CURSOR)

    def pointer_leave(self):
        self.pointer_up()

    # --- Wheel / keyboard ---

    def wheel(self, delta_y: float, x: float, y: float) -> bool:
        """Zoom around ``(x, y)``; positive *delta_y* zooms out."""
        changed = self._session.apply_zoom(delta_y, x, y)
        if changed:
            self.crop_changed.emit()
        return changed

    def key_nudge(self, dx: float, dy: float) -> bool:
        if self._state is ControllerState.DRAGGING:
            return False
        moved = self._session.nudge(dx, dy)
        if moved:
            self.crop_changed.emit()
        return moved

    def reset(self):
        self.pointer_up()
        self._session.reset()
        self.crop_changed.emit()

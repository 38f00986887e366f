"""
Interactive crop widget.

``ImageCropWidget`` hosts a ``CropSessionHandle``: it forwards mouse,
wheel and keyboard input to the interaction controller (translated into
surface-local pixels), shows the controller's cursor affordance, and
paints the renderer's latest frame centered in the widget.
"""

from PyQt6.QtCore import QPointF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QKeyEvent, QMouseEvent, QPainter, QPaintEvent, QWheelEvent
from PyQt6.QtWidgets import QSizePolicy, QWidget

from profile_image_cropper.api import CropSessionHandle
from profile_image_cropper.config import BACKGROUND_RGBA, NUDGE_LARGE, NUDGE_SMALL


class ImageCropWidget(QWidget):
    """Widget that displays an image with an interactive crop overlay."""

    crop_changed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(200, 200)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMouseTracking(True)

        self._handle: CropSessionHandle | None = None

    def set_session(self, handle: CropSessionHandle | None):
        """Attach a crop session (or detach with None)."""
        if self._handle is not None:
            self._handle.controller.crop_changed.disconnect(self._on_crop_changed)
            self._handle.controller.cursor_changed.disconnect(self._on_cursor_changed)
        self._handle = handle
        if handle is not None:
            handle.controller.crop_changed.connect(self._on_crop_changed)
            handle.controller.cursor_changed.connect(self._on_cursor_changed)
            w, h = handle.session.metrics.surface_size
            self.setMinimumSize(w, h)
            self._on_cursor_changed(handle.controller.cursor)
        self.update()

    def session_handle(self) -> CropSessionHandle | None:
        return self._handle

    def has_image(self) -> bool:
        return self._handle is not None and self._handle.session.has_image()

    # --- Coordinate mapping ---

    def _frame_origin(self) -> QPointF:
        if self._handle is None:
            return QPointF(0, 0)
        w, h = self._handle.session.metrics.surface_size
        return QPointF((self.width() - w) / 2, (self.height() - h) / 2)

    def _to_surface(self, pos: QPointF) -> tuple[float, float]:
        origin = self._frame_origin()
        return pos.x() - origin.x(), pos.y() - origin.y()

    # --- Signals from the controller ---

    def _on_crop_changed(self):
        self.crop_changed.emit()
        self.update()

    def _on_cursor_changed(self, cursor):
        self.setCursor(cursor)

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(*BACKGROUND_RGBA))
        if self._handle is None or self._handle.frame is None:
            painter.setPen(QColor(128, 128, 128))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "No image loaded")
        else:
            painter.drawImage(self._frame_origin(), self._handle.frame)
        painter.end()

    # --- Mouse interaction ---

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or not self.has_image() or self._handle.closed:
            return
        self._handle.pointer_down(*self._to_surface(event.position()))

    def mouseMoveEvent(self, event: QMouseEvent):
        if not self.has_image() or self._handle.closed:
            return
        self._handle.pointer_move(*self._to_surface(event.position()))

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton and self.has_image() and not self._handle.closed:
            self._handle.pointer_up()

    def leaveEvent(self, event):
        if self.has_image() and not self._handle.closed:
            self._handle.pointer_leave()
        super().leaveEvent(event)

    def wheelEvent(self, event: QWheelEvent):
        if not self.has_image() or self._handle.closed:
            return
        # Qt reports scrolling up as positive; the controller zooms out on positive deltas
        delta = -event.angleDelta().y()
        if delta:
            self._handle.wheel(delta, *self._to_surface(event.position()))
        event.accept()

    # --- Keyboard nudge ---

    def keyPressEvent(self, event: QKeyEvent):
        if not self.has_image() or self._handle.closed:
            super().keyPressEvent(event)
            return
        amount = NUDGE_LARGE if event.modifiers() & Qt.KeyboardModifier.ShiftModifier else NUDGE_SMALL
        controller = self._handle.controller
        key = event.key()
        if key == Qt.Key.Key_Left:
            controller.key_nudge(-amount, 0)
        elif key == Qt.Key.Key_Right:
            controller.key_nudge(amount, 0)
        elif key == Qt.Key.Key_Up:
            controller.key_nudge(0, -amount)
        elif key == Qt.Key.Key_Down:
            controller.key_nudge(0, amount)
        elif key == Qt.Key.Key_R:
            controller.reset()
        else:
            super().keyPressEvent(event)

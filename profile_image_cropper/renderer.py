"""
Render pipeline: draws a crop session into a ``QImage`` frame.

Every call redraws from scratch.  Crop surfaces are small (at most
400x400 by default), so there is no dirty-region tracking.  The only cached
state is a display-resolution preview of the source image, so a
multi-megapixel photo is not rescaled on every pointer move.
"""

import logging

from PIL import Image
from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QImage, QPainter, QPainterPath, QPen

from profile_image_cropper.config import (
    BORDER_RGBA,
    BORDER_WIDTH,
    HANDLE_FILL_RGBA,
    HANDLE_OUTLINE_RGBA,
    HANDLE_SIZE,
    OVERLAY_RGBA,
    ZOOM_MAX,
)
from profile_image_cropper.errors import RenderUnavailable
from profile_image_cropper.geometry import handle_rects
from profile_image_cropper.image_io import pil_to_qimage
from profile_image_cropper.models import Shape
from profile_image_cropper.session import CropSession

logger = logging.getLogger(__name__)


class CropRenderer:
    """Draws the image, the dimmed overlay with the crop cut-out, and the handles."""

    def __init__(self, handle_size: float = HANDLE_SIZE):
        self._handle_size = handle_size
        self._preview: QImage | None = None
        self._preview_key: tuple | None = None

    def _preview_for(self, session: CropSession) -> QImage:
        """Source image pre-scaled to the largest size it can be drawn at."""
        m = session.metrics
        max_w = max(1, int(m.display_w * ZOOM_MAX + 0.5))
        max_h = max(1, int(m.display_h * ZOOM_MAX + 0.5))
        key = (id(session.image), max_w, max_h)
        if self._preview is None or self._preview_key != key:
            preview = session.image.copy()
            preview.thumbnail((max_w, max_h), Image.Resampling.LANCZOS)
            self._preview = pil_to_qimage(preview)
            self._preview_key = key
            logger.debug("Built %dx%d render preview", preview.width, preview.height)
        return self._preview

    def new_surface(self, session: CropSession) -> QImage:
        width, height = session.metrics.surface_size
        return QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)

    def render(self, session: CropSession, target: QImage | None = None) -> QImage:
        """Redraw *session* into *target* (a new surface when omitted) and return it."""
        if not session.has_image():
            raise RenderUnavailable("source image is not decoded")
        if target is None:
            target = self.new_surface(session)
        if target.isNull():
            raise RenderUnavailable("could not acquire a drawing surface")

        source = self._preview_for(session)
        view = session.view
        m = session.metrics
        crop = session.crop
        circle = session.shape is Shape.CIRCLE

        target.fill(Qt.GlobalColor.transparent)
        painter = QPainter(target)
        try:
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)

            # Image under the current pan/zoom
            dest = QRectF(view.offset_x, view.offset_y, m.display_w * view.scale, m.display_h * view.scale)
            painter.drawImage(dest, source)

            # Dim everything except the crop shape
            crop_rect = QRectF(crop.x, crop.y, crop.width, crop.height)
            cx, cy = crop.center
            radius = min(crop.width, crop.height) / 2
            overlay = QPainterPath()
            overlay.setFillRule(Qt.FillRule.OddEvenFill)
            overlay.addRect(QRectF(target.rect()))
            if circle:
                overlay.addEllipse(QPointF(cx, cy), radius, radius)
            else:
                overlay.addRect(crop_rect)
            painter.fillPath(overlay, QColor(*OVERLAY_RGBA))

            # Crop border
            painter.setPen(QPen(QColor(*BORDER_RGBA), BORDER_WIDTH))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            if circle:
                painter.drawEllipse(QPointF(cx, cy), radius, radius)
            else:
                painter.drawRect(crop_rect)

                # Resize handles (rectangle crops only)
                painter.setRenderHint(QPainter.RenderHint.Antialiasing, False)
                painter.setPen(QPen(QColor(*HANDLE_OUTLINE_RGBA), 1))
                painter.setBrush(QBrush(QColor(*HANDLE_FILL_RGBA)))
                for hx, hy, hw, hh in handle_rects(crop, self._handle_size).values():
                    painter.drawRect(QRectF(hx, hy, hw, hh))
        finally:
            painter.end()
        return target

"""
Crop session state.

``CropSession`` owns everything one crop interaction needs: the decoded
source image, the display metrics it is rendered at, the live crop area,
the pan/zoom view transform, and the host's output spec.  It exposes the
mutations the interaction controller drives.  It never draws and never
raises mid-drag: geometry that comes out non-finite is dropped and the
last valid rectangle is kept.
"""

import logging

from PIL import Image

from profile_image_cropper.config import (
    DISPLAY_MAX_H,
    DISPLAY_MAX_W,
    ZOOM_MAX,
    ZOOM_MIN,
    ZOOM_PRECISION,
    ZOOM_STEP,
)
from profile_image_cropper.errors import InvalidGeometry, RenderUnavailable
from profile_image_cropper.geometry import (
    clamp,
    fit_display,
    initial_crop_area,
    resize_crop_area,
)
from profile_image_cropper.models import (
    CropArea,
    DisplayMetrics,
    DragSession,
    Handle,
    OutputSpec,
    Shape,
    ViewTransform,
)

logger = logging.getLogger(__name__)


class CropSession:
    """Mutable crop state for one image."""

    def __init__(self, image: Image.Image | None, output_spec: OutputSpec,
                 source_format: str | None = None,
                 max_display: tuple[float, float] = (DISPLAY_MAX_W, DISPLAY_MAX_H)):
        self.image = image
        self.source_format = source_format or (image.format if image is not None else None)
        self.output_spec = output_spec
        self.max_display = max_display

        self.metrics = DisplayMetrics()
        self.crop = CropArea()
        self.view = ViewTransform()
        self.drag: DragSession | None = None
        self._initial_crop = CropArea()

    # --- Read-only helpers ---

    @property
    def shape(self) -> Shape:
        return self.output_spec.crop_shape

    @property
    def aspect_ratio(self) -> float | None:
        return self.output_spec.aspect_ratio

    @property
    def img_w(self) -> int:
        return self.image.width if self.image is not None else 0

    @property
    def img_h(self) -> int:
        return self.image.height if self.image is not None else 0

    def has_image(self) -> bool:
        return self.image is not None

    def image_point_at(self, px: float, py: float) -> tuple[float, float]:
        """Display-space image point currently under surface point ``(px, py)``."""
        return self.view.to_image(px, py)

    def snapshot(self) -> tuple[CropArea, ViewTransform]:
        """Copies of the crop and view, safe to hand to the extractor."""
        return self.crop.copy(), self.view.copy()

    # --- Lifecycle ---

    def initialize(self) -> CropArea:
        """Fit the image for display and place the centered starting crop."""
        if self.image is None:
            raise RenderUnavailable("source image is not decoded")
        try:
            self.metrics = fit_display(self.image.width, self.image.height, *self.max_display)
            self._initial_crop = initial_crop_area(
                self.metrics, self.aspect_ratio, self.output_spec.fill_width,
            )
        except InvalidGeometry as exc:
            raise RenderUnavailable(str(exc)) from exc
        self.crop = self._initial_crop.copy()
        self.view = ViewTransform()
        self.drag = None
        logger.debug(
            "Session initialized: native %sx%s, display %.1fx%.1f, crop %s",
            self.img_w, self.img_h, self.metrics.display_w, self.metrics.display_h,
            self.crop.as_tuple(),
        )
        return self.crop.copy()

    def reset(self) -> None:
        """Restore the starting crop and an identity view."""
        self.crop = self._initial_crop.copy()
        self.view = ViewTransform()
        self.drag = None

    # --- Drag bookkeeping ---

    def begin_drag(self, handle: Handle | None, x: float, y: float) -> DragSession:
        self.drag = DragSession(handle, x, y, self.crop.copy())
        return self.drag

    def end_drag(self) -> None:
        self.drag = None

    # --- Mutations ---

    def apply_resize(self, handle: Handle, dx: float, dy: float) -> bool:
        """Resize (or move) from the drag's original crop by the total displacement.

        Returns False when the computation was rejected and the crop kept.
        """
        base = self.drag.start_crop if self.drag is not None else self.crop
        try:
            self.crop = resize_crop_area(
                base, handle, dx, dy,
                self.metrics.display_w, self.metrics.display_h,
                self.aspect_ratio,
            )
        except InvalidGeometry as exc:
            logger.debug("Ignoring resize %s by (%s, %s): %s", handle, dx, dy, exc)
            return False
        return True

    def apply_pan(self, dx: float, dy: float) -> None:
        """Shift the image under the crop window; panning is unbounded."""
        self.view.offset_x += dx
        self.view.offset_y += dy

    def apply_zoom(self, delta: float, px: float, py: float) -> bool:
        """Step the zoom around ``(px, py)`` so the image point under it stays put.

        Positive *delta* (scrolling down) zooms out.  Returns True if the
        scale changed.
        """
        if not delta:
            return False
        step = -ZOOM_STEP if delta > 0 else ZOOM_STEP
        old_scale = self.view.scale
        new_scale = round(clamp(old_scale + step, ZOOM_MIN, ZOOM_MAX), ZOOM_PRECISION)
        if new_scale == old_scale:
            return False

        ratio = new_scale / old_scale
        self.view.offset_x = px - (px - self.view.offset_x) * ratio
        self.view.offset_y = py - (py - self.view.offset_y) * ratio
        self.view.scale = new_scale
        logger.debug("Zoom %.2f -> %.2f around (%s, %s)", old_scale, new_scale, px, py)
        return True

    def nudge(self, dx: float, dy: float) -> bool:
        """Translate the live crop by a small keyboard step."""
        self.drag = None
        return self.apply_resize(Handle.MOVE, dx, dy)

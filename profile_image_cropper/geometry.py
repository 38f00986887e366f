"""
Pure crop-geometry utilities.

Everything here works in display space and never touches Qt or Pillow, so
the interaction rules can be exercised without a drawing surface.

Resizing is always computed from the rectangle captured when the drag
started plus the *total* pointer displacement, never incrementally, so a
long drag made of many small moves cannot accumulate rounding drift.
"""

import math

from profile_image_cropper.config import (
    DISPLAY_MAX_H,
    DISPLAY_MAX_W,
    HANDLE_SIZE,
    HANDLE_TOLERANCE,
    INITIAL_CROP_FRACTION,
    MIN_CROP_SIZE,
)
from profile_image_cropper.errors import InvalidGeometry
from profile_image_cropper.models import CropArea, DisplayMetrics, Handle, Shape


# =============================================================================
# Basic helpers
# =============================================================================
def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* into ``[lo, hi]``.  When ``lo > hi`` the lower bound wins."""
    return max(lo, min(value, hi))


def _require_finite(*values: float) -> None:
    for v in values:
        if not math.isfinite(v):
            raise InvalidGeometry(f"non-finite coordinate: {v!r}")


def min_crop_size(aspect_ratio: float | None = None) -> tuple[float, float]:
    """Smallest (width, height) allowed, honouring a locked ratio on both sides."""
    if not aspect_ratio:
        return float(MIN_CROP_SIZE), float(MIN_CROP_SIZE)
    if aspect_ratio >= 1:
        return MIN_CROP_SIZE * aspect_ratio, float(MIN_CROP_SIZE)
    return float(MIN_CROP_SIZE), MIN_CROP_SIZE / aspect_ratio


def _fit_ratio(
    width: float, height: float,
    min_w: float, min_h: float,
    max_w: float, max_h: float,
) -> tuple[float, float]:
    """Uniformly grow to the minimum, then shrink into the maximum (bounds win)."""
    if width <= 0 or height <= 0:
        raise InvalidGeometry(f"inverted rectangle: {width!r} x {height!r}")
    if width < min_w or height < min_h:
        k = max(min_w / width, min_h / height)
        width *= k
        height *= k
    if width > max_w or height > max_h:
        k = min(max_w / width, max_h / height)
        width *= k
        height *= k
    return width, height


# =============================================================================
# Layout
# =============================================================================
def fit_display(img_w: int, img_h: int,
                max_w: float = DISPLAY_MAX_W, max_h: float = DISPLAY_MAX_H) -> DisplayMetrics:
    """Fit the native image into the display box without exceeding native size."""
    if img_w <= 0 or img_h <= 0:
        raise InvalidGeometry(f"empty image: {img_w} x {img_h}")
    display_w, display_h = float(img_w), float(img_h)
    if display_w > max_w or display_h > max_h:
        scale = min(max_w / display_w, max_h / display_h)
        display_w *= scale
        display_h *= scale
    return DisplayMetrics(display_w, display_h)


def initial_crop_area(metrics: DisplayMetrics, aspect_ratio: float | None = None,
                      fill_width: bool = False) -> CropArea:
    """Centered starting crop.

    By default the crop is 80% of the shorter display side, narrowed or
    flattened to *aspect_ratio*.  With *fill_width* (banners) it starts at
    the full display width and is refitted if the height overflows.
    """
    dw, dh = metrics.display_w, metrics.display_h
    r = aspect_ratio
    if fill_width and r:
        width, height = dw, dw / r
        if height > dh:
            height = dh
            width = dh * r
    else:
        size = min(dw, dh) * INITIAL_CROP_FRACTION
        if not r or r >= 1:
            width, height = size, size / (r or 1)
        else:
            width, height = size * r, size

    min_w, min_h = min_crop_size(r)
    width, height = _fit_ratio(width, height, min_w, min_h, dw, dh)
    return CropArea((dw - width) / 2, (dh - height) / 2, width, height)


# =============================================================================
# Handle hit testing
# =============================================================================
def handle_rects(crop: CropArea, size: float = HANDLE_SIZE) -> dict[Handle, tuple[float, float, float, float]]:
    """Return ``(x, y, w, h)`` marker squares at the corners and edge midpoints."""
    half = size / 2
    left, top = crop.x - half, crop.y - half
    mid_x = crop.x + crop.width / 2 - half
    mid_y = crop.y + crop.height / 2 - half
    right = crop.right - half
    bottom = crop.bottom - half
    return {
        Handle.NW: (left, top, size, size),
        Handle.N: (mid_x, top, size, size),
        Handle.NE: (right, top, size, size),
        Handle.E: (right, mid_y, size, size),
        Handle.SE: (right, bottom, size, size),
        Handle.S: (mid_x, bottom, size, size),
        Handle.SW: (left, bottom, size, size),
        Handle.W: (left, mid_y, size, size),
    }


def hit_test_handle(px: float, py: float, crop: CropArea, shape: Shape = Shape.RECT,
                    tolerance: float = HANDLE_TOLERANCE, handle_size: float = HANDLE_SIZE) -> Handle | None:
    """Return the handle under the pointer, ``Handle.MOVE`` inside the crop, or None (pan).

    Resize markers are tested before the interior so overlapping zones
    favour resizing.  Circle crops offer no resize markers.
    """
    if Shape(shape) is Shape.RECT:
        for handle, (hx, hy, hw, hh) in handle_rects(crop, handle_size).items():
            if (hx - tolerance <= px <= hx + hw + tolerance
                    and hy - tolerance <= py <= hy + hh + tolerance):
                return handle
    if crop.contains(px, py):
        return Handle.MOVE
    return None


# =============================================================================
# Resize / move
# =============================================================================
def clamp_crop_area(crop: CropArea, bounds_w: float, bounds_h: float,
                    aspect_ratio: float | None = None) -> CropArea:
    """Translate the crop inside the bounds, then cap its size at the remaining room."""
    _require_finite(*crop.as_tuple())
    x = clamp(crop.x, 0.0, bounds_w - crop.width)
    y = clamp(crop.y, 0.0, bounds_h - crop.height)
    width = min(crop.width, bounds_w - x)
    height = min(crop.height, bounds_h - y)
    if aspect_ratio and (width < crop.width or height < crop.height):
        width, height = _fit_ratio(crop.width, crop.height, 0.0, 0.0, width, height)
    return CropArea(x, y, width, height)


def resize_crop_area(original: CropArea, handle: Handle, dx: float, dy: float,
                     bounds_w: float, bounds_h: float,
                     aspect_ratio: float | None = None) -> CropArea:
    """New crop from the drag's original rectangle and total displacement ``(dx, dy)``.

    Raises ``InvalidGeometry`` on non-finite input; callers clamp silently.
    """
    _require_finite(*original.as_tuple(), dx, dy)
    handle = Handle(handle)

    if handle is Handle.MOVE:
        x = clamp(original.x + dx, 0.0, bounds_w - original.width)
        y = clamp(original.y + dy, 0.0, bounds_h - original.height)
        return CropArea(x, y, original.width, original.height)

    left, top = original.x, original.y
    right, bottom = original.right, original.bottom

    # Raw edge adjustment: the opposite edge stays put
    if handle.moves_left:
        left = clamp(original.x + dx, 0.0, right - MIN_CROP_SIZE)
    elif handle.moves_right:
        right = clamp(original.right + dx, left + MIN_CROP_SIZE, bounds_w)
    if handle.moves_top:
        top = clamp(original.y + dy, 0.0, bottom - MIN_CROP_SIZE)
    elif handle.moves_bottom:
        bottom = clamp(original.bottom + dy, top + MIN_CROP_SIZE, bounds_h)

    if aspect_ratio:
        r = aspect_ratio
        min_w, min_h = min_crop_size(r)
        width, height = right - left, bottom - top

        if handle.is_corner:
            # The dimension that moved more drives the other one
            if abs(width - original.width) > abs(height - original.height):
                height = width / r
            else:
                width = height * r
            max_w = bounds_w - left if handle.moves_right else right
            max_h = bounds_h - top if handle.moves_bottom else bottom
            width, height = _fit_ratio(width, height, min_w, min_h, max_w, max_h)
            # Anchor is the diagonally opposite corner
            if handle.moves_left:
                left = right - width
            else:
                right = left + width
            if handle.moves_top:
                top = bottom - height
            else:
                bottom = top + height

        elif handle in (Handle.N, Handle.S):
            max_h = bottom if handle is Handle.N else bounds_h - top
            width, height = _fit_ratio(height * r, height, min_w, min_h, bounds_w, max_h)
            center_x = original.x + original.width / 2
            left = center_x - width / 2
            right = left + width
            if handle is Handle.N:
                top = bottom - height
            else:
                bottom = top + height

        else:  # E / W
            max_w = right if handle is Handle.W else bounds_w - left
            width, height = _fit_ratio(width, width / r, min_w, min_h, max_w, bounds_h)
            center_y = original.y + original.height / 2
            top = center_y - height / 2
            bottom = top + height
            if handle is Handle.W:
                left = right - width
            else:
                right = left + width

    return clamp_crop_area(CropArea(left, top, right - left, bottom - top),
                           bounds_w, bounds_h, aspect_ratio)

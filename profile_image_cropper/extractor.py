"""
Output extractor (Qt-free).

Maps the final display-space crop back into the source image's native
pixel space, picks an output resolution inside the configured min/max
bounds, rasterizes the region (optionally clipped to an inscribed
circle), and encodes it.  This module never imports PyQt6, so it can
run on any worker thread or process.
"""

import logging
import math
from dataclasses import dataclass

from PIL import Image, ImageDraw

from profile_image_cropper.config import OUTPUT_FORMAT_DEFAULT, PASSTHROUGH_FORMATS
from profile_image_cropper.errors import RenderUnavailable
from profile_image_cropper.geometry import clamp
from profile_image_cropper.image_io import encode_image
from profile_image_cropper.models import CropArea, CropResult, DisplayMetrics, OutputSpec, Shape, ViewTransform

logger = logging.getLogger(__name__)

# Supersampling factor for the circle mask edge
_MASK_SUPERSAMPLE = 4


@dataclass
class NativeRegion:
    """Crop region in the source image's own pixel coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def box(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.x + self.width, self.y + self.height


def map_to_native(crop: CropArea, view: ViewTransform, metrics: DisplayMetrics,
                  img_w: int, img_h: int) -> NativeRegion:
    """Undo pan/zoom and the display fit, then clamp fully inside the source image."""
    base_x = img_w / metrics.display_w
    base_y = img_h / metrics.display_h

    x = (crop.x - view.offset_x) / view.scale * base_x
    y = (crop.y - view.offset_y) / view.scale * base_y
    width = crop.width / view.scale * base_x
    height = crop.height / view.scale * base_y

    # Translate inside first, then trim whatever still hangs over
    x = clamp(x, 0.0, img_w - width)
    y = clamp(y, 0.0, img_h - height)
    width = min(width, img_w - x)
    height = min(height, img_h - y)
    return NativeRegion(x, y, width, height)


def resolve_output_size(region_w: float, region_h: float,
                        min_size: int, max_size: int) -> tuple[int, int]:
    """Scale uniformly so the longest side lands within ``[min_size, max_size]``."""
    out_w, out_h = float(region_w), float(region_h)
    longest = max(out_w, out_h)
    if longest <= 0 or not math.isfinite(longest):
        raise RenderUnavailable(f"empty crop region: {region_w} x {region_h}")
    if longest < min_size:
        k = min_size / longest
        out_w *= k
        out_h *= k
    if out_w > max_size or out_h > max_size:
        k = min(max_size / out_w, max_size / out_h)
        out_w *= k
        out_h *= k
    return max(1, round(out_w)), max(1, round(out_h))


def circle_mask(width: int, height: int) -> Image.Image:
    """Anti-aliased ``L`` mask of the circle inscribed in a ``width x height`` box."""
    ss = _MASK_SUPERSAMPLE
    big = Image.new("L", (width * ss, height * ss), 0)
    radius = min(width, height) * ss / 2
    cx, cy = width * ss / 2, height * ss / 2
    ImageDraw.Draw(big).ellipse((cx - radius, cy - radius, cx + radius, cy + radius), fill=255)
    return big.resize((width, height), Image.Resampling.LANCZOS)


def rasterize(image: Image.Image, region: NativeRegion, out_w: int, out_h: int,
              circle: bool = False) -> Image.Image:
    """Resample *region* of *image* into an ``out_w x out_h`` image."""
    if image is None:
        raise RenderUnavailable("source image is not decoded")
    mode = "RGBA" if circle or image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info else "RGB"
    x0, y0, x1, y1 = region.box
    box = (max(0.0, x0), max(0.0, y0), min(float(image.width), x1), min(float(image.height), y1))
    try:
        out = image.convert(mode).resize((out_w, out_h), Image.Resampling.LANCZOS, box=box)
        if circle:
            alpha = out.getchannel("A")
            mask = circle_mask(out_w, out_h)
            out.putalpha(Image.composite(alpha, Image.new("L", alpha.size, 0), mask))
    except (MemoryError, ValueError, OSError) as exc:
        raise RenderUnavailable(f"could not rasterize {out_w}x{out_h} output: {exc}") from exc
    return out


def output_format_for(source_format: str | None, shape: Shape) -> str:
    """Keep the source format where possible; circles always need alpha (PNG)."""
    if Shape(shape) is Shape.CIRCLE:
        return "PNG"
    fmt = (source_format or "").upper()
    return fmt if fmt in PASSTHROUGH_FORMATS else OUTPUT_FORMAT_DEFAULT


def plan_output(crop: CropArea, view: ViewTransform, metrics: DisplayMetrics,
                img_w: int, img_h: int, spec: OutputSpec) -> tuple[NativeRegion, int, int]:
    """Native region plus resolved output size, without touching pixels."""
    region = map_to_native(crop, view, metrics, img_w, img_h)
    out_w, out_h = resolve_output_size(region.width, region.height,
                                       spec.min_output_size, spec.max_output_size)
    return region, out_w, out_h


def extract(image: Image.Image, source_format: str | None, crop: CropArea, view: ViewTransform,
            metrics: DisplayMetrics, spec: OutputSpec) -> CropResult:
    """Run the whole pipeline and return the encoded crop."""
    if image is None:
        raise RenderUnavailable("source image is not decoded")

    region, out_w, out_h = plan_output(crop, view, metrics, image.width, image.height, spec)
    fmt = output_format_for(source_format, spec.crop_shape)

    ratio = out_w / out_h
    logger.debug(
        "Crop output: type=%s region=%.1fx%.1f@(%.1f, %.1f) output=%dx%d %s ratio=%.2f match=%s",
        spec.type.value, region.width, region.height, region.x, region.y,
        out_w, out_h, fmt, ratio,
        spec.aspect_ratio is None or abs(spec.aspect_ratio - ratio) < 0.01,
    )

    raster = rasterize(image, region, out_w, out_h, circle=spec.is_circle)
    buffer = encode_image(raster, fmt)
    return CropResult(
        buffer=buffer,
        width=out_w,
        height=out_h,
        format=fmt,
        region=(region.x, region.y, region.width, region.height),
    )

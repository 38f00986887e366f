"""
Data models shared by the session, the controller, the renderer and the
extractor.

All crop coordinates are floats in *display space*: pixels of the rendered
crop surface.  Pan and zoom (``ViewTransform``) only change how the image is
drawn underneath the crop window; they never move the crop rectangle's own
coordinate frame.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from profile_image_cropper.config import (
    OUTPUT_MAX_SIZE,
    OUTPUT_MIN_SIZES,
    OUTPUT_PRESETS,
)


# =============================================================================
# Enums
# =============================================================================
class Shape(str, Enum):
    RECT = "rect"
    CIRCLE = "circle"


class OutputType(str, Enum):
    AVATAR = "avatar"
    BANNER = "banner"


class Handle(str, Enum):
    """Which edge, corner, or whole area a drag targets."""
    NW = "nw"
    N = "n"
    NE = "ne"
    E = "e"
    SE = "se"
    S = "s"
    SW = "sw"
    W = "w"
    MOVE = "move"

    @property
    def is_corner(self) -> bool:
        return self in (Handle.NW, Handle.NE, Handle.SE, Handle.SW)

    @property
    def moves_left(self) -> bool:
        return self in (Handle.NW, Handle.W, Handle.SW)

    @property
    def moves_right(self) -> bool:
        return self in (Handle.NE, Handle.E, Handle.SE)

    @property
    def moves_top(self) -> bool:
        return self in (Handle.NW, Handle.N, Handle.NE)

    @property
    def moves_bottom(self) -> bool:
        return self in (Handle.SW, Handle.S, Handle.SE)


# =============================================================================
# Data classes
# =============================================================================
@dataclass
class CropArea:
    """Crop rectangle in display coordinates."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def copy(self) -> "CropArea":
        return CropArea(self.x, self.y, self.width, self.height)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height


@dataclass
class DisplayMetrics:
    """Size the image is rendered at inside the crop surface."""
    display_w: float = 0.0
    display_h: float = 0.0

    @property
    def surface_size(self) -> tuple[int, int]:
        """Integer canvas size (fractional display sizes are truncated)."""
        return max(1, int(self.display_w)), max(1, int(self.display_h))


@dataclass
class ViewTransform:
    """Pan offset and zoom scale applied only to the image draw call."""
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_image(self, px: float, py: float) -> tuple[float, float]:
        """Map a surface point to the (unzoomed, unpanned) display-space image point under it."""
        return (px - self.offset_x) / self.scale, (py - self.offset_y) / self.scale

    def copy(self) -> "ViewTransform":
        return ViewTransform(self.scale, self.offset_x, self.offset_y)


@dataclass
class DragSession:
    """Ephemeral state captured at pointer-down.  ``handle is None`` means a pan."""
    handle: Handle | None
    start_x: float
    start_y: float
    start_crop: CropArea
    last_x: float = 0.0
    last_y: float = 0.0

    def __post_init__(self):
        self.last_x = self.start_x
        self.last_y = self.start_y


@dataclass
class OutputSpec:
    """Host-supplied output configuration for one crop session."""
    type: OutputType = OutputType.AVATAR
    aspect_ratio: float | None = 1.0
    crop_shape: Shape = Shape.RECT
    fill_width: bool = False  # start the crop at full display width instead of 80%

    def __post_init__(self):
        self.type = OutputType(self.type)
        self.crop_shape = Shape(self.crop_shape)
        if self.aspect_ratio is not None:
            self.aspect_ratio = float(self.aspect_ratio)
            if self.aspect_ratio <= 0:
                self.aspect_ratio = None  # free-form crop

    @property
    def is_circle(self) -> bool:
        return self.crop_shape is Shape.CIRCLE

    @property
    def min_output_size(self) -> int:
        return OUTPUT_MIN_SIZES[self.type.value]

    @property
    def max_output_size(self) -> int:
        return OUTPUT_MAX_SIZE

    @classmethod
    def for_type(cls, output_type: str) -> "OutputSpec":
        """Preset used by the profile uploader for *output_type*."""
        preset = OUTPUT_PRESETS[OutputType(output_type).value]
        return cls(
            type=output_type,
            aspect_ratio=preset["aspect_ratio"],
            crop_shape=preset["crop_shape"],
            fill_width=preset["fill_width"],
        )

    @classmethod
    def from_dict(cls, data: Mapping) -> "OutputSpec":
        """Build from a plain mapping with ``type``, ``aspectRatio`` and ``cropShape`` keys.

        Snake-case keys are accepted too.  Missing keys fall back to the
        uploader's defaults: avatar, ratio 1, rectangle.
        """
        return cls(
            type=data.get("type", OutputType.AVATAR.value),
            aspect_ratio=data.get("aspectRatio", data.get("aspect_ratio", 1.0)),
            crop_shape=data.get("cropShape", data.get("crop_shape", Shape.RECT.value)),
            fill_width=bool(data.get("fillWidth", data.get("fill_width", False))),
        )


@dataclass
class CropResult:
    """Encoded output handed back to the host."""
    buffer: bytes = b""
    width: int = 0
    height: int = 0
    format: str = "PNG"
    region: tuple = field(default_factory=tuple)  # (x, y, w, h) in native pixels

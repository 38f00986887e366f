"""
Application constants and configuration.

All tunables for the crop surface, the interaction handles, the zoom
range, and the output extractor live here.  Nothing is read from the
environment or persisted; hosts wanting different behaviour pass their
own values into the functions that accept them.

``OUTPUT_PRESETS`` mirrors what the profile uploader uses: square circular
avatars and 16:9 rectangular banners.
"""

# =============================================================================
# APP IDENTITY
# =============================================================================
APP_NAME = "profile-image-cropper"

# =============================================================================
# CROP SURFACE
# =============================================================================
# Bounding box the image is fitted into for display (never upscaled)
DISPLAY_MAX_W = 400
DISPLAY_MAX_H = 400

# Initial crop side as a fraction of the shorter display side
INITIAL_CROP_FRACTION = 0.8

# Minimum crop size (pixels, display space)
MIN_CROP_SIZE = 50

# Handle marker side and extra hit-test slack (pixels, display space)
HANDLE_SIZE = 8
HANDLE_TOLERANCE = 4

# Nudge amounts (pixels in display space)
NUDGE_SMALL = 1
NUDGE_LARGE = 10

# =============================================================================
# ZOOM
# =============================================================================
ZOOM_STEP = 0.1
ZOOM_MIN = 0.5
ZOOM_MAX = 3.0

# Scales are rounded to this many decimals so repeated steps land exactly on the limits
ZOOM_PRECISION = 4

# =============================================================================
# OUTPUT
# =============================================================================
# Longest output side is scaled up to at least this (per output type)
OUTPUT_MIN_SIZES = {
    "avatar": 400,
    "banner": 600,
}

# Longest output side is scaled down to at most this
OUTPUT_MAX_SIZE = 1200

OUTPUT_PRESETS = {
    "avatar": {"aspect_ratio": 1.0, "crop_shape": "circle", "fill_width": False},
    "banner": {"aspect_ratio": 16 / 9, "crop_shape": "rect", "fill_width": True},
}

# Encoded output formats kept as-is; anything else is re-encoded as PNG
PASSTHROUGH_FORMATS = {"JPEG", "PNG", "WEBP"}
OUTPUT_FORMAT_DEFAULT = "PNG"

# JPEG export settings (subsampling 0 = 4:4:4)
JPEG_QUALITY = 95
JPEG_SUBSAMPLING = 0
JPEG_OPTIMIZE = True

# PNG compression level (0-9, 9 = maximum compression)
PNG_COMPRESS_LEVEL = 6

WEBP_QUALITY = 95

# =============================================================================
# RENDERING (RGBA)
# =============================================================================
OVERLAY_RGBA = (0, 0, 0, 128)
BORDER_RGBA = (255, 255, 255, 255)
BORDER_WIDTH = 2
HANDLE_FILL_RGBA = (255, 255, 255, 255)
HANDLE_OUTLINE_RGBA = (0, 0, 0, 255)
BACKGROUND_RGBA = (30, 30, 30, 255)

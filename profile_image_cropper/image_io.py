"""
Image buffer I/O.

Decodes host-supplied byte buffers (PSD through psd-tools, everything
else through Pillow), encodes finished crops, converts Pillow images
for Qt painting, and generates unique file paths for the desktop app.

Only ``pil_to_qimage`` touches Qt; it imports PyQt6 lazily so the
extractor can import this module from Qt-free worker code.
"""

import io
import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError
from psd_tools import PSDImage

from profile_image_cropper.config import (
    JPEG_OPTIMIZE,
    JPEG_QUALITY,
    JPEG_SUBSAMPLING,
    PNG_COMPRESS_LEVEL,
    WEBP_QUALITY,
)
from profile_image_cropper.errors import EncodeFailed, RenderUnavailable

logger = logging.getLogger(__name__)

# Allow very large images (Pillow's default limit is ~178MP)
Image.MAX_IMAGE_PIXELS = None

_PSD_SIGNATURE = b"8BPS"


def is_psd(buffer: bytes) -> bool:
    return buffer[:4] == _PSD_SIGNATURE


def decode_image(buffer: bytes) -> tuple[Image.Image, str]:
    """Decode an image buffer fully into memory.

    Returns ``(image, format)`` where *format* is the Pillow format name
    (``"PSD"`` for Photoshop files).  EXIF orientation is applied, so the
    returned size is the upright size.  Raises ``RenderUnavailable`` if the
    buffer cannot be decoded.
    """
    if not buffer:
        raise RenderUnavailable("empty image buffer")
    try:
        if is_psd(buffer):
            psd = PSDImage.open(io.BytesIO(buffer))
            return psd.composite(), "PSD"
        img = Image.open(io.BytesIO(buffer))
        fmt = img.format
        img.load()
        # Crop the photo upright, the way viewers show it
        return ImageOps.exif_transpose(img), fmt
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as exc:
        logger.warning("Could not decode image buffer (%d bytes): %s", len(buffer), exc)
        raise RenderUnavailable(f"could not decode image: {exc}") from exc


def read_image_bytes(path: Path) -> bytes:
    return Path(path).read_bytes()


def encode_image(img: Image.Image, fmt: str) -> bytes:
    """Encode *img* as *fmt* (JPEG, PNG or WEBP) and return the bytes.

    Raises ``EncodeFailed`` if the encoder errors or produces nothing.
    """
    out = io.BytesIO()
    fmt = fmt.upper()
    try:
        if fmt == "JPEG":
            img.convert("RGB").save(
                out, "JPEG",
                quality=JPEG_QUALITY,
                optimize=JPEG_OPTIMIZE,
                subsampling=JPEG_SUBSAMPLING,
            )
        elif fmt == "WEBP":
            img.save(out, "WEBP", quality=WEBP_QUALITY)
        else:
            img.save(out, "PNG", compress_level=PNG_COMPRESS_LEVEL)
    except (OSError, ValueError, KeyError) as exc:
        logger.error("Encoding %dx%d %s failed: %s", img.width, img.height, fmt, exc)
        raise EncodeFailed(f"{fmt} encoding failed: {exc}") from exc

    data = out.getvalue()
    if not data:
        raise EncodeFailed(f"{fmt} encoder produced no data")
    return data


def pil_to_qimage(pil_img: Image.Image):
    """Convert a PIL Image to a QImage that owns its pixel data."""
    from PyQt6.QtGui import QImage

    img_rgba = pil_img.convert("RGBA")
    data = img_rgba.tobytes("raw", "RGBA")
    qimg = QImage(data, img_rgba.width, img_rgba.height, img_rgba.width * 4, QImage.Format.Format_RGBA8888)
    return qimg.copy()


def unique_path(out_path: Path) -> Path:
    """Return a unique path by appending -01, -02, etc. if file already exists."""
    if not out_path.exists():
        return out_path
    stem = out_path.stem
    suffix = out_path.suffix
    parent = out_path.parent
    counter = 1
    while True:
        candidate = parent / f"{stem}-{counter:02d}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1

"""Tests for buffer decode/encode helpers."""

import io

import pytest
from PIL import Image

from profile_image_cropper.config import DISPLAY_MAX_H, DISPLAY_MAX_W
from profile_image_cropper.errors import RenderUnavailable
from profile_image_cropper.geometry import fit_display
from profile_image_cropper.image_io import decode_image, encode_image, is_psd, pil_to_qimage, unique_path

from conftest import image_bytes, make_image


def test_decode_png():
    img, fmt = decode_image(image_bytes(30, 20, "PNG"))
    assert fmt == "PNG"
    assert img.size == (30, 20)


def test_decode_garbage_fails():
    with pytest.raises(RenderUnavailable):
        decode_image(b"definitely not an image")


def test_decode_empty_fails():
    with pytest.raises(RenderUnavailable):
        decode_image(b"")


def test_psd_signature_detection():
    assert is_psd(b"8BPS\x00\x01")
    assert not is_psd(image_bytes(4, 4))


def test_encode_jpeg_drops_alpha():
    data = encode_image(make_image(16, 16, (1, 2, 3, 128), mode="RGBA"), "jpeg")
    decoded = Image.open(io.BytesIO(data))
    assert decoded.format == "JPEG"
    assert decoded.mode == "RGB"


def test_encode_unknown_format_falls_back_to_png():
    data = encode_image(make_image(8, 8), "BMP")
    assert Image.open(io.BytesIO(data)).format == "PNG"


def test_pil_to_qimage_keeps_pixels():
    qimg = pil_to_qimage(make_image(5, 4, (10, 20, 30)))
    assert (qimg.width(), qimg.height()) == (5, 4)
    c = qimg.pixelColor(2, 2)
    assert (c.red(), c.green(), c.blue(), c.alpha()) == (10, 20, 30, 255)


def test_unique_path(tmp_path):
    target = tmp_path / "photo-avatar.png"
    assert unique_path(target) == target
    target.write_bytes(b"x")
    assert unique_path(target) == tmp_path / "photo-avatar-01.png"
    (tmp_path / "photo-avatar-01.png").write_bytes(b"x")
    assert unique_path(target) == tmp_path / "photo-avatar-02.png"


def test_decode_applies_exif_orientation():
    exif = Image.Exif()
    exif[0x0112] = 6  # rotated 90° clockwise
    buf = io.BytesIO()
    make_image(100, 50).save(buf, "JPEG", exif=exif)
    img, fmt = decode_image(buf.getvalue())
    assert fmt == "JPEG"
    assert img.size == (50, 100)


def test_exif_rotated_photo_displays_portrait():
    exif = Image.Exif()
    exif[0x0112] = 6
    buf = io.BytesIO()
    make_image(1000, 500).save(buf, "JPEG", exif=exif)
    img, _ = decode_image(buf.getvalue())
    metrics = fit_display(img.width, img.height, DISPLAY_MAX_W, DISPLAY_MAX_H)
    assert metrics.display_h > metrics.display_w

import io
import os
import sys
from pathlib import Path

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]

# Make the package importable without an install
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session", autouse=True)
def qapp():
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


def make_image(width: int, height: int, color=(200, 40, 40), mode: str = "RGB") -> Image.Image:
    return Image.new(mode, (width, height), color)


def image_bytes(width: int, height: int, fmt: str = "PNG", color=(200, 40, 40)) -> bytes:
    out = io.BytesIO()
    make_image(width, height, color).save(out, fmt)
    return out.getvalue()


@pytest.fixture
def png_square() -> bytes:
    return image_bytes(400, 400, "PNG")


@pytest.fixture
def jpeg_landscape() -> bytes:
    return image_bytes(1000, 800, "JPEG")

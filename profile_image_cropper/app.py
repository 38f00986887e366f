"""
Desktop entry point and dark-theme stylesheet.

Usage:
    python -m profile_image_cropper.app [IMAGE] [avatar|banner]
    profile-image-cropper [IMAGE] [avatar|banner]     (after pip install)

Without IMAGE a file picker is shown.  The cropped result is written next
to the source as ``<stem>-<type>.<ext>`` (never overwriting).
"""

import logging
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication, QFileDialog, QMessageBox

from profile_image_cropper.crop_dialog import CropDialog
from profile_image_cropper.errors import CropError
from profile_image_cropper.image_io import decode_image, read_image_bytes, unique_path
from profile_image_cropper.models import OutputSpec, OutputType

logger = logging.getLogger(__name__)

DARK_STYLESHEET = """
    QDialog { background: #2b2b2b; }
    QWidget { background: #2b2b2b; color: #ddd; font-size: 10pt; }
    QPushButton { background: #3a3a3a; border: 1px solid #555; border-radius: 4px; padding: 6px 12px; }
    QPushButton:hover { background: #4a4a4a; }
    QPushButton:pressed { background: #2a2a2a; }
    QPushButton:default { background: #3a6ea5; border-color: #5a8ec5; }
    QPushButton:disabled { color: #666; }
"""

_EXTENSIONS = {"PNG": ".png", "JPEG": ".jpg", "WEBP": ".webp"}
_FILE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.webp *.bmp *.tif *.tiff *.psd)"


def _parse_args(argv: list[str]) -> tuple[Path | None, str]:
    path = None
    output_type = OutputType.AVATAR.value
    for arg in argv:
        if arg in (OutputType.AVATAR.value, OutputType.BANNER.value):
            output_type = arg
        else:
            path = Path(arg)
    return path, output_type


def main():
    app = QApplication(sys.argv)
    app.setStyleSheet(DARK_STYLESHEET)

    path, output_type = _parse_args(sys.argv[1:])
    if path is None:
        selected, _ = QFileDialog.getOpenFileName(None, "Choose an image to crop", "", _FILE_FILTER)
        if not selected:
            return
        path = Path(selected)

    try:
        image, fmt = decode_image(read_image_bytes(path))
        result = CropDialog.crop_image(image, OutputSpec.for_type(output_type), fmt)
    except (CropError, OSError) as exc:
        QMessageBox.critical(None, "Crop Image", f"Could not open {path.name}:\n{exc}")
        sys.exit(1)

    if result is None:
        return

    out_path = unique_path(path.with_name(f"{path.stem}-{output_type}{_EXTENSIONS[result.format]}"))
    out_path.write_bytes(result.buffer)
    logger.info("Saved %dx%d crop to %s", result.width, result.height, out_path)
    print(out_path)


if __name__ == "__main__":
    main()

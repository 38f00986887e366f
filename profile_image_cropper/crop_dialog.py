"""
Modal "Crop Image" dialog: the crop widget plus Cancel / Confirm Crop.

``CropDialog.crop_image`` is the one-call entry point a desktop host uses:
it runs the dialog and returns the ``CropResult`` or None if the user
cancelled.
"""

from PIL import Image
from PyQt6.QtWidgets import QDialog, QHBoxLayout, QLabel, QMessageBox, QPushButton, QVBoxLayout

from profile_image_cropper.api import CropSessionHandle
from profile_image_cropper.crop_widget import ImageCropWidget
from profile_image_cropper.errors import CropError
from profile_image_cropper.models import CropResult, OutputSpec


class CropDialog(QDialog):
    def __init__(self, handle: CropSessionHandle, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Crop Image")
        self.setModal(True)

        self._handle = handle
        self._result: CropResult | None = None

        layout = QVBoxLayout(self)

        self._crop_widget = ImageCropWidget()
        self._crop_widget.set_session(handle)
        layout.addWidget(self._crop_widget, stretch=1)

        hint = QLabel("Drag to move or resize · drag outside to pan · scroll to zoom · R to reset")
        hint.setWordWrap(True)
        layout.addWidget(hint)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self._btn_cancel = QPushButton("Cancel")
        self._btn_cancel.clicked.connect(self.reject)
        buttons.addWidget(self._btn_cancel)
        self._btn_confirm = QPushButton("Confirm Crop")
        self._btn_confirm.setDefault(True)
        self._btn_confirm.clicked.connect(self._confirm)
        buttons.addWidget(self._btn_confirm)
        layout.addLayout(buttons)

    def result_crop(self) -> CropResult | None:
        return self._result

    def _confirm(self):
        self._btn_confirm.setEnabled(False)
        try:
            self._result = self._handle.commit().result()
        except CropError as exc:
            # Session stays open; the user may adjust and try again
            QMessageBox.warning(self, "Crop failed", f"The image could not be cropped:\n{exc}")
            return
        finally:
            self._btn_confirm.setEnabled(True)
        self.accept()

    def reject(self):
        if not self._handle.closed:
            self._handle.cancel()
        super().reject()

    @classmethod
    def crop_image(cls, image: Image.Image, output_spec: OutputSpec, source_format: str | None = None,
                   parent=None) -> CropResult | None:
        handle = CropSessionHandle.from_image(image, output_spec, source_format)
        dialog = cls(handle, parent)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            return dialog.result_crop()
        return None

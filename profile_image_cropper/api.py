"""
Host call contract.

A host hands over a raw image buffer and an output spec, forwards pointer
and wheel events in surface-local pixels, and finally commits (or cancels).
Each event mutates the session synchronously and the frame is redrawn
before the call returns, so the latest picture is always in
``handle.frame``.

``commit`` is the only asynchronous step.  It returns a
``concurrent.futures.Future``.  With an executor the rasterize-and-encode
step runs there; without one it runs inline and the future is already
resolved when it is returned.  A failed commit leaves the session untouched
and open for a retry.  A successful commit closes the session.

Typical use::

    handle = create_session(data, {"type": "avatar", "aspectRatio": 1, "cropShape": "circle"})
    pointer_down(handle, 200, 200)
    pointer_move(handle, 230, 210)
    pointer_up(handle)
    result = commit(handle).result()
"""

import logging
from concurrent.futures import Executor, Future
from dataclasses import replace
from typing import Mapping

from PIL import Image

from profile_image_cropper.config import DISPLAY_MAX_H, DISPLAY_MAX_W
from profile_image_cropper.controller import InteractionController
from profile_image_cropper.errors import CropError, SessionStateError
from profile_image_cropper.extractor import extract
from profile_image_cropper.image_io import decode_image
from profile_image_cropper.models import CropResult, OutputSpec
from profile_image_cropper.renderer import CropRenderer
from profile_image_cropper.session import CropSession

logger = logging.getLogger(__name__)


class CropSessionHandle:
    """One live crop interaction: session, controller, renderer and latest frame."""

    def __init__(self, session: CropSession, renderer: CropRenderer | None = None,
                 executor: Executor | None = None):
        self.session = session
        self.controller = InteractionController(session)
        self.renderer = renderer or CropRenderer()
        self.frame = None
        self._executor = executor
        self._in_flight = False
        self._closed = False
        self.controller.crop_changed.connect(self.redraw)

    @classmethod
    def from_image(cls, image: Image.Image, output_spec: OutputSpec | Mapping,
                   source_format: str | None = None, *,
                   renderer: CropRenderer | None = None, executor: Executor | None = None,
                   max_display: tuple[float, float] = (DISPLAY_MAX_W, DISPLAY_MAX_H)) -> "CropSessionHandle":
        spec = output_spec if isinstance(output_spec, OutputSpec) else OutputSpec.from_dict(output_spec)
        session = CropSession(image, spec, source_format, max_display=max_display)
        session.initialize()
        handle = cls(session, renderer=renderer, executor=executor)
        handle.redraw()
        return handle

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def commit_pending(self) -> bool:
        return self._in_flight

    def _check_open(self):
        if self._closed:
            raise SessionStateError("crop session is closed")

    def redraw(self):
        if self._closed:
            return
        self.frame = self.renderer.render(self.session, self.frame)

    # --- Input ---

    def pointer_down(self, x: float, y: float):
        self._check_open()
        self.controller.pointer_down(x, y)

    def pointer_move(self, x: float, y: float) -> bool:
        self._check_open()
        return self.controller.pointer_move(x, y)

    def pointer_up(self):
        self._check_open()
        self.controller.pointer_up()

    def pointer_leave(self):
        self._check_open()
        self.controller.pointer_leave()

    def wheel(self, delta_y: float, x: float, y: float) -> bool:
        self._check_open()
        return self.controller.wheel(delta_y, x, y)

    # --- Terminal operations ---

    def commit(self) -> "Future[CropResult]":
        """Rasterize and encode the current crop; resolves with a ``CropResult``."""
        self._check_open()
        if self.commit_pending:
            raise SessionStateError("a commit is already in flight for this session")

        s = self.session
        crop, view = s.snapshot()
        args = (s.image, s.source_format, crop, view, replace(s.metrics), s.output_spec)

        # Stays set until _on_commit_done has run, not merely until the future resolves
        self._in_flight = True
        if self._executor is not None:
            try:
                future = self._executor.submit(extract, *args)
            except RuntimeError:
                self._in_flight = False
                raise
        else:
            future = Future()
            try:
                future.set_result(extract(*args))
            except Exception as exc:
                future.set_exception(exc)

        future.add_done_callback(self._on_commit_done)
        return future

    def _on_commit_done(self, future: Future):
        try:
            if future.cancelled():
                return
            exc = future.exception()
            if isinstance(exc, CropError):
                logger.warning("Crop commit failed, session kept for retry: %s", exc)
                return
            if exc is not None:
                logger.error("Crop commit raised unexpectedly, session kept for retry",
                             exc_info=exc)
                return
            result = future.result()
            logger.info("Crop committed: %dx%d %s (%d bytes)",
                        result.width, result.height, result.format, len(result.buffer))
            self._close()
        finally:
            self._in_flight = False

    def cancel(self):
        """Discard the session without producing output."""
        if not self._closed:
            logger.debug("Crop session cancelled")
        self._close()

    def _close(self):
        self._closed = True
        self.session.end_drag()
        try:
            self.controller.crop_changed.disconnect(self.redraw)
        except TypeError:
            pass


# =============================================================================
# Functional facade
# =============================================================================
def create_session(image_buffer: bytes, output_spec: OutputSpec | Mapping, *,
                   executor: Executor | None = None,
                   renderer: CropRenderer | None = None) -> CropSessionHandle:
    """Decode *image_buffer* and open a crop session.  Raises ``RenderUnavailable``."""
    image, fmt = decode_image(image_buffer)
    return CropSessionHandle.from_image(image, output_spec, fmt, renderer=renderer, executor=executor)


def pointer_down(handle: CropSessionHandle, x: float, y: float):
    handle.pointer_down(x, y)


def pointer_move(handle: CropSessionHandle, x: float, y: float) -> bool:
    return handle.pointer_move(x, y)


def pointer_up(handle: CropSessionHandle):
    handle.pointer_up()


def pointer_leave(handle: CropSessionHandle):
    handle.pointer_leave()


def wheel(handle: CropSessionHandle, delta_y: float, x: float, y: float) -> bool:
    return handle.wheel(delta_y, x, y)


def commit(handle: CropSessionHandle) -> "Future[CropResult]":
    return handle.commit()


def cancel(handle: CropSessionHandle):
    handle.cancel()

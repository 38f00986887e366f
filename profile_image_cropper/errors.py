"""Exception hierarchy for the crop engine."""


class CropError(Exception):
    """Base class for all errors raised by the crop engine."""


class RenderUnavailable(CropError):
    """Raised when the drawing surface or the decoded source image is unavailable."""


class EncodeFailed(CropError):
    """Raised when rasterize-and-encode produced no data.  The session stays usable."""


class InvalidGeometry(CropError):
    """Raised internally when a geometry computation yields a non-finite or inverted rectangle."""


class SessionStateError(CropError):
    """Raised when a session is used after it was closed, or committed twice at once."""

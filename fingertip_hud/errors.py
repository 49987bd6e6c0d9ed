"""
Error types raised inside the tracking core.

None of these ever leave the core: each one degrades to "skip this frame"
or "use the fallback". Missing depth is not an error and is reported as None.
"""


class TrackingError(Exception):
    """Base class for tracking core errors."""


class RecoverableFrameError(TrackingError):
    """
    The detector failed on a single frame.
    The frame is skipped with no state change and no retry.
    """


class InvalidGeometryError(TrackingError):
    """
    A ray or transform could not be computed (non-finite values, degenerate camera
    transform or intrinsics, empty viewport). Treated as "no world point".
    """

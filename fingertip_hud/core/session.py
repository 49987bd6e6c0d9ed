"""
Session status and the gate the tracker checks before processing a frame.

The tracker never changes the status itself; the capture shell reports status
changes through `SessionGate.update`, which forwards them to one injected handler.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    CHECKING_PREREQUISITES = "checking_prerequisites"
    NOT_SUPPORTED = "not_supported"
    CAMERA_NOT_DETERMINED = "camera_not_determined"
    CAMERA_DENIED = "camera_denied"
    MISSING_REFERENCE_IMAGES = "missing_reference_images"
    READY = "ready"
    TRACKING = "tracking"
    INTERRUPTED = "interrupted"
    SESSION_FAILED = "session_failed"

    @property
    def message(self):
        return _MESSAGES[self]

    @property
    def is_terminal(self):
        return self in (SessionStatus.NOT_SUPPORTED, SessionStatus.CAMERA_DENIED,
                        SessionStatus.SESSION_FAILED)


_MESSAGES = {
    SessionStatus.CHECKING_PREREQUISITES: "Checking device capabilities...",
    SessionStatus.NOT_SUPPORTED: "Hand tracking is not supported on this device.",
    SessionStatus.CAMERA_NOT_DETERMINED: "Waiting for camera permission...",
    SessionStatus.CAMERA_DENIED: "Camera access was denied. Enable it to use hand tracking.",
    SessionStatus.MISSING_REFERENCE_IMAGES: "Reference images are missing.",
    SessionStatus.READY: "Ready. Show your hand to the camera.",
    SessionStatus.TRACKING: "Tracking",
    SessionStatus.INTERRUPTED: "Tracking interrupted. Hold still...",
    SessionStatus.SESSION_FAILED: "Session failed",
}

_PROCESSING_STATES = (SessionStatus.READY, SessionStatus.TRACKING)


def describe(status, detail=None):
    """
    User-facing text for a status, with an optional detail appended.
    """
    if detail:
        return f"{status.message}: {detail}"
    return status.message


class SessionGate:
    """
    Holds the current session status and tells the tracker whether it may run.
    """

    def __init__(self, handler=None, status=SessionStatus.CHECKING_PREREQUISITES):
        """
        Args:
            handler: Callable (status, message) notified on every status change
            status (SessionStatus): Initial status
        """
        self.handler = handler
        self.status = status
        self.detail = None

    @property
    def allows_tracking(self):
        return self.status in _PROCESSING_STATES

    def update(self, status, detail=None):
        """
        Record a new status and notify the handler.

        Returns:
            bool: True if the status or its detail changed
        """
        if status == self.status and detail == self.detail:
            return False
        if self.status is SessionStatus.SESSION_FAILED:
            logger.warning(f"Ignoring status {status.value} after session failure")
            return False

        logger.info(f"Session status: {self.status.value} -> {status.value}")
        self.status = status
        self.detail = detail
        if self.handler is not None:
            self.handler(status, describe(status, detail))
        return True

"""
Inference rate limiting and job bookkeeping.

`InferenceScheduler` decides whether a frame should be sent to the detector.
`GenerationCounter` numbers dispatched jobs so that a slow job finishing after a
newer one can be recognised and dropped. `CancellationToken` makes every pending
completion inert once its owner goes away.
"""

import logging
import threading

from fingertip_hud.config import TrackingConfig

logger = logging.getLogger(__name__)


class InferenceScheduler:
    """
    Rate limiter for per-frame hand inference.

    The last-run timestamp only moves when a run is recorded. Callers that may still
    fail to dispatch check `ready` first and `record_run` once the frame is handed off;
    `should_infer` does both at once.
    """

    def __init__(self, min_interval=None):
        """
        Initialize the scheduler.

        Args:
            min_interval (float): Minimum seconds between inferences. If None, uses config default.
        """
        self.min_interval = (
            min_interval if min_interval is not None else TrackingConfig.MIN_INFERENCE_INTERVAL
        )
        if self.min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {self.min_interval}")
        self.last_run = None

    def should_infer(self, now):
        """
        Check whether enough time has passed since the last inference.

        Args:
            now (float): Current time in seconds (monotonic clock)

        Returns:
            bool: True if inference should run; the last-run timestamp is updated
        """
        if not self.ready(now):
            return False
        self.record_run(now)
        return True

    def ready(self, now):
        """
        Check whether enough time has passed since the last recorded run, without
        recording anything.
        """
        return self.last_run is None or (now - self.last_run) >= self.min_interval

    def record_run(self, now):
        self.last_run = now

    def reset(self):
        """Forget the last run so the next frame is always processed."""
        self.last_run = None


class CancellationToken:
    """
    Shared flag that silently expires every job issued by one owner.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()


class GenerationCounter:
    """
    Monotonic job numbering with a drop-stale policy.

    A completion is accepted only if its generation is newer than the last accepted
    one, so results apply in submission order even if jobs finish out of order.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._next = 0
        self.last_applied = -1
        self.dropped = 0

    def issue(self):
        """
        Return the generation number for a new job.
        """
        with self._lock:
            generation = self._next
            self._next += 1
            return generation

    def try_apply(self, generation):
        """
        Accept a completion if it is not older than what was already applied.

        Args:
            generation (int): Generation of the finished job

        Returns:
            bool: True if the completion should be applied
        """
        with self._lock:
            if generation <= self.last_applied:
                self.dropped += 1
                logger.debug(
                    f"Dropping stale completion {generation} (last applied {self.last_applied})"
                )
                return False
            self.last_applied = generation
            return True

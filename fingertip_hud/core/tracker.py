"""
Hand anchor tracker.

Wires the per-frame pipeline together:

    render thread:      on_frame -> scheduler -> submit job
    worker thread:      detect -> select candidate -> screen point -> world point
    render thread:      tick -> drain completions -> HudState / debug markers
                             -> sample touch channel -> HUD dot

Only the render thread mutates `HudState` and the debug visualizer.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from fingertip_hud.config import WorkerConfig
from fingertip_hud.core.debug_visualizer import DebugJointVisualizer
from fingertip_hud.core.hud_state import HudState
from fingertip_hud.core.projector import Projection, WorldAnchorProjector
from fingertip_hud.core.scheduler import CancellationToken, GenerationCounter, InferenceScheduler
from fingertip_hud.core.workers import InferenceJob, InferenceWorker
from fingertip_hud.detection.candidate_selector import CandidateSelector
from fingertip_hud.detection.hand_observation import JointName
from fingertip_hud.errors import InvalidGeometryError
from fingertip_hud.geometry.transforms import detector_to_screen
from fingertip_hud.touch.messages import TouchMessageError, decode_touch_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackingResult:
    """
    Output of the background half of one frame.
    """

    anchor: Optional[Projection] = None
    joints: Dict[JointName, Projection] = field(default_factory=dict)

    @property
    def found(self):
        return self.anchor is not None


class HandAnchorTracker:
    """
    Places the HUD anchor at the most confident hand's anchor joint.

    Must be created on the render thread, the same thread that calls `on_frame` and
    `tick`. Calls made before `start()` or while the session gate is closed are no-ops.
    """

    def __init__(self, context, worker=None, projector=None, selector=None, scheduler=None):
        """
        Initialize the tracker.

        Args:
            context (TrackingContext): Shared settings and services
            worker: Object with `submit(job)`. If None, an `InferenceWorker` is created
                    and owned by the tracker.
            projector (WorldAnchorProjector): Screen to world projection
            selector (CandidateSelector): Hand selection policy
            scheduler (InferenceScheduler): Inference rate limiter
        """
        self.context = context
        self.projector = projector if projector is not None else WorldAnchorProjector()
        self.selector = selector if selector is not None else CandidateSelector()
        self.scheduler = scheduler if scheduler is not None else InferenceScheduler()

        self.hud = HudState()
        self.visualizer = DebugJointVisualizer(context.visualize_joints)

        self.generations = GenerationCounter()
        self.token = CancellationToken()

        self._owns_worker = worker is None
        self.worker = worker if worker is not None else InferenceWorker(context.dispatcher)
        self.started = False
        self.last_result = None

    def start(self):
        if self.started:
            return
        if self._owns_worker and not self.worker.is_alive():
            self.worker.start()
        self.started = True
        logger.info("Hand anchor tracker started")

    def on_frame(self, frame, now=None):
        """
        Offer a captured frame for inference (render thread, non-blocking).

        Args:
            frame (Frame): Captured frame
            now (float): Current monotonic time. If None, the context clock is used.

        Returns:
            bool: True if the frame was dispatched to the worker
        """
        if not self.started or self.token.cancelled:
            return False
        if not self.context.session.allows_tracking:
            return False
        if self.context.detector is None:
            return False
        if frame.viewport_size.is_empty:
            logger.debug("Skipping frame with empty viewport")
            return False

        now = self.context.clock() if now is None else now
        if not self.scheduler.ready(now):
            return False

        generation = self.generations.issue()
        job = InferenceJob(
            generation=generation,
            token=self.token,
            process=functools.partial(self.process_frame, frame),
            complete=functools.partial(self.apply_result, generation),
        )
        if not self.worker.submit(job):
            logger.debug(f"Worker refused job {generation}, rate limiter left untouched")
            return False
        self.scheduler.record_run(now)
        return True

    def process_frame(self, frame):
        """
        Detect, select and project one frame. Runs on the worker thread and touches
        no render-facing state.

        Returns:
            TrackingResult: Anchor projection (None if no hand qualified) and, when the
                            joint visualizer is enabled, a projection per visible joint
        """
        observations = self.context.detector.detect(frame.color_image, frame.image_orientation)
        candidate = self.selector.select(observations)
        if candidate is None:
            return TrackingResult()

        anchor = self._project_location(candidate.joint.location, frame)

        joints = {}
        if self.visualizer.enabled:
            for joint in candidate.observation.joints_above(self.selector.min_confidence):
                projection = self._project_location(joint.location, frame)
                if projection is not None:
                    joints[joint.name] = projection

        return TrackingResult(anchor, joints)

    def _project_location(self, location, frame):
        try:
            screen = detector_to_screen(
                location, frame.image_orientation, frame.display_transform(), frame.viewport_size
            )
        except InvalidGeometryError as e:
            logger.debug(f"No screen point for {location}: {e}")
            return None
        return self.projector.project(screen, frame)

    def apply_result(self, generation, result):
        """
        Apply a finished job's result (render thread).

        Returns:
            bool: True if the result was applied
        """
        if not self.context.session.allows_tracking:
            logger.debug(
                f"Dropping completion {generation} while session is {self.context.session.status.value}"
            )
            return False
        if not self.generations.try_apply(generation):
            return False

        self.last_result = result
        if result.anchor is not None:
            self.hud.set_anchor(result.anchor.point)
        self.visualizer.update(result.joints)
        return True

    def on_touch(self, sample):
        """
        Publish a touch sample. Safe to call from any thread.
        """
        self.context.touch_channel.publish(sample)

    def on_touch_message(self, message):
        """
        Decode a touch payload and publish it. Malformed payloads are dropped.

        Returns:
            bool: True if the payload was accepted
        """
        try:
            sample = decode_touch_message(message)
        except TouchMessageError as e:
            logger.warning(f"Dropping touch payload: {e}")
            return False
        self.on_touch(sample)
        return True

    def tick(self, now=None):
        """
        Per-render-tick update: apply finished inference results and the latest
        touch sample.

        Returns:
            HudSnapshot: Current HUD state for the renderer
        """
        self.context.dispatcher.drain()

        sample = self.context.touch_sampler.poll(now)
        if sample is not None:
            self.hud.apply_touch(sample)

        return self.hud.snapshot()

    def stop(self):
        """
        Stop tracking. Pending completions become inert.
        """
        self.token.cancel()
        self.started = False
        if self._owns_worker and self.worker.is_alive():
            self.worker.stop()
            self.worker.join(timeout=WorkerConfig.THREAD_SHUTDOWN_TIMEOUT)
            if self.worker.is_alive():
                logger.warning("InferenceWorker did not stop within timeout")
        logger.info(
            f"Hand anchor tracker stopped (stale completions dropped: {self.generations.dropped})"
        )

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

"""
Tests for the tracker orchestration, with a fake detector and a synchronous worker.
"""

import numpy as np
import pytest

from fingertip_hud.context import TrackingContext
from fingertip_hud.core.frame import Frame
from fingertip_hud.core.session import SessionStatus
from fingertip_hud.core.tracker import HandAnchorTracker
from fingertip_hud.core.workers import run_job
from fingertip_hud.depth.buffers import DepthBuffer
from fingertip_hud.detection.hand_observation import HandObservation, Joint, JointName
from fingertip_hud.errors import RecoverableFrameError
from fingertip_hud.geometry.transforms import InterfaceOrientation
from fingertip_hud.touch.messages import TouchSample, encode_touch_message
from fingertip_hud.utils.coords import NormalizedPoint, ViewportSize

WIDTH, HEIGHT = 200, 100


class FakeDetector:
    def __init__(self, observations=None, error=None):
        self.observations = observations if observations is not None else []
        self.error = error
        self.calls = 0

    def detect(self, color_image, orientation):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.observations


class FakeWorker:
    """Collects jobs so a test can run them in any order."""

    def __init__(self):
        self.jobs = []

    def submit(self, job):
        self.jobs.append(job)
        return True


class RefusingWorker:
    def __init__(self):
        self.offered = 0

    def submit(self, job):
        self.offered += 1
        return False


def hand_at(u, v, confidence=0.9, extra_joints=()):
    joints = [Joint(JointName.THUMB_IP, NormalizedPoint(u, v), confidence)]
    joints.extend(extra_joints)
    return HandObservation.from_joints(joints)


def make_frame(depth=None, viewport=None, timestamp=0.0):
    return Frame(
        color_image=np.zeros((HEIGHT, WIDTH, 3), dtype=np.uint8),
        camera_transform=np.eye(4),
        camera_intrinsics=np.array([[100.0, 0.0, WIDTH / 2], [0.0, 100.0, HEIGHT / 2], [0.0, 0.0, 1.0]]),
        display_orientation=InterfaceOrientation.LANDSCAPE_RIGHT,
        viewport_size=viewport if viewport is not None else ViewportSize(WIDTH, HEIGHT),
        timestamp=timestamp,
        depth=None if depth is None else DepthBuffer(np.full((12, 16), depth)),
    )


def make_tracker(detector=None, visualize_joints=False, status=SessionStatus.READY):
    context = TrackingContext(detector=detector if detector is not None else FakeDetector())
    context.visualize_joints = visualize_joints
    context.session.update(status)
    worker = FakeWorker()
    tracker = HandAnchorTracker(context, worker=worker)
    tracker.start()
    return tracker, worker


def run_all(tracker, worker):
    for job in worker.jobs:
        run_job(job, tracker.context.dispatcher)
    worker.jobs.clear()
    return tracker.tick(now=0.0)


def test_hand_places_anchor_at_fallback_distance():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]))

    assert tracker.on_frame(make_frame(), now=0.0)
    snapshot = run_all(tracker, worker)

    assert tuple(snapshot.anchor) == pytest.approx((0.0, 0.0, -0.45), abs=1e-9)
    assert tracker.last_result.anchor.used_fallback


def test_depth_is_used_when_available():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]))
    tracker.on_frame(make_frame(depth=0.3), now=0.0)
    snapshot = run_all(tracker, worker)
    assert tuple(snapshot.anchor) == pytest.approx((0.0, 0.0, -0.3), abs=1e-6)


def test_detector_space_is_bottom_left():
    # A hand high in the upright image must end up above the optical axis
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.9)]))
    tracker.on_frame(make_frame(), now=0.0)
    snapshot = run_all(tracker, worker)
    assert snapshot.anchor.y > 0


def test_nothing_happens_before_start():
    context = TrackingContext(detector=FakeDetector([hand_at(0.5, 0.5)]))
    context.session.update(SessionStatus.READY)
    worker = FakeWorker()
    tracker = HandAnchorTracker(context, worker=worker)

    assert not tracker.on_frame(make_frame(), now=0.0)
    assert tracker.tick(now=0.0).anchor is None
    assert worker.jobs == []


def test_closed_gate_blocks_inference():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]), status=SessionStatus.INTERRUPTED)
    assert not tracker.on_frame(make_frame(), now=0.0)
    assert worker.jobs == []


def test_empty_viewport_is_skipped():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]))
    assert not tracker.on_frame(make_frame(viewport=ViewportSize(0, 0)), now=0.0)


def test_frames_are_rate_limited():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]))
    assert tracker.on_frame(make_frame(), now=0.000)
    assert not tracker.on_frame(make_frame(), now=0.010)
    assert tracker.on_frame(make_frame(), now=0.040)
    assert len(worker.jobs) == 2


def test_stale_completion_does_not_overwrite_newer_anchor():
    detector = FakeDetector()
    tracker, worker = make_tracker(detector)
    tracker.on_frame(make_frame(), now=0.0)
    tracker.on_frame(make_frame(), now=1.0)
    older, newer = worker.jobs

    detector.observations = [hand_at(0.9, 0.5)]
    run_job(newer, tracker.context.dispatcher)
    tracker.tick(now=0.0)
    applied = tracker.hud.anchor

    detector.observations = [hand_at(0.1, 0.5)]
    run_job(older, tracker.context.dispatcher)
    tracker.tick(now=0.0)

    assert tracker.hud.anchor == applied
    assert tracker.generations.dropped == 1


def test_no_candidate_keeps_previous_anchor():
    detector = FakeDetector([hand_at(0.5, 0.5)])
    tracker, worker = make_tracker(detector)
    tracker.on_frame(make_frame(), now=0.0)
    run_all(tracker, worker)
    anchor = tracker.hud.anchor

    detector.observations = [hand_at(0.9, 0.9, confidence=0.1)]
    tracker.on_frame(make_frame(), now=1.0)
    run_all(tracker, worker)

    assert tracker.hud.anchor == anchor
    assert not tracker.last_result.found


def test_detector_failure_skips_frame():
    tracker, worker = make_tracker(FakeDetector(error=RecoverableFrameError("blurred")))
    tracker.on_frame(make_frame(), now=0.0)
    snapshot = run_all(tracker, worker)
    assert snapshot.anchor is None
    assert tracker.context.dispatcher.pending() == 0


def test_stop_makes_pending_completions_inert():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]))
    tracker.on_frame(make_frame(), now=0.0)
    run_job(worker.jobs[0], tracker.context.dispatcher)

    tracker.stop()
    tracker.tick(now=0.0)

    assert tracker.hud.anchor is None
    assert not tracker.on_frame(make_frame(), now=5.0)


def test_joint_markers_when_visualizer_enabled():
    extra = [
        Joint(JointName.WRIST, NormalizedPoint(0.4, 0.2), 0.9),
        Joint(JointName.PINKY_TIP, NormalizedPoint(0.7, 0.6), 0.1),
    ]
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5, extra_joints=extra)]), visualize_joints=True)
    tracker.on_frame(make_frame(depth=0.9), now=0.0)
    run_all(tracker, worker)

    markers = tracker.visualizer.markers
    assert set(markers) == {JointName.THUMB_IP, JointName.WRIST}
    assert markers[JointName.WRIST].scale == pytest.approx(0.5)


def test_joint_markers_off_by_default():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]))
    tracker.on_frame(make_frame(), now=0.0)
    run_all(tracker, worker)
    assert tracker.visualizer.markers == {}
    assert tracker.last_result.joints == {}


def test_touch_moves_dot_at_tick_rate():
    tracker, _ = make_tracker()
    tracker.on_touch(TouchSample(0.0, 0.5))
    tracker.on_touch(TouchSample(1.0, 0.5))

    snapshot = tracker.tick(now=10.0)
    assert snapshot.dot_offset[0] == pytest.approx(0.0125)

    tracker.on_touch(TouchSample(0.0, 0.5))
    assert tracker.tick(now=10.001).dot_offset[0] == pytest.approx(0.0125)
    assert tracker.tick(now=10.1).dot_offset[0] == pytest.approx(-0.0125)


def test_touch_payloads_are_validated():
    tracker, _ = make_tracker()
    assert tracker.on_touch_message(encode_touch_message(TouchSample(0.25, 0.75, 1.0)))
    assert not tracker.on_touch_message('{"kind": "pad-coordinates", "version": 9, "x": 0, "y": 0, "t": 0}')
    assert not tracker.on_touch_message("not json")

    snapshot = tracker.tick(now=0.0)
    assert snapshot.dot_offset[:2] == pytest.approx((-0.00625, 0.00625))


def test_refused_job_does_not_consume_rate_limit_slot():
    context = TrackingContext(detector=FakeDetector([hand_at(0.5, 0.5)]))
    context.session.update(SessionStatus.READY)
    worker = RefusingWorker()
    tracker = HandAnchorTracker(context, worker=worker)
    tracker.start()

    assert not tracker.on_frame(make_frame(), now=1.0)
    assert tracker.scheduler.last_run is None

    accepting = FakeWorker()
    tracker.worker = accepting
    assert tracker.on_frame(make_frame(), now=1.010)
    assert tracker.scheduler.last_run == 1.010
    assert worker.offered == 1
    assert len(accepting.jobs) == 1


@pytest.mark.parametrize("status", [SessionStatus.SESSION_FAILED, SessionStatus.INTERRUPTED])
def test_completion_after_session_closes_is_dropped(status):
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]), visualize_joints=True)
    assert tracker.on_frame(make_frame(), now=0.0)

    tracker.context.session.update(status)
    snapshot = run_all(tracker, worker)

    assert snapshot.anchor is None
    assert tracker.visualizer.markers == {}
    assert tracker.last_result is None


def test_completion_applies_again_once_tracking_resumes():
    tracker, worker = make_tracker(FakeDetector([hand_at(0.5, 0.5)]))
    tracker.context.session.update(SessionStatus.TRACKING)
    tracker.context.session.update(SessionStatus.INTERRUPTED)
    assert not tracker.on_frame(make_frame(), now=0.0)

    tracker.context.session.update(SessionStatus.TRACKING)
    assert tracker.on_frame(make_frame(), now=0.0)
    assert run_all(tracker, worker).anchor is not None

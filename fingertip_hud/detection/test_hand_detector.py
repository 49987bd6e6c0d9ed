"""
Tests for the MediaPipe detector adapter, using a stand-in for the MediaPipe graph.
"""

from types import SimpleNamespace

import numpy as np
import pytest

from fingertip_hud.detection.hand_detector import MediaPipeHandDetector, upright_image
from fingertip_hud.detection.hand_observation import JointName
from fingertip_hud.errors import RecoverableFrameError
from fingertip_hud.geometry.transforms import ImageOrientation


def landmarks(x, y):
    return SimpleNamespace(landmark=[SimpleNamespace(x=x, y=y, z=0.0) for _ in range(21)])


def handedness(label, score):
    return SimpleNamespace(classification=[SimpleNamespace(label=label, score=score)])


class FakeHands:
    def __init__(self, results=None, error=None):
        self.results = results
        self.error = error
        self.shapes = []
        self.closed = False

    def process(self, rgb):
        self.shapes.append(rgb.shape)
        if self.error is not None:
            raise self.error
        return self.results

    def close(self):
        self.closed = True


def test_landmarks_become_detector_space_joints():
    results = SimpleNamespace(
        multi_hand_landmarks=[landmarks(0.25, 0.1)],
        multi_handedness=[handedness("Right", 0.87)],
    )
    detector = MediaPipeHandDetector(hands=FakeHands(results), processing_scale=1.0)
    observations = detector.detect(np.zeros((48, 64, 3), dtype=np.uint8), ImageOrientation.UP)

    assert len(observations) == 1
    observation = observations[0]
    assert observation.handedness == "Right"
    assert len(observation) == 21
    thumb = observation.joint(JointName.THUMB_IP)
    assert thumb.location.coords == pytest.approx((0.25, 0.9))
    assert thumb.confidence == pytest.approx(0.87)


def test_no_hands():
    results = SimpleNamespace(multi_hand_landmarks=None, multi_handedness=None)
    detector = MediaPipeHandDetector(hands=FakeHands(results))
    assert detector.detect(np.zeros((48, 64, 3), dtype=np.uint8), ImageOrientation.UP) == []


def test_missing_handedness_defaults_to_full_confidence():
    results = SimpleNamespace(multi_hand_landmarks=[landmarks(0.5, 0.5)], multi_handedness=[])
    detector = MediaPipeHandDetector(hands=FakeHands(results), processing_scale=1.0)
    observation = detector.detect(np.zeros((10, 10, 3), dtype=np.uint8), ImageOrientation.UP)[0]
    assert observation.handedness is None
    assert observation.confidence_of(JointName.WRIST) == 1.0


def test_hand_count_is_capped():
    results = SimpleNamespace(
        multi_hand_landmarks=[landmarks(0.1, 0.1), landmarks(0.5, 0.5), landmarks(0.9, 0.9)],
        multi_handedness=[handedness("Left", 0.9), handedness("Right", 0.8), handedness("Left", 0.7)],
    )
    detector = MediaPipeHandDetector(hands=FakeHands(results), max_num_hands=2)
    assert len(detector.detect(np.zeros((10, 10, 3), dtype=np.uint8), ImageOrientation.UP)) == 2


def test_image_is_rotated_upright_before_detection():
    hands = FakeHands(SimpleNamespace(multi_hand_landmarks=None, multi_handedness=None))
    detector = MediaPipeHandDetector(hands=hands, processing_scale=1.0)
    detector.detect(np.zeros((48, 64, 3), dtype=np.uint8), ImageOrientation.RIGHT)
    assert hands.shapes == [(64, 48, 3)]


def test_upright_image_keeps_mirrored_images():
    image = np.zeros((4, 6, 3), dtype=np.uint8)
    assert upright_image(image, ImageOrientation.UP_MIRRORED) is image
    assert upright_image(image, ImageOrientation.DOWN).shape == (4, 6, 3)
    assert upright_image(image, ImageOrientation.LEFT).shape == (6, 4, 3)


def test_processing_errors_are_recoverable():
    detector = MediaPipeHandDetector(hands=FakeHands(error=RuntimeError("graph failure")))
    with pytest.raises(RecoverableFrameError):
        detector.detect(np.zeros((10, 10, 3), dtype=np.uint8), ImageOrientation.UP)


def test_malformed_image_is_recoverable():
    detector = MediaPipeHandDetector(hands=FakeHands())
    with pytest.raises(RecoverableFrameError):
        detector.detect(np.zeros((10, 10), dtype=np.uint8), ImageOrientation.UP)
    with pytest.raises(RecoverableFrameError):
        detector.detect(None, ImageOrientation.UP)


def test_close_releases_graph():
    hands = FakeHands()
    MediaPipeHandDetector(hands=hands).close()
    assert hands.closed

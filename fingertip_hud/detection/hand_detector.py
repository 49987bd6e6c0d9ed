"""
MediaPipe-based hand detector.

Produces `HandObservation`s in detector space: coordinates normalized to the
upright image with a bottom-left origin. The raw sensor image is rotated
upright according to its orientation before detection, so the landmarks can
be mapped back with `detector_to_image`.
"""

import logging

import cv2 as cv
import mediapipe as mp

from fingertip_hud.config import MediaPipeConfig, TrackingConfig
from fingertip_hud.detection.hand_observation import HandObservation, Joint, JointName
from fingertip_hud.errors import RecoverableFrameError
from fingertip_hud.geometry.transforms import ImageOrientation
from fingertip_hud.utils.coords import NormalizedPoint

logger = logging.getLogger(__name__)

# cv.rotate flag that turns the raw sensor image upright
_UPRIGHT_ROTATION = {
    ImageOrientation.UP: None,
    ImageOrientation.DOWN: cv.ROTATE_180,
    ImageOrientation.RIGHT: cv.ROTATE_90_CLOCKWISE,
    ImageOrientation.LEFT: cv.ROTATE_90_COUNTERCLOCKWISE,
}


def upright_image(image, orientation):
    """
    Rotate a raw sensor image so that it is upright for the detector.
    Mirrored orientations are passed through unchanged.

    Args:
        image (numpy.ndarray): Raw BGR image
        orientation (ImageOrientation): Orientation of the raw image

    Returns:
        numpy.ndarray: Upright image (may be the input itself)
    """
    flag = _UPRIGHT_ROTATION.get(orientation)
    if flag is None:
        return image
    return cv.rotate(image, flag)


class MediaPipeHandDetector:
    """
    Hand pose detector backed by MediaPipe Hands.

    Each landmark becomes a `Joint` whose confidence is the hand's detection
    score, since MediaPipe Hands does not report per-landmark confidence.
    """

    def __init__(self, hands=None, max_num_hands=None, processing_scale=None):
        """
        Initialize the detector.

        Args:
            hands: Object with a MediaPipe-compatible `process(rgb_image)` method.
                   If None, a `mediapipe.solutions.hands.Hands` instance is created.
            max_num_hands (int): Maximum hands to detect. If None, uses config default.
            processing_scale (float): Scale factor applied before detection. If None, uses config default.
        """
        self.max_num_hands = max_num_hands if max_num_hands is not None else TrackingConfig.MAX_NUM_HANDS
        self.processing_scale = (
            processing_scale if processing_scale is not None else MediaPipeConfig.PROCESSING_SCALE
        )

        if hands is None:
            hands = mp.solutions.hands.Hands(
                static_image_mode=False,
                model_complexity=MediaPipeConfig.MODEL_COMPLEXITY,
                max_num_hands=self.max_num_hands,
                min_detection_confidence=MediaPipeConfig.MIN_DETECTION_CONFIDENCE,
                min_tracking_confidence=MediaPipeConfig.MIN_TRACKING_CONFIDENCE,
            )
        self.hands = hands

        logger.info(
            f"Initialized MediaPipe hand detector (max_num_hands={self.max_num_hands}, "
            f"scale={self.processing_scale})"
        )

    def detect(self, color_image, orientation):
        """
        Detect hands in a raw sensor image.

        Args:
            color_image (numpy.ndarray): HxWx3 BGR image in raw sensor orientation
            orientation (ImageOrientation): Orientation of the raw image

        Returns:
            list[HandObservation]: Zero or more observations in detector space

        Raises:
            RecoverableFrameError: If the image is unusable or MediaPipe fails on it
        """
        if color_image is None or color_image.ndim != 3 or color_image.size == 0:
            raise RecoverableFrameError("empty or malformed color image")

        try:
            image = upright_image(color_image, orientation)
            if self.processing_scale < 1.0:
                image = cv.resize(
                    image, (0, 0),
                    fx=self.processing_scale, fy=self.processing_scale,
                    interpolation=cv.INTER_LINEAR,
                )
            rgb = cv.cvtColor(image, cv.COLOR_BGR2RGB)
            results = self.hands.process(rgb)
        except Exception as e:
            raise RecoverableFrameError(f"hand detection failed: {e}") from e

        hand_landmarks = getattr(results, "multi_hand_landmarks", None) or []
        handedness = getattr(results, "multi_handedness", None) or []

        observations = []
        for h, landmarks in enumerate(hand_landmarks[: self.max_num_hands]):
            label, score = self._handedness(handedness, h)
            joints = []
            for i, lm in enumerate(landmarks.landmark[: len(JointName)]):
                # MediaPipe is top-left origin; detector space is bottom-left
                joints.append(
                    Joint(JointName.from_index(i), NormalizedPoint(lm.x, 1.0 - lm.y), score)
                )
            observations.append(HandObservation.from_joints(joints, label))

        return observations

    @staticmethod
    def _handedness(handedness, index):
        """
        Label and score of the hand at `index`, (None, 1.0) when not reported.
        """
        if index >= len(handedness):
            return None, 1.0
        classification = handedness[index].classification[0]
        return classification.label, float(classification.score)

    def close(self):
        """Release the MediaPipe graph."""
        close = getattr(self.hands, "close", None)
        if close is not None:
            close()

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from fingertip_hud.config import TrackingConfig
from fingertip_hud.detection.hand_observation import HandObservation, Joint, JointName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """
    The hand chosen for this frame and its designated joint.
    """

    observation: HandObservation
    joint: Joint
    index: int
    " Position of the observation in the detector output. "

    @property
    def score(self) -> float:
        return self.joint.confidence


def select_candidate(
    observations: Sequence[HandObservation],
    joint: Union[JointName, str, None] = None,
    min_confidence: Optional[float] = None,
) -> Optional[Candidate]:
    """
    Pick the observation whose designated joint is the most confident.

    Joints must be strictly above `min_confidence` to be considered. Ties keep the
    observation seen first, so the result is deterministic for a given input order.

    Args:
        observations: Hands detected in the frame (may be empty)
        joint: Designated joint. If None, uses config default.
        min_confidence (float): Confidence gate. If None, uses config default.

    Returns:
        Candidate: The selected hand, or None if no hand passes the gate
    """
    joint_name = JointName(joint if joint is not None else TrackingConfig.ANCHOR_JOINT)
    threshold = min_confidence if min_confidence is not None else TrackingConfig.MIN_JOINT_CONFIDENCE

    best: Optional[Candidate] = None
    for i, observation in enumerate(observations):
        candidate_joint = observation.joint(joint_name)
        if candidate_joint is None or candidate_joint.confidence <= threshold:
            continue
        if best is None or candidate_joint.confidence > best.score:
            best = Candidate(observation, candidate_joint, i)

    if best is None:
        logger.debug(f"No candidate among {len(observations)} observation(s) for {joint_name}")
    return best


class CandidateSelector:
    """
    Selects the tracked hand per frame using a fixed joint and confidence gate.
    """

    def __init__(self, joint=None, min_confidence=None):
        """
        Initialize the selector.

        Args:
            joint (JointName | str): Designated joint. If None, uses config default.
            min_confidence (float): Confidence gate. If None, uses config default.
        """
        self.joint = JointName(joint if joint is not None else TrackingConfig.ANCHOR_JOINT)
        self.min_confidence = (
            min_confidence if min_confidence is not None else TrackingConfig.MIN_JOINT_CONFIDENCE
        )

    def select(self, observations):
        return select_candidate(observations, self.joint, self.min_confidence)

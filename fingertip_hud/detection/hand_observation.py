from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Protocol, Tuple

import numpy as np
import numpy.typing as npt

from fingertip_hud.geometry.transforms import ImageOrientation
from fingertip_hud.utils.coords import NormalizedPoint, clamp01


class JointName(Enum):
    """
    Named hand joints, in MediaPipe landmark index order.
    """

    WRIST = "wrist"
    THUMB_CMC = "thumb_cmc"
    THUMB_MCP = "thumb_mcp"
    THUMB_IP = "thumb_ip"
    THUMB_TIP = "thumb_tip"
    INDEX_FINGER_MCP = "index_finger_mcp"
    INDEX_FINGER_PIP = "index_finger_pip"
    INDEX_FINGER_DIP = "index_finger_dip"
    INDEX_FINGER_TIP = "index_finger_tip"
    MIDDLE_FINGER_MCP = "middle_finger_mcp"
    MIDDLE_FINGER_PIP = "middle_finger_pip"
    MIDDLE_FINGER_DIP = "middle_finger_dip"
    MIDDLE_FINGER_TIP = "middle_finger_tip"
    RING_FINGER_MCP = "ring_finger_mcp"
    RING_FINGER_PIP = "ring_finger_pip"
    RING_FINGER_DIP = "ring_finger_dip"
    RING_FINGER_TIP = "ring_finger_tip"
    PINKY_MCP = "pinky_mcp"
    PINKY_PIP = "pinky_pip"
    PINKY_DIP = "pinky_dip"
    PINKY_TIP = "pinky_tip"

    @classmethod
    def from_index(cls, index: int) -> "JointName":
        """
        Joint for a MediaPipe landmark index (0-20).
        """
        return JOINT_ORDER[index]

    @property
    def index(self) -> int:
        return JOINT_ORDER.index(self)

    def __str__(self) -> str:
        return self.value


JOINT_ORDER: Tuple[JointName, ...] = tuple(JointName)
"""Joints in landmark index order."""


@dataclass(frozen=True)
class Joint:
    """
    A single joint location in detector space (normalized, bottom-left origin).
    Location and confidence are clamped to [0, 1] on construction.
    """

    name: JointName
    location: NormalizedPoint
    confidence: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "location", self.location.clamped())
        object.__setattr__(self, "confidence", clamp01(self.confidence))


@dataclass(frozen=True)
class HandObservation:
    """
    All joints detected for one hand in one frame.
    """

    joints: Dict[JointName, Joint] = field(default_factory=dict)
    handedness: Optional[str] = None
    " 'Left' / 'Right' as reported by the detector, if any. "

    @classmethod
    def from_joints(cls, joints: List[Joint], handedness: Optional[str] = None) -> "HandObservation":
        return cls({joint.name: joint for joint in joints}, handedness)

    def joint(self, name: JointName) -> Optional[Joint]:
        return self.joints.get(name)

    def confidence_of(self, name: JointName) -> float:
        """
        Confidence of a joint, 0 if the joint was not detected.
        """
        joint = self.joints.get(name)
        return joint.confidence if joint is not None else 0.0

    def joints_above(self, min_confidence: float) -> List[Joint]:
        """
        Joints whose confidence is strictly above `min_confidence`, in landmark order.
        """
        return [
            self.joints[name]
            for name in JOINT_ORDER
            if name in self.joints and self.joints[name].confidence > min_confidence
        ]

    def __iter__(self) -> Iterator[Joint]:
        return iter(self.joints.values())

    def __len__(self) -> int:
        return len(self.joints)


class HandDetector(Protocol):
    """
    External hand pose detector.
    Implementations raise `RecoverableFrameError` when a single frame cannot be processed.
    """

    def detect(
        self, color_image: npt.NDArray[np.uint8], orientation: ImageOrientation
    ) -> List[HandObservation]: ...

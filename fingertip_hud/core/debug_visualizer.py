"""
Optional debug markers for every detected hand joint.

Markers are scaled by sampled depth so closer joints draw larger. When depth is
missing the reference depth is used, so a marker is never hidden for lack of depth.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fingertip_hud.config import DebugConfig
from fingertip_hud.detection.hand_observation import JointName
from fingertip_hud.utils.coords import WorldPoint

logger = logging.getLogger(__name__)


def marker_scale(depth, reference=None, min_depth=None, min_scale=None, max_scale=None):
    """
    Scale factor for a joint marker at a given depth.

    Args:
        depth (float): Sampled line-of-sight depth in meters, or None
        reference (float): Depth at which the raw scale is 1

    Returns:
        float: reference / max(min_depth, depth), clamped to [min_scale, max_scale]
    """
    reference = reference if reference is not None else DebugConfig.REFERENCE_DEPTH
    min_depth = min_depth if min_depth is not None else DebugConfig.MIN_DEPTH
    min_scale = min_scale if min_scale is not None else DebugConfig.MIN_SCALE
    max_scale = max_scale if max_scale is not None else DebugConfig.MAX_SCALE

    if depth is None:
        depth = reference
    raw = reference / max(min_depth, depth)
    return min(max(raw, min_scale), max_scale)


@dataclass(frozen=True)
class JointMarker:
    position: WorldPoint
    scale: float
    depth: Optional[float] = None


class DebugJointVisualizer:
    """
    Keeps one marker per visible joint of the tracked hand.
    Like `HudState`, it is only updated from the render thread.
    """

    def __init__(self, enabled=None):
        self.enabled = enabled if enabled is not None else DebugConfig.VISUALIZE_HAND_JOINTS
        self.markers: Dict[JointName, JointMarker] = {}

    def update(self, projections):
        """
        Replace the markers with the latest joint projections.
        Joints absent from `projections` are removed.

        Args:
            projections (dict): JointName -> Projection
        """
        if not self.enabled:
            return

        markers = {}
        for name, projection in projections.items():
            if projection is None or not projection.point.valid:
                continue
            markers[name] = JointMarker(
                projection.point,
                marker_scale(projection.sampled_depth),
                projection.sampled_depth,
            )

        removed = set(self.markers) - set(markers)
        if removed:
            logger.debug(f"Removing {len(removed)} debug markers")
        self.markers = markers

    def clear(self):
        self.markers = {}

"""
Render-facing HUD state.

`HudState` owns the anchor position and the dot offset inside the HUD plane. It is
single-writer: only the thread that created it (the render thread) may mutate it.
Renderers read immutable `HudSnapshot`s.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from fingertip_hud.config import HudConfig
from fingertip_hud.utils.coords import WorldPoint, clamp01

logger = logging.getLogger(__name__)

IDENTITY_ROTATION = (0.0, 0.0, 0.0, 1.0)
"""Quaternion (x, y, z, w) used for the anchor orientation."""


def local_plane_offset(u, v, plane_width=None, plane_height=None):
    """
    Map a normalized touch position to an offset inside the HUD plane.

    Args:
        u (float): Horizontal position, clamped to [0, 1]
        v (float): Vertical position, clamped to [0, 1]
        plane_width (float): Plane width in meters. If None, uses config default.
        plane_height (float): Plane height in meters. If None, uses config default.

    Returns:
        tuple: (x, y) in meters, centred on the plane
    """
    plane_width = plane_width if plane_width is not None else HudConfig.PLANE_WIDTH
    plane_height = plane_height if plane_height is not None else HudConfig.PLANE_HEIGHT
    return (clamp01(u) - 0.5) * plane_width, (clamp01(v) - 0.5) * plane_height


@dataclass(frozen=True)
class HudSnapshot:
    """
    What an external renderer needs to draw the HUD for one tick.
    """

    anchor: Optional[WorldPoint]
    anchor_rotation: Tuple[float, float, float, float]
    plane_offset: Tuple[float, float, float]
    " Plane position relative to the anchor. "
    plane_size: Tuple[float, float]
    billboard: bool
    dot_offset: Tuple[float, float, float]
    " Dot position relative to the plane. "
    version: int

    @property
    def plane_position(self) -> Optional[Tuple[float, float, float]]:
        if self.anchor is None:
            return None
        return tuple(a + o for a, o in zip(self.anchor, self.plane_offset))


class HudState:
    """
    Anchor transform plus the touch-driven dot, mutated only on the render thread.

    Every accepted change bumps `version`, so renderers can skip redraws when nothing
    moved. Repeating the same touch sample does not change the version.
    """

    def __init__(self, plane_width=None, plane_height=None, vertical_offset=None, dot_lift=None):
        self.plane_width = plane_width if plane_width is not None else HudConfig.PLANE_WIDTH
        self.plane_height = plane_height if plane_height is not None else HudConfig.PLANE_HEIGHT
        self.vertical_offset = (
            vertical_offset if vertical_offset is not None else HudConfig.VERTICAL_OFFSET
        )
        self.dot_lift = dot_lift if dot_lift is not None else HudConfig.DOT_LIFT
        self.billboard = HudConfig.BILLBOARD

        self.owner_thread = threading.get_ident()
        self.anchor = None
        self.dot_local = (0.0, 0.0)
        self.version = 0

    def _check_owner(self, operation):
        if threading.get_ident() != self.owner_thread:
            logger.warning(f"HudState.{operation}() called off the render thread, ignoring")
            return False
        return True

    def set_anchor(self, point):
        """
        Move the anchor to a world point.

        Args:
            point (WorldPoint): New anchor position

        Returns:
            bool: True if the anchor changed
        """
        if not self._check_owner("set_anchor"):
            return False
        if point is None or not point.valid:
            logger.debug("Ignoring invalid anchor position")
            return False
        if self.anchor == point:
            return False

        self.anchor = point
        self.version += 1
        return True

    def apply_touch(self, sample):
        """
        Move the dot to the position of a touch sample.

        Args:
            sample (TouchSample): Normalized touch position (clamped)

        Returns:
            bool: True if the dot moved
        """
        if not self._check_owner("apply_touch"):
            return False
        if sample is None:
            return False

        offset = local_plane_offset(sample.u, sample.v, self.plane_width, self.plane_height)
        if offset == self.dot_local:
            return False

        self.dot_local = offset
        self.version += 1
        return True

    def clear_anchor(self):
        """Forget the anchor, hiding the HUD until the next detection."""
        if not self._check_owner("clear_anchor"):
            return
        if self.anchor is not None:
            self.anchor = None
            self.version += 1

    def snapshot(self):
        x, y = self.dot_local
        return HudSnapshot(
            anchor=self.anchor,
            anchor_rotation=IDENTITY_ROTATION,
            plane_offset=(0.0, self.vertical_offset, 0.0),
            plane_size=(self.plane_width, self.plane_height),
            billboard=self.billboard,
            dot_offset=(x, y, self.dot_lift),
            version=self.version,
        )

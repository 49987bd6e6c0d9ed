"""
Depth lookup at a screen point.

The query point is mapped back into the depth map through the inverse display
transform, then the four neighbouring depth samples are bilinearly interpolated.
When a confidence map is available each row pair is first blended by confidence,
so that a low-confidence neighbour pulls the result less.
"""

import logging
import math
from contextlib import ExitStack
from typing import Optional

import numpy as np

from fingertip_hud.config import DepthConfig
from fingertip_hud.depth.buffers import ConfidenceBuffer, DepthBuffer
from fingertip_hud.errors import InvalidGeometryError
from fingertip_hud.geometry.transforms import DisplayTransform, screen_to_display
from fingertip_hud.utils.coords import ScreenPoint, ViewportSize, clamp01

logger = logging.getLogger(__name__)


def _clamp_index(value: int, upper: int) -> int:
    return max(0, min(upper - 1, value))


def sample_depth(
    screen_point: ScreenPoint,
    depth: Optional[DepthBuffer],
    confidence: Optional[ConfidenceBuffer],
    viewport_size: ViewportSize,
    display_transform: DisplayTransform,
    confidence_floor: Optional[float] = None,
) -> Optional[float]:
    """
    Sample the depth map (meters) at a screen point.

    Args:
        screen_point (ScreenPoint): Query point in viewport pixels
        depth (DepthBuffer): Depth map, or None when the frame has no depth
        confidence (ConfidenceBuffer): Optional confidence map aligned with the depth map
        viewport_size (ViewportSize): Viewport the screen point refers to
        display_transform (DisplayTransform): Image-normalized to display-normalized transform
        confidence_floor (float): Minimum normalized confidence weight. If None, uses config default.

    Returns:
        float: Interpolated depth in meters, or None if there is no depth buffer, the
               query cannot be mapped, or the result is non-finite or not positive
    """
    if depth is None or depth.width == 0 or depth.height == 0:
        return None

    floor = confidence_floor if confidence_floor is not None else DepthConfig.CONFIDENCE_FLOOR

    try:
        view_norm = screen_to_display(screen_point, viewport_size)
        image_norm = display_transform.inverted().apply(view_norm)
    except InvalidGeometryError as e:
        logger.debug(f"Depth query skipped: {e}")
        return None

    if not image_norm.is_finite:
        return None
    u = clamp01(image_norm.u)
    v = clamp01(image_norm.v)

    w, h = depth.size
    fx = (w - 1) * u
    fy = (h - 1) * v

    x0 = _clamp_index(int(math.floor(fx)), w)
    y0 = _clamp_index(int(math.floor(fy)), h)
    x1 = _clamp_index(x0 + 1, w)
    y1 = _clamp_index(y0 + 1, h)
    tx = fx - x0
    ty = fy - y0

    with ExitStack() as stack:
        depth_map = stack.enter_context(depth.locked())
        d00 = float(depth_map[y0, x0])
        d10 = float(depth_map[y0, x1])
        d01 = float(depth_map[y1, x0])
        d11 = float(depth_map[y1, x1])

        if confidence is not None and confidence.width > 0 and confidence.height > 0:
            conf_map = stack.enter_context(confidence.locked())
            cw, ch = confidence.size

            def conf_at(x: int, y: int) -> float:
                raw = float(conf_map[_clamp_index(y, ch), _clamp_index(x, cw)])
                return max(floor, raw / DepthConfig.CONFIDENCE_MAX)

            w00, w10 = conf_at(x0, y0), conf_at(x1, y0)
            w01, w11 = conf_at(x0, y1), conf_at(x1, y1)

            if w00 + w10 > 0:
                d00 = d00 * (w00 / (w00 + w10)) + d10 * (w10 / (w00 + w10))
            if w01 + w11 > 0:
                d01 = d01 * (w01 / (w01 + w11)) + d11 * (w11 / (w01 + w11))

    d0 = d00 + (d10 - d00) * tx
    d1 = d01 + (d11 - d01) * tx
    d = d0 + (d1 - d0) * ty

    if not np.isfinite(d) or d <= 0:
        return None
    return float(d)


class DepthSampler:
    """
    Samples per-frame depth at screen points.

    Thin stateful wrapper around `sample_depth` that pulls the buffers, viewport and
    display transform from a `Frame`.
    """

    def __init__(self, confidence_floor=None):
        """
        Initialize the sampler.

        Args:
            confidence_floor (float): Minimum confidence weight. If None, uses config default.
        """
        self.confidence_floor = (
            confidence_floor if confidence_floor is not None else DepthConfig.CONFIDENCE_FLOOR
        )

    def sample(self, screen_point, frame):
        """
        Sample the depth of `frame` at `screen_point`.

        Args:
            screen_point (ScreenPoint): Query point in viewport pixels
            frame (Frame): Frame providing depth, confidence and display transform

        Returns:
            float: Depth in meters, or None when no valid depth is available
        """
        if frame.depth is None:
            return None
        try:
            transform = frame.display_transform()
        except InvalidGeometryError as e:
            logger.debug(f"No display transform for depth sampling: {e}")
            return None

        return sample_depth(
            screen_point,
            frame.depth,
            frame.confidence,
            frame.viewport_size,
            transform,
            confidence_floor=self.confidence_floor,
        )

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import numpy.typing as npt

from fingertip_hud.depth.buffers import ConfidenceBuffer, DepthBuffer
from fingertip_hud.geometry.transforms import (
    DisplayTransform,
    ImageOrientation,
    InterfaceOrientation,
    image_orientation_for,
)
from fingertip_hud.utils.coords import ViewportSize


@dataclass(frozen=True, eq=False)
class Frame:
    """
    One capture tick, owned by the capture pipeline and passed by reference into the core.
    Frames are never modified after construction.
    """

    color_image: npt.NDArray[np.uint8]
    "HxWx3 BGR image in raw sensor orientation."
    camera_transform: npt.NDArray[np.float64]
    "4x4 camera-to-world transform. The camera looks down its local -Z axis, +Y up."
    camera_intrinsics: npt.NDArray[np.float64]
    "3x3 pinhole intrinsics (fx, fy, cx, cy) in color image pixels."
    display_orientation: InterfaceOrientation
    viewport_size: ViewportSize
    timestamp: float
    depth: Optional[DepthBuffer] = None
    confidence: Optional[ConfidenceBuffer] = None

    @property
    def image_size(self) -> Tuple[int, int]:
        """
        (width, height) of the color image in pixels.
        """
        return int(self.color_image.shape[1]), int(self.color_image.shape[0])

    @property
    def image_orientation(self) -> ImageOrientation:
        return image_orientation_for(self.display_orientation)

    @property
    def camera_position(self) -> npt.NDArray[np.float64]:
        return np.asarray(self.camera_transform, dtype=float)[:3, 3]

    def display_transform(self) -> DisplayTransform:
        """
        Display transform for this frame's orientation and viewport.
        Raises InvalidGeometryError for an empty viewport or image.
        """
        return DisplayTransform.for_viewport(
            self.display_orientation, self.viewport_size, self.image_size
        )


def pinhole_intrinsics(image_size: Tuple[int, int], horizontal_fov_deg: float) -> npt.NDArray[np.float64]:
    """
    Estimate pinhole intrinsics for an image of size (width, height) with square pixels
    and the principal point at the image centre.
    """
    width, height = image_size
    focal = (width / 2.0) / np.tan(np.radians(horizontal_fov_deg) / 2.0)
    return np.array([
        [focal, 0.0, width / 2.0],
        [0.0, focal, height / 2.0],
        [0.0, 0.0, 1.0],
    ])

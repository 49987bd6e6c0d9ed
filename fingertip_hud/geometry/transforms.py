"""
Coordinate conversions between the spaces a hand joint travels through.

    detector space  (normalized, bottom-left origin, upright image)
      -> image space   (normalized, top-left origin, raw sensor image)
      -> display space (normalized, top-left origin, viewport)
      -> screen space  (viewport pixels)

All functions are pure. Normalized inputs are clamped to [0, 1] before use.
"""

import logging
from enum import Enum, IntEnum
from typing import Tuple

import numpy as np
import numpy.typing as npt

from fingertip_hud.errors import InvalidGeometryError
from fingertip_hud.utils.coords import NormalizedPoint, ScreenPoint, ViewportSize

logger = logging.getLogger(__name__)


class InterfaceOrientation(Enum):
    """
    Orientation of the device user interface.
    """

    PORTRAIT = "portrait"
    PORTRAIT_UPSIDE_DOWN = "portrait_upside_down"
    LANDSCAPE_LEFT = "landscape_left"
    LANDSCAPE_RIGHT = "landscape_right"
    UNKNOWN = "unknown"

    @property
    def is_portrait(self) -> bool:
        return self in (InterfaceOrientation.PORTRAIT, InterfaceOrientation.PORTRAIT_UPSIDE_DOWN)

    def __str__(self) -> str:
        return self.value


class ImageOrientation(IntEnum):
    """
    Orientation of the raw sensor image relative to the upright scene, using the EXIF values.
    """

    UP = 1
    UP_MIRRORED = 2
    DOWN = 3
    DOWN_MIRRORED = 4
    LEFT_MIRRORED = 5
    RIGHT = 6
    RIGHT_MIRRORED = 7
    LEFT = 8

    @property
    def is_mirrored(self) -> bool:
        return self in MIRRORED_ORIENTATIONS

    def __str__(self) -> str:
        return self.name.lower()


MIRRORED_ORIENTATIONS = frozenset({
    ImageOrientation.UP_MIRRORED,
    ImageOrientation.DOWN_MIRRORED,
    ImageOrientation.LEFT_MIRRORED,
    ImageOrientation.RIGHT_MIRRORED,
})

_IMAGE_ORIENTATION_FOR_INTERFACE = {
    InterfaceOrientation.PORTRAIT: ImageOrientation.RIGHT,
    InterfaceOrientation.PORTRAIT_UPSIDE_DOWN: ImageOrientation.LEFT,
    InterfaceOrientation.LANDSCAPE_LEFT: ImageOrientation.DOWN,
    InterfaceOrientation.LANDSCAPE_RIGHT: ImageOrientation.UP,
}


def image_orientation_for(orientation: InterfaceOrientation) -> ImageOrientation:
    """
    Return the orientation the raw sensor image has when the interface is in `orientation`.
    The sensor is mounted landscape-right, so an unknown interface orientation is treated as portrait.
    """
    return _IMAGE_ORIENTATION_FOR_INTERFACE.get(orientation, ImageOrientation.RIGHT)


# ==================== Detector <-> Image ====================

def detector_to_image(point: NormalizedPoint, orientation: ImageOrientation) -> NormalizedPoint:
    """
    Map a detector-space point (bottom-left origin, upright image) to image space
    (top-left origin, raw sensor image).

    Mirrored orientations are passed through unchanged.
    """
    x, y = point.clamped()

    if orientation == ImageOrientation.UP:
        return NormalizedPoint(x, 1.0 - y)
    if orientation == ImageOrientation.DOWN:
        return NormalizedPoint(1.0 - x, y)
    if orientation == ImageOrientation.RIGHT:
        return NormalizedPoint(1.0 - y, 1.0 - x)
    if orientation == ImageOrientation.LEFT:
        return NormalizedPoint(y, x)
    return NormalizedPoint(x, y)


def image_to_detector(point: NormalizedPoint, orientation: ImageOrientation) -> NormalizedPoint:
    """
    Inverse of `detector_to_image` for the non-mirrored orientations.
    """
    x, y = point.clamped()

    if orientation == ImageOrientation.UP:
        return NormalizedPoint(x, 1.0 - y)
    if orientation == ImageOrientation.DOWN:
        return NormalizedPoint(1.0 - x, y)
    if orientation == ImageOrientation.RIGHT:
        return NormalizedPoint(1.0 - y, 1.0 - x)
    if orientation == ImageOrientation.LEFT:
        return NormalizedPoint(y, x)
    return NormalizedPoint(x, y)


# ==================== Image <-> Display ====================

# Affine rotation (2x3, column-vector convention) from image-normalized to
# interface-oriented normalized coordinates.
_ROTATIONS = {
    InterfaceOrientation.LANDSCAPE_RIGHT: ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    InterfaceOrientation.PORTRAIT: ((0.0, -1.0, 1.0), (1.0, 0.0, 0.0)),
    InterfaceOrientation.PORTRAIT_UPSIDE_DOWN: ((0.0, 1.0, 0.0), (-1.0, 0.0, 1.0)),
    InterfaceOrientation.LANDSCAPE_LEFT: ((-1.0, 0.0, 1.0), (0.0, -1.0, 1.0)),
}


class DisplayTransform:
    """
    Affine mapping from image-normalized coordinates to display-normalized coordinates.

    The image is first rotated to match the interface orientation and then scaled to
    fill the viewport (aspect fill, centered), so parts of the image may fall outside
    [0, 1] in display space.
    """

    def __init__(self, matrix: npt.ArrayLike) -> None:
        matrix = np.asarray(matrix, dtype=float)
        if matrix.shape != (3, 3):
            raise InvalidGeometryError(f"display transform must be 3x3, got {matrix.shape}")
        self.matrix = matrix

    @classmethod
    def identity(cls) -> "DisplayTransform":
        return cls(np.eye(3))

    @classmethod
    def for_viewport(
        cls,
        orientation: InterfaceOrientation,
        viewport_size: ViewportSize,
        image_size: Tuple[int, int],
    ) -> "DisplayTransform":
        """
        Build the transform for an interface orientation, a viewport size and the
        (width, height) of the captured image in its raw sensor orientation.

        Raises:
            InvalidGeometryError: If the viewport or the image size is empty
        """
        image_w, image_h = image_size
        if viewport_size.is_empty or image_w <= 0 or image_h <= 0:
            raise InvalidGeometryError(
                f"cannot build display transform for viewport {tuple(viewport_size)} "
                f"and image {image_size}"
            )

        if orientation not in _ROTATIONS:
            orientation = InterfaceOrientation.PORTRAIT

        rotation = np.vstack([np.array(_ROTATIONS[orientation]), [0.0, 0.0, 1.0]])

        rotated_w, rotated_h = (image_h, image_w) if orientation.is_portrait else (image_w, image_h)
        scale = max(viewport_size.width / rotated_w, viewport_size.height / rotated_h)
        extent_x = rotated_w * scale / viewport_size.width
        extent_y = rotated_h * scale / viewport_size.height

        fill = np.array([
            [extent_x, 0.0, 0.5 * (1.0 - extent_x)],
            [0.0, extent_y, 0.5 * (1.0 - extent_y)],
            [0.0, 0.0, 1.0],
        ])
        return cls(fill @ rotation)

    def apply(self, point: NormalizedPoint) -> NormalizedPoint:
        """
        Apply the transform. The input is not clamped: display and image space overlap
        only partially, so the result of the inverse may legitimately leave [0, 1].
        """
        out = self.matrix @ np.array([point.u, point.v, 1.0])
        return NormalizedPoint(float(out[0]), float(out[1]))

    def inverted(self) -> "DisplayTransform":
        """
        Raises:
            InvalidGeometryError: If the transform is singular or non-finite
        """
        if not np.all(np.isfinite(self.matrix)):
            raise InvalidGeometryError("display transform is not finite")
        det = float(np.linalg.det(self.matrix[:2, :2]))
        if abs(det) < 1e-12:
            raise InvalidGeometryError("display transform is singular")
        return DisplayTransform(np.linalg.inv(self.matrix))

    def __repr__(self) -> str:
        return f"DisplayTransform({self.matrix[:2].round(4).tolist()})"


def image_to_display(point: NormalizedPoint, transform: DisplayTransform) -> NormalizedPoint:
    """
    Map a clamped image-space point to display-normalized coordinates.
    """
    return transform.apply(point.clamped())


def display_to_image(point: NormalizedPoint, transform: DisplayTransform) -> NormalizedPoint:
    """
    Map a display-normalized point back to image-normalized coordinates (unclamped).
    """
    return transform.inverted().apply(point)


# ==================== Display <-> Screen ====================

def display_to_screen(point: NormalizedPoint, viewport_size: ViewportSize) -> ScreenPoint:
    """
    Scale a display-normalized point to viewport pixels.
    """
    if viewport_size.is_empty:
        raise InvalidGeometryError(f"empty viewport {tuple(viewport_size)}")
    return ScreenPoint(point.u * viewport_size.width, point.v * viewport_size.height)


def screen_to_display(point: ScreenPoint, viewport_size: ViewportSize) -> NormalizedPoint:
    """
    Divide a screen point by the viewport size.
    """
    if viewport_size.is_empty:
        raise InvalidGeometryError(f"empty viewport {tuple(viewport_size)}")
    return NormalizedPoint(point.x / viewport_size.width, point.y / viewport_size.height)


def detector_to_screen(
    point: NormalizedPoint,
    orientation: ImageOrientation,
    transform: DisplayTransform,
    viewport_size: ViewportSize,
) -> ScreenPoint:
    """
    Full chain from a detector-space joint location to a viewport pixel.

    Raises:
        InvalidGeometryError: If the viewport is empty or the result is not finite
    """
    image_point = detector_to_image(point, orientation)
    display_point = image_to_display(image_point, transform)
    screen = display_to_screen(display_point, viewport_size)
    if not screen.is_finite:
        raise InvalidGeometryError(f"non-finite screen point for {point}")
    return screen


def image_point_to_pixels(point: NormalizedPoint, image_size: Tuple[int, int]) -> Tuple[float, float]:
    """
    Scale an image-normalized point to pixel coordinates of an image of size (width, height).
    """
    width, height = image_size
    return point.u * width, point.v * height

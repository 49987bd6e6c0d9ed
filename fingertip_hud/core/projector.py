"""
Screen point to world point projection.

A ray is cast from the camera through the screen point. When the depth map has a
valid line-of-sight distance at that point the world point is placed at that
distance along the ray; otherwise a fixed fallback distance is used, which keeps
the HUD position deterministic on devices without depth sensing.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import numpy.typing as npt

from fingertip_hud.config import ProjectionConfig
from fingertip_hud.depth.sampler import DepthSampler
from fingertip_hud.errors import InvalidGeometryError
from fingertip_hud.geometry.transforms import display_to_screen, screen_to_display
from fingertip_hud.utils.coords import NormalizedPoint, ScreenPoint, WorldPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Ray:
    """
    A world-space ray with a unit-length direction.
    """

    origin: npt.NDArray[np.float64]
    direction: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        origin = np.asarray(self.origin, dtype=float).reshape(3)
        direction = np.asarray(self.direction, dtype=float).reshape(3)
        length = float(np.linalg.norm(direction))
        if (
            not np.all(np.isfinite(origin))
            or not np.all(np.isfinite(direction))
            or not np.isfinite(length)
            or length < ProjectionConfig.MIN_RAY_LENGTH
        ):
            raise InvalidGeometryError(f"degenerate ray origin={origin} direction={direction}")
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "direction", direction / length)


def point_along_ray(ray: Ray, distance: float) -> WorldPoint:
    """
    Return origin + direction * distance.
    """
    return WorldPoint.from_array(ray.origin + ray.direction * distance)


def _checked_matrix(matrix, shape, name) -> npt.NDArray[np.float64]:
    matrix = np.asarray(matrix, dtype=float)
    if matrix.shape != shape or not np.all(np.isfinite(matrix)):
        raise InvalidGeometryError(f"invalid {name}: expected finite {shape}, got {matrix.shape}")
    return matrix


def camera_ray(screen_point: ScreenPoint, frame) -> Ray:
    """
    Cast a ray from the camera through a screen point.

    The screen point is mapped back to color image pixels through the inverse display
    transform and unprojected with the inverse intrinsics. The camera looks down -Z
    with +Y up, while image rows grow downwards.

    Raises:
        InvalidGeometryError: If the viewport, intrinsics or camera transform are degenerate
    """
    if not screen_point.is_finite:
        raise InvalidGeometryError(f"non-finite screen point {screen_point}")

    intrinsics = _checked_matrix(frame.camera_intrinsics, (3, 3), "camera intrinsics")
    camera_transform = _checked_matrix(frame.camera_transform, (4, 4), "camera transform")

    rotation = camera_transform[:3, :3]
    if abs(float(np.linalg.det(rotation))) < 1e-9:
        raise InvalidGeometryError("camera transform rotation is singular")
    if abs(float(np.linalg.det(intrinsics))) < 1e-12:
        raise InvalidGeometryError("camera intrinsics are singular")

    view_norm = screen_to_display(screen_point, frame.viewport_size)
    image_norm = frame.display_transform().inverted().apply(view_norm)

    width, height = frame.image_size
    pixel = np.array([image_norm.u * width, image_norm.v * height, 1.0])
    x, y, _ = np.linalg.inv(intrinsics) @ pixel

    direction = rotation @ np.array([x, -y, -1.0])
    return Ray(camera_transform[:3, 3], direction)


def project_world_to_screen(point: WorldPoint, frame) -> Optional[ScreenPoint]:
    """
    Project a world point back onto the screen, for rendering overlays.

    Returns:
        ScreenPoint: Pixel position, or None if the point is invalid, behind the camera,
                     or the frame geometry is degenerate
    """
    if not point.valid:
        return None
    try:
        intrinsics = _checked_matrix(frame.camera_intrinsics, (3, 3), "camera intrinsics")
        camera_transform = _checked_matrix(frame.camera_transform, (4, 4), "camera transform")
        world_to_camera = np.linalg.inv(camera_transform)
        transform = frame.display_transform()
    except (InvalidGeometryError, np.linalg.LinAlgError) as e:
        logger.debug(f"Cannot project {point}: {e}")
        return None

    cam = world_to_camera @ np.append(point.as_array(), 1.0)
    if cam[2] >= -1e-6:
        return None

    x = cam[0] / -cam[2]
    y = -cam[1] / -cam[2]
    pixel = intrinsics @ np.array([x, y, 1.0])
    width, height = frame.image_size
    image_norm = NormalizedPoint(pixel[0] / width, pixel[1] / height)

    screen = display_to_screen(transform.apply(image_norm), frame.viewport_size)
    return screen if screen.is_finite else None


@dataclass(frozen=True)
class Projection:
    """
    Result of projecting one screen point into the world.
    """

    screen_point: ScreenPoint
    point: WorldPoint
    sampled_depth: Optional[float]
    " Line-of-sight depth from the depth map, None when the fallback distance was used. "

    @property
    def used_fallback(self) -> bool:
        return self.sampled_depth is None


class WorldAnchorProjector:
    """
    Turns a screen point and a frame into a world position, using the depth map when
    possible and a fixed distance along the camera ray otherwise.
    """

    def __init__(self, depth_sampler=None, fallback_distance=None):
        """
        Initialize the projector.

        Args:
            depth_sampler (DepthSampler): Depth lookup. If None, a default sampler is created.
            fallback_distance (float): Distance used without depth (meters). If None, uses config default.
        """
        self.depth_sampler = depth_sampler if depth_sampler is not None else DepthSampler()
        self.fallback_distance = (
            fallback_distance if fallback_distance is not None else ProjectionConfig.FIXED_DISTANCE
        )

    def project(self, screen_point, frame):
        """
        Project a screen point into the world.

        Args:
            screen_point (ScreenPoint): Point in viewport pixels
            frame (Frame): Frame providing camera, viewport and depth

        Returns:
            Projection: The world point and the depth it was placed at, or None if the
                        ray could not be computed
        """
        try:
            ray = camera_ray(screen_point, frame)
        except InvalidGeometryError as e:
            logger.debug(f"No world point for {screen_point}: {e}")
            return None

        depth = self.depth_sampler.sample(screen_point, frame)
        distance = depth if depth is not None else self.fallback_distance

        point = point_along_ray(ray, distance)
        if not point.valid:
            return None
        return Projection(screen_point, point, depth)

"""
UI Display Module - Camera setup and overlay drawing for the demo shell.

The HUD lives in world space; every overlay is drawn by projecting world points
back onto the camera image with `project_world_to_screen`.
"""

import logging
import time

import cv2 as cv
import numpy as np

from fingertip_hud.config import CameraConfig, UIConfig
from fingertip_hud.core.camera_thread import ThreadedCamera
from fingertip_hud.core.projector import project_world_to_screen
from fingertip_hud.utils.coords import WorldPoint

logger = logging.getLogger(__name__)


def _pixel(point):
    return int(round(point.x)), int(round(point.y))


def plane_basis(snapshot, camera_transform):
    """
    (right, up, normal) axes of the HUD plane in world space.

    A billboarded plane uses the camera's axes, so it always faces the viewer;
    otherwise it is aligned with the world axes.
    """
    if snapshot.billboard:
        rotation = np.asarray(camera_transform, dtype=float)[:3, :3]
        return rotation[:, 0], rotation[:, 1], rotation[:, 2]
    return np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]), np.array([0.0, 0.0, 1.0])


def plane_corners(snapshot, camera_transform):
    """
    World-space corners and centre of the HUD plane.

    Returns:
        tuple: (centre, [corner, ...]) as WorldPoints, or (None, []) without an anchor
    """
    centre = snapshot.plane_position
    if centre is None:
        return None, []

    right, up, _ = plane_basis(snapshot, camera_transform)
    half_w = snapshot.plane_size[0] / 2.0
    half_h = snapshot.plane_size[1] / 2.0
    centre = np.asarray(centre)
    corners = [
        centre + sx * half_w * right + sy * half_h * up
        for sx, sy in ((-1, -1), (1, -1), (1, 1), (-1, 1))
    ]
    return WorldPoint.from_array(centre), [WorldPoint.from_array(c) for c in corners]


def dot_position(snapshot, camera_transform):
    """
    World-space position of the touch dot, in the same basis as the plane outline.
    """
    centre = snapshot.plane_position
    if centre is None:
        return None
    right, up, normal = plane_basis(snapshot, camera_transform)
    dx, dy, lift = snapshot.dot_offset
    return WorldPoint.from_array(np.asarray(centre) + dx * right + dy * up + lift * normal)


def draw_hud(display_img, snapshot, frame):
    """
    Draw the anchor, the HUD plane outline and the touch dot.

    Args:
        display_img: Image to draw on (viewport-sized)
        snapshot (HudSnapshot): Current HUD state
        frame (Frame): Frame the image belongs to

    Returns:
        bool: True if the HUD was visible
    """
    if snapshot.anchor is None:
        return False

    anchor_px = project_world_to_screen(snapshot.anchor, frame)
    if anchor_px is not None:
        cv.drawMarker(display_img, _pixel(anchor_px), UIConfig.COLOR_YELLOW,
                      markerType=cv.MARKER_CROSS, markerSize=16, thickness=2)

    _, corners = plane_corners(snapshot, frame.camera_transform)
    corner_px = [project_world_to_screen(c, frame) for c in corners]
    if corner_px and all(p is not None for p in corner_px):
        polygon = np.array([_pixel(p) for p in corner_px], dtype=np.int32)
        cv.polylines(display_img, [polygon], True, UIConfig.COLOR_GREEN, 2)
        if anchor_px is not None:
            stem = _pixel(corner_px[0]), _pixel(corner_px[1])
            bottom = ((stem[0][0] + stem[1][0]) // 2, (stem[0][1] + stem[1][1]) // 2)
            cv.line(display_img, _pixel(anchor_px), bottom, UIConfig.COLOR_GREEN, 1)

    dot = dot_position(snapshot, frame.camera_transform)
    dot_px = project_world_to_screen(dot, frame) if dot is not None else None
    if dot_px is not None:
        cv.circle(display_img, _pixel(dot_px), 5, UIConfig.COLOR_WHITE, -1)

    return anchor_px is not None


def draw_joint_markers(display_img, visualizer, frame):
    """
    Draw one circle per debug joint marker, sized by its depth scale.
    """
    if not visualizer.enabled:
        return
    for name, marker in visualizer.markers.items():
        centre = project_world_to_screen(marker.position, frame)
        if centre is None:
            continue
        radius = max(1, int(round(UIConfig.MARKER_PIXEL_RADIUS * marker.scale)))
        cv.circle(display_img, _pixel(centre), radius, UIConfig.COLOR_CYAN, 1)


def draw_ui_overlay(display_img, status_text, fps_state, result=None):
    """
    Draw status information overlay on the display image.

    Args:
        display_img: Image to draw on
        status_text (str): Session status message
        fps_state (dict): FPS tracking state with keys: 'display_count',
                         'start_time', 'display_fps'
        result (TrackingResult): Last applied tracking result, if any

    Returns:
        dict: Updated fps_state
    """
    cv.putText(display_img, status_text, (10, 30),
               cv.FONT_HERSHEY_SIMPLEX, UIConfig.FONT_SCALE,
               UIConfig.COLOR_GREEN, UIConfig.FONT_THICKNESS)

    current_time = time.time()
    fps_state['display_count'] += 1
    elapsed = current_time - fps_state['start_time']
    if elapsed >= 1.0:
        fps_state['display_fps'] = fps_state['display_count'] / elapsed
        fps_state['display_count'] = 0
        fps_state['start_time'] = current_time

    if fps_state['display_fps'] > 0:
        cv.putText(display_img, f"Render: {fps_state['display_fps']:.1f} FPS", (10, 60),
                   cv.FONT_HERSHEY_SIMPLEX, UIConfig.FONT_SCALE,
                   UIConfig.COLOR_CYAN, UIConfig.FONT_THICKNESS)

    if result is not None and result.anchor is not None:
        depth = result.anchor.sampled_depth
        depth_text = f"Depth: {depth:.3f} m" if depth is not None else "Depth: fallback"
        cv.putText(display_img, depth_text, (10, 90),
                   cv.FONT_HERSHEY_SIMPLEX, UIConfig.FONT_SCALE,
                   UIConfig.COLOR_YELLOW, UIConfig.FONT_THICKNESS)

    return fps_state


def setup_camera(cam_port):
    """
    Initialize and configure the camera.

    Args:
        cam_port (int): Camera port number

    Returns:
        ThreadedCamera: Configured threaded camera capture
    """
    logger.info(f"Setting up camera on port {cam_port}")

    if CameraConfig.BACKEND is not None:
        cap = cv.VideoCapture(cam_port, CameraConfig.BACKEND)
    else:
        cap = cv.VideoCapture(cam_port)

    # Set buffer size BEFORE other properties to reduce latency
    cap.set(cv.CAP_PROP_BUFFERSIZE, CameraConfig.BUFFER_SIZE)
    cap.set(cv.CAP_PROP_FPS, CameraConfig.TARGET_FPS)
    cap.set(cv.CAP_PROP_FRAME_HEIGHT, CameraConfig.DEFAULT_HEIGHT)
    cap.set(cv.CAP_PROP_FRAME_WIDTH, CameraConfig.DEFAULT_WIDTH)

    actual_fps = cap.get(cv.CAP_PROP_FPS)
    actual_width = cap.get(cv.CAP_PROP_FRAME_WIDTH)
    actual_height = cap.get(cv.CAP_PROP_FRAME_HEIGHT)
    logger.info(f"Camera configured: {actual_width:.0f}x{actual_height:.0f} @ {actual_fps:.1f}fps")

    return ThreadedCamera(cap)

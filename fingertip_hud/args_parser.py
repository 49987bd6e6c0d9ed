import argparse

from .config import CameraConfig

hud_parser = argparse.ArgumentParser(
    description="Fingertip HUD, a hand-anchored heads-up display driven by a webcam"
)

hud_parser.add_argument(
    "--camera",
    help="Camera port to open.",
    type=int,
    default=None,
)
hud_parser.add_argument(
    "--fov",
    help="Horizontal field of view of the camera in degrees, used to estimate intrinsics.",
    type=float,
    default=CameraConfig.HORIZONTAL_FOV_DEG,
)

hud_parser.add_argument(
    "--fake-depth",
    help="Attach a constant depth map (meters) to every frame.",
    type=float,
    default=None,
)
hud_parser.add_argument(
    "--visualize-joints",
    help="Draw a depth-scaled marker for every joint of the tracked hand.",
    action="store_true",
    default=False,
)

hud_parser.add_argument(
    "--debug",
    help="Enable debug mode.",
    action="store_true",
    default=False,
)

get_args = hud_parser.parse_args

import argparse
import time
from typing import Callable, Optional

from fingertip_hud.config import CameraConfig, DebugConfig, TouchConfig
from fingertip_hud.core.dispatch import MainContextDispatcher
from fingertip_hud.core.session import SessionGate
from fingertip_hud.detection.hand_observation import HandDetector
from fingertip_hud.touch.messages import TouchSample
from fingertip_hud.utils.channel import LatestValueChannel, TickSampler


class TrackingContext:
    """
    Everything the tracker shares with the capture shell, built once on the render
    thread and passed explicitly to the components that need it.
    """

    def __init__(
        self,
        detector: Optional[HandDetector] = None,
        status_handler: Optional[Callable[..., None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize settings with default values and create the shared services.
        Must be called on the render thread.
        """

        self.debug: bool = False
        "Enable the debug overlay and DEBUG logging. Defaults to False."
        self.visualize_joints: bool = DebugConfig.VISUALIZE_HAND_JOINTS
        "Draw a marker for every joint of the tracked hand. Defaults to False."
        self.fake_depth: Optional[float] = None
        "Constant depth (meters) attached to every frame, or None for no depth."
        self.camera_port: Optional[int] = None
        "Camera port to open, or None to pick the first available one."
        self.horizontal_fov: float = CameraConfig.HORIZONTAL_FOV_DEG
        "Horizontal field of view used to estimate camera intrinsics."

        self.clock = clock
        "Monotonic clock shared by the scheduler and touch sampler."
        self.detector = detector
        "External hand detector."
        self.dispatcher = MainContextDispatcher()
        "Hands completions from worker threads to the render thread."
        self.session = SessionGate(status_handler)
        "Session status gate."
        self.touch_channel: LatestValueChannel[TouchSample] = LatestValueChannel(
            TouchConfig.CHANNEL_CAPACITY
        )
        "Keep-latest channel fed by the touch transport."
        self.touch_sampler: TickSampler[TouchSample] = TickSampler(
            self.touch_channel, TouchConfig.SAMPLE_INTERVAL, clock
        )
        "Fixed-tick reader of the touch channel."

    def load_args(self, args: argparse.Namespace) -> None:
        """
        Load settings from the command line arguments.
        """
        self.debug = args.debug
        self.visualize_joints = args.visualize_joints
        self.fake_depth = args.fake_depth
        self.camera_port = args.camera
        self.horizontal_fov = args.fov

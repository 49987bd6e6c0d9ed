"""
Threaded camera capture producing tracker frames.

`ThreadedCamera` keeps the newest webcam image off the render thread. `FrameSource` wraps that
image into a `Frame` with estimated pinhole intrinsics, a fixed camera pose and,
optionally, a constant fake depth map.
"""

import logging
import threading
import time

import numpy as np

from fingertip_hud.config import CameraConfig
from fingertip_hud.core.frame import Frame, pinhole_intrinsics
from fingertip_hud.depth.buffers import DepthBuffer
from fingertip_hud.geometry.transforms import InterfaceOrientation
from fingertip_hud.utils.coords import ViewportSize

logger = logging.getLogger(__name__)


class ThreadedCamera:
    """
    Keeps the newest image from an OpenCV capture, read on a background thread.

    The render loop never blocks on the device; `read` hands out a copy of whatever
    arrived last. Failed reads keep the previous image and are logged once per run.
    """

    def __init__(self, cap, first_frame_timeout=2.0):
        """
        Args:
            cap: OpenCV VideoCapture object
            first_frame_timeout (float): Seconds to wait for the first image
        """
        self.cap = cap
        self.image = None
        self.frames_read = 0
        self.lock = threading.Lock()
        self._stopping = threading.Event()
        self._first_image = threading.Event()

        self.thread = threading.Thread(target=self._capture_loop, daemon=True, name="ThreadedCamera")
        self.thread.start()

        if self._first_image.wait(first_frame_timeout):
            logger.info("ThreadedCamera started and ready")
        else:
            logger.warning(f"ThreadedCamera produced no image within {first_frame_timeout:.1f}s")

    def _capture_loop(self):
        failing = False
        while not self._stopping.is_set():
            ret, image = self.cap.read()
            if not ret or image is None:
                if not failing:
                    logger.warning("Camera read failed, keeping the previous image")
                failing = True
                self._stopping.wait(0.01)
                continue

            failing = False
            with self.lock:
                self.image = image
                self.frames_read += 1
            self._first_image.set()

    def read(self):
        """
        Latest image (non-blocking), in the same shape as `cap.read()`.

        Returns:
            tuple: (ret, image) with a private copy of the image
        """
        with self.lock:
            if self.image is None:
                return False, None
            return True, self.image.copy()

    def stop(self):
        self._stopping.set()
        self.thread.join(timeout=1.0)
        logger.info(f"ThreadedCamera stopped after {self.frames_read} images")

    def release(self):
        """Stop the capture thread and release the device."""
        self.stop()
        self.cap.release()

    def isOpened(self):
        return self.cap.isOpened()


class FrameSource:
    """
    Builds a `Frame` per capture tick from a camera.

    A desktop webcam is fixed and upright, so frames use an identity camera pose and a
    landscape interface orientation, which keeps the raw image upright for the detector.
    """

    def __init__(self, cap, horizontal_fov=None, fake_depth=None, clock=time.monotonic):
        """
        Args:
            cap: Object with `read() -> (ret, image)`, e.g. `ThreadedCamera`
            horizontal_fov (float): Horizontal field of view in degrees. If None, uses config default.
            fake_depth (float): Constant depth in meters attached to every frame, or None
            clock: Timestamp source
        """
        self.cap = cap
        self.horizontal_fov = (
            horizontal_fov if horizontal_fov is not None else CameraConfig.HORIZONTAL_FOV_DEG
        )
        self.fake_depth = fake_depth
        self.clock = clock
        self.orientation = InterfaceOrientation.LANDSCAPE_RIGHT
        self.camera_transform = np.eye(4)

        self._intrinsics = None
        self._image_size = None
        self._depth = None
        if fake_depth is not None:
            width, height = CameraConfig.FAKE_DEPTH_SIZE
            self._depth = DepthBuffer(np.full((height, width), fake_depth, dtype=np.float32))
            logger.info(f"Using constant fake depth of {fake_depth:.3f} m")

    def intrinsics_for(self, image_size):
        if image_size != self._image_size:
            self._image_size = image_size
            self._intrinsics = pinhole_intrinsics(image_size, self.horizontal_fov)
            logger.info(
                f"Estimated intrinsics for {image_size[0]}x{image_size[1]}: "
                f"f={self._intrinsics[0, 0]:.1f}px"
            )
        return self._intrinsics

    def next_frame(self, viewport_size=None):
        """
        Grab the latest image as a `Frame`.

        Args:
            viewport_size (ViewportSize): Size of the rendered view. If None, the image size is used.

        Returns:
            Frame: The frame, or None if the camera has not produced an image
        """
        ret, image = self.cap.read()
        if not ret or image is None:
            return None

        image_size = (int(image.shape[1]), int(image.shape[0]))
        if viewport_size is None:
            viewport_size = ViewportSize(*image_size)

        return Frame(
            color_image=image,
            camera_transform=self.camera_transform,
            camera_intrinsics=self.intrinsics_for(image_size),
            display_orientation=self.orientation,
            viewport_size=viewport_size,
            timestamp=self.clock(),
            depth=self._depth,
        )

import threading
from contextlib import contextmanager
from typing import Iterator, Tuple

import numpy as np
import numpy.typing as npt


class PixelBuffer:
    """
    A 2D pixel buffer shared with the capture pipeline.

    Readers must go through `locked()` and keep the lock only for the duration of the
    read; the capture pipeline writes through `write()` under the same lock.
    """

    DTYPE: type = np.float32

    def __init__(self, data: npt.ArrayLike) -> None:
        data = np.asarray(data, dtype=self.DTYPE)
        if data.ndim != 2:
            raise ValueError(f"{type(self).__name__} expects a 2D array, got shape {data.shape}")

        self._data = data
        self._lock = threading.Lock()

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """
        (width, height) of the buffer in pixels.
        """
        return self.width, self.height

    @contextmanager
    def locked(self) -> Iterator[npt.NDArray]:
        """
        Scoped read access to the underlying array.
        The array must not be kept after the `with` block exits.
        """
        with self._lock:
            yield self._data

    def write(self, data: npt.ArrayLike) -> None:
        """
        Copy new pixel data into the buffer. The shape must not change.
        """
        data = np.asarray(data, dtype=self.DTYPE)
        with self._lock:
            if data.shape != self._data.shape:
                raise ValueError(f"shape mismatch: {data.shape} != {self._data.shape}")
            self._data[...] = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.width}x{self.height})"


class DepthBuffer(PixelBuffer):
    """
    Dense depth map in meters (float32), line-of-sight distance from the camera.
    """

    DTYPE = np.float32


class ConfidenceBuffer(PixelBuffer):
    """
    Per-pixel depth confidence (uint8, 0 = none, 255 = full).
    """

    DTYPE = np.uint8

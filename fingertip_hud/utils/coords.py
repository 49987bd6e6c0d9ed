import math
from dataclasses import dataclass
from typing import ClassVar, Iterator, Tuple

import numpy as np
import numpy.typing as npt


def clamp01(value: float) -> float:
    """
    Clamp a value to [0, 1]. NaN is mapped to 0.
    """
    if value != value:
        return 0.0
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class NormalizedPoint:
    """
    Class to represent a point in a normalized [0, 1] x [0, 1] space.
    The axis convention depends on the space the point lives in:
    bottom-left origin for detector space, top-left origin for image and display space.
    Instances are immutable. Math operations always return a new instance.
    """

    u: float
    "Horizontal coordinate."
    v: float
    "Vertical coordinate."

    @property
    def coords(self) -> Tuple[float, float]:
        """
        Returns the coordinates as a tuple (u, v).
        """
        return self.u, self.v

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.u) and math.isfinite(self.v)

    def clamped(self) -> "NormalizedPoint":
        """
        Returns a new instance with both coordinates clamped to [0, 1].
        """
        return NormalizedPoint(clamp01(self.u), clamp01(self.v))

    def distance_to(self, other: "NormalizedPoint") -> float:
        """
        Returns the Euclidean distance between the point and another one.
        """
        return float(((self.u - other.u) ** 2 + (self.v - other.v) ** 2) ** 0.5)

    def __getitem__(self, index: int) -> float:
        return self.coords[index]

    def __iter__(self) -> Iterator[float]:
        return iter((self.u, self.v))

    def __str__(self) -> str:
        return f"({self.u:.4f}, {self.v:.4f})"

    def __repr__(self) -> str:
        return f"NormalizedPoint{self}"


@dataclass(frozen=True)
class ScreenPoint:
    """
    Class to represent a pixel position in the current viewport (top-left origin).
    """

    x: float
    "X coordinate in pixels."
    y: float
    "Y coordinate in pixels."

    @property
    def coords(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def __add__(self, other: "ScreenPoint") -> "ScreenPoint":
        return ScreenPoint(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "ScreenPoint") -> "ScreenPoint":
        return ScreenPoint(self.x - other.x, self.y - other.y)

    def __round__(self, n: int = 0) -> "ScreenPoint":
        return ScreenPoint(round(self.x, n), round(self.y, n))

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y))

    def __str__(self) -> str:
        return f"({self.x:.1f}px, {self.y:.1f}px)"


@dataclass(frozen=True)
class ViewportSize:
    """
    Size of the viewport the HUD is rendered into, in pixels.
    """

    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        """
        Whether the viewport cannot be used for conversions (zero, negative or non-finite size).
        """
        return not (
            math.isfinite(self.width)
            and math.isfinite(self.height)
            and self.width > 0
            and self.height > 0
        )

    def __iter__(self) -> Iterator[float]:
        return iter((self.width, self.height))


@dataclass(frozen=True)
class WorldPoint:
    """
    Class to represent a 3D position in world space, in meters.
    A point is only usable when `valid` is True.
    """

    x: float
    y: float
    z: float
    valid: bool = True
    "Whether the point came from a finite, non-degenerate ray."

    INVALID: ClassVar["WorldPoint"]
    "Placeholder for a point that could not be computed."

    @classmethod
    def from_array(cls, values: npt.ArrayLike) -> "WorldPoint":
        """
        Build a point from any 3-element sequence. Non-finite input yields an invalid point.
        """
        arr = np.asarray(values, dtype=float).reshape(3)
        if not np.all(np.isfinite(arr)):
            return cls.INVALID
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def as_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=float)

    def distance_to(self, other: "WorldPoint") -> float:
        return float(np.linalg.norm(self.as_array() - other.as_array()))

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __str__(self) -> str:
        if not self.valid:
            return "(invalid)"
        return f"({self.x:.3f}, {self.y:.3f}, {self.z:.3f})"


WorldPoint.INVALID = WorldPoint(math.nan, math.nan, math.nan, valid=False)

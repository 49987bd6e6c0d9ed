from .channel import LatestValueChannel, TickSampler
from .coords import NormalizedPoint, ScreenPoint, ViewportSize, WorldPoint, clamp01

__all__ = [
    "LatestValueChannel",
    "TickSampler",
    "NormalizedPoint",
    "ScreenPoint",
    "ViewportSize",
    "WorldPoint",
    "clamp01",
]

"""
Depth Module - Depth and confidence buffers and the depth sampler.

This module provides:
- Lock-guarded pixel buffers shared with the capture pipeline (buffers.py)
- Bilinear, confidence-weighted depth lookup at a screen point (sampler.py)
"""

from .buffers import ConfidenceBuffer, DepthBuffer, PixelBuffer
from .sampler import DepthSampler, sample_depth

__all__ = [
    'ConfidenceBuffer',
    'DepthBuffer',
    'PixelBuffer',
    'DepthSampler',
    'sample_depth',
]

"""
Geometry Module - Stateless coordinate space conversions.

This module provides:
- Interface and image orientation tables
- Detector-space to image-space mapping (and its inverse)
- The per-frame display transform (image-normalized to display-normalized)
- Display-normalized to screen pixel conversions
"""

from .transforms import (
    DisplayTransform,
    ImageOrientation,
    InterfaceOrientation,
    detector_to_image,
    detector_to_screen,
    display_to_image,
    display_to_screen,
    image_orientation_for,
    image_to_detector,
    image_to_display,
    screen_to_display,
)

__all__ = [
    'DisplayTransform',
    'ImageOrientation',
    'InterfaceOrientation',
    'detector_to_image',
    'detector_to_screen',
    'display_to_image',
    'display_to_screen',
    'image_orientation_for',
    'image_to_detector',
    'image_to_display',
    'screen_to_display',
]

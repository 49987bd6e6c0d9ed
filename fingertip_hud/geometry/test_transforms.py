"""
Tests for the coordinate space conversions.
"""

import itertools

import numpy as np
import pytest

from fingertip_hud.errors import InvalidGeometryError
from fingertip_hud.geometry.transforms import (
    MIRRORED_ORIENTATIONS,
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
from fingertip_hud.utils.coords import NormalizedPoint, ViewportSize

GRID = [NormalizedPoint(u, v) for u, v in itertools.product([0.0, 0.1, 0.37, 0.5, 0.9, 1.0], repeat=2)]
ORIENTATIONS = [
    InterfaceOrientation.PORTRAIT,
    InterfaceOrientation.PORTRAIT_UPSIDE_DOWN,
    InterfaceOrientation.LANDSCAPE_LEFT,
    InterfaceOrientation.LANDSCAPE_RIGHT,
]
UNMIRRORED = [ImageOrientation.UP, ImageOrientation.DOWN, ImageOrientation.LEFT, ImageOrientation.RIGHT]


def test_interface_to_image_orientation():
    assert image_orientation_for(InterfaceOrientation.PORTRAIT) == ImageOrientation.RIGHT
    assert image_orientation_for(InterfaceOrientation.PORTRAIT_UPSIDE_DOWN) == ImageOrientation.LEFT
    assert image_orientation_for(InterfaceOrientation.LANDSCAPE_LEFT) == ImageOrientation.DOWN
    assert image_orientation_for(InterfaceOrientation.LANDSCAPE_RIGHT) == ImageOrientation.UP
    assert image_orientation_for(InterfaceOrientation.UNKNOWN) == ImageOrientation.RIGHT


def test_detector_to_image_flips_vertical_axis_when_up():
    point = detector_to_image(NormalizedPoint(0.2, 0.9), ImageOrientation.UP)
    assert point.u == pytest.approx(0.2)
    assert point.v == pytest.approx(0.1)


def test_detector_to_image_right():
    point = detector_to_image(NormalizedPoint(0.2, 0.9), ImageOrientation.RIGHT)
    assert point.coords == pytest.approx((0.1, 0.8))


@pytest.mark.parametrize("orientation", sorted(MIRRORED_ORIENTATIONS))
def test_mirrored_orientations_are_identity(orientation):
    point = NormalizedPoint(0.3, 0.7)
    assert detector_to_image(point, orientation) == point


@pytest.mark.parametrize("orientation", UNMIRRORED)
def test_detector_image_round_trip(orientation):
    for point in GRID:
        back = image_to_detector(detector_to_image(point, orientation), orientation)
        assert back.distance_to(point) < 1e-4


def test_detector_to_image_clamps_out_of_range():
    point = detector_to_image(NormalizedPoint(1.5, -0.5), ImageOrientation.UP)
    assert point.coords == pytest.approx((1.0, 1.0))


@pytest.mark.parametrize("orientation", ORIENTATIONS)
@pytest.mark.parametrize("viewport", [ViewportSize(390, 844), ViewportSize(1280, 720), ViewportSize(500, 500)])
def test_image_display_round_trip(orientation, viewport):
    transform = DisplayTransform.for_viewport(orientation, viewport, (1920, 1440))
    for point in GRID:
        back = image_to_display(display_to_image(point, transform), transform)
        assert back.distance_to(point) < 1e-4


def test_landscape_right_with_matching_aspect_is_identity():
    transform = DisplayTransform.for_viewport(
        InterfaceOrientation.LANDSCAPE_RIGHT, ViewportSize(640, 480), (1280, 960)
    )
    np.testing.assert_allclose(transform.matrix, np.eye(3), atol=1e-12)


def test_portrait_rotates_image():
    # Matching aspect once rotated, so only the rotation is left
    transform = DisplayTransform.for_viewport(
        InterfaceOrientation.PORTRAIT, ViewportSize(480, 640), (640, 480)
    )
    top_left = image_to_display(NormalizedPoint(0.0, 0.0), transform)
    assert top_left.coords == pytest.approx((1.0, 0.0))


def test_aspect_fill_crops_image():
    # 4:3 image in a 16:9 viewport is cropped vertically
    transform = DisplayTransform.for_viewport(
        InterfaceOrientation.LANDSCAPE_RIGHT, ViewportSize(1600, 900), (1600, 1200)
    )
    top = image_to_display(NormalizedPoint(0.5, 0.0), transform)
    assert top.v < 0.0
    centre = image_to_display(NormalizedPoint(0.5, 0.5), transform)
    assert centre.coords == pytest.approx((0.5, 0.5))


def test_unknown_orientation_is_treated_as_portrait():
    viewport = ViewportSize(390, 844)
    unknown = DisplayTransform.for_viewport(InterfaceOrientation.UNKNOWN, viewport, (1920, 1440))
    portrait = DisplayTransform.for_viewport(InterfaceOrientation.PORTRAIT, viewport, (1920, 1440))
    np.testing.assert_allclose(unknown.matrix, portrait.matrix)


def test_empty_viewport_is_invalid_geometry():
    with pytest.raises(InvalidGeometryError):
        DisplayTransform.for_viewport(InterfaceOrientation.PORTRAIT, ViewportSize(0, 844), (1920, 1440))
    with pytest.raises(InvalidGeometryError):
        display_to_screen(NormalizedPoint(0.5, 0.5), ViewportSize(100, 0))


def test_singular_transform_cannot_be_inverted():
    with pytest.raises(InvalidGeometryError):
        DisplayTransform(np.zeros((3, 3))).inverted()


def test_screen_display_round_trip():
    viewport = ViewportSize(390, 844)
    screen = display_to_screen(NormalizedPoint(0.25, 0.75), viewport)
    assert screen.coords == pytest.approx((97.5, 633.0))
    assert screen_to_display(screen, viewport).coords == pytest.approx((0.25, 0.75))


def test_detector_to_screen_full_chain():
    viewport = ViewportSize(640, 480)
    transform = DisplayTransform.for_viewport(InterfaceOrientation.LANDSCAPE_RIGHT, viewport, (640, 480))
    screen = detector_to_screen(NormalizedPoint(0.25, 0.75), ImageOrientation.UP, transform, viewport)
    assert screen.coords == pytest.approx((160.0, 120.0))

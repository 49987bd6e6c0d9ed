"""
Tests for the render-facing HUD state.
"""

import itertools
import threading

import pytest

from fingertip_hud.config import HudConfig
from fingertip_hud.core.hud_state import HudState, local_plane_offset
from fingertip_hud.touch.messages import TouchSample
from fingertip_hud.utils.coords import WorldPoint

VALUES = [-1.0, -0.1, 0.0, 0.2, 0.5, 0.77, 1.0, 1.5, 3.0, float("nan")]


def test_plane_offset_stays_inside_plane():
    half_w = HudConfig.PLANE_WIDTH / 2
    half_h = HudConfig.PLANE_HEIGHT / 2
    for u, v in itertools.product(VALUES, repeat=2):
        x, y = local_plane_offset(u, v)
        assert -half_w <= x <= half_w
        assert -half_h <= y <= half_h


def test_out_of_range_touch_is_clamped():
    assert local_plane_offset(1.5, 0.5) == local_plane_offset(1.0, 0.5)
    assert local_plane_offset(-3.0, 0.5) == local_plane_offset(0.0, 0.5)


def test_plane_offset_values():
    assert local_plane_offset(0.5, 0.5) == (0.0, 0.0)
    assert local_plane_offset(1.0, 0.0, 0.02, 0.04) == pytest.approx((0.01, -0.02))


def test_repeated_touch_is_idempotent():
    hud = HudState()
    sample = TouchSample(0.8, 0.3)

    assert hud.apply_touch(sample)
    version = hud.version
    snapshot = hud.snapshot()

    assert not hud.apply_touch(sample)
    assert hud.version == version
    assert hud.snapshot() == snapshot


def test_snapshot_layout():
    hud = HudState()
    hud.set_anchor(WorldPoint(0.1, 0.2, -0.45))
    hud.apply_touch(TouchSample(1.0, 0.5))
    snapshot = hud.snapshot()

    assert snapshot.anchor == WorldPoint(0.1, 0.2, -0.45)
    assert snapshot.anchor_rotation == (0.0, 0.0, 0.0, 1.0)
    assert snapshot.plane_offset == (0.0, HudConfig.VERTICAL_OFFSET, 0.0)
    assert snapshot.plane_position == pytest.approx((0.1, 0.2 + HudConfig.VERTICAL_OFFSET, -0.45))
    assert snapshot.dot_offset == pytest.approx((HudConfig.PLANE_WIDTH / 2, 0.0, HudConfig.DOT_LIFT))
    assert snapshot.billboard


def test_no_anchor_until_set():
    snapshot = HudState().snapshot()
    assert snapshot.anchor is None
    assert snapshot.plane_position is None


def test_invalid_anchor_is_ignored():
    hud = HudState()
    assert not hud.set_anchor(WorldPoint.INVALID)
    assert not hud.set_anchor(None)
    assert hud.anchor is None


def test_same_anchor_does_not_bump_version():
    hud = HudState()
    assert hud.set_anchor(WorldPoint(0.0, 0.0, -0.45))
    assert not hud.set_anchor(WorldPoint(0.0, 0.0, -0.45))
    assert hud.version == 1


def test_mutation_off_render_thread_is_refused():
    hud = HudState()
    results = []

    def mutate():
        results.append(hud.set_anchor(WorldPoint(0.0, 0.0, -1.0)))
        results.append(hud.apply_touch(TouchSample(0.9, 0.9)))

    thread = threading.Thread(target=mutate)
    thread.start()
    thread.join()

    assert results == [False, False]
    assert hud.anchor is None
    assert hud.version == 0


def test_clear_anchor():
    hud = HudState()
    hud.set_anchor(WorldPoint(0.0, 0.0, -0.45))
    hud.clear_anchor()
    assert hud.anchor is None

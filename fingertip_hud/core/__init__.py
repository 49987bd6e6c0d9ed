"""
Core Module - Scheduling, workers, projection and HUD state.

This module contains the per-frame pipeline of the tracker:
- Frames and capture (frame.py, camera_thread.py)
- Inference rate limiting and job bookkeeping (scheduler.py)
- Background inference worker and render-thread dispatch (workers.py, dispatch.py)
- Screen to world projection (projector.py)
- Render-facing HUD state and debug markers (hud_state.py, debug_visualizer.py)
- Session gating (session.py)
- Orchestration (tracker.py)
"""

from .frame import Frame, pinhole_intrinsics

from .scheduler import (
    CancellationToken,
    GenerationCounter,
    InferenceScheduler
)

from .dispatch import MainContextDispatcher

from .workers import (
    InferenceJob,
    InferenceWorker,
    run_job
)

from .projector import (
    Projection,
    Ray,
    WorldAnchorProjector,
    camera_ray,
    point_along_ray,
    project_world_to_screen
)

from .hud_state import HudSnapshot, HudState, local_plane_offset
from .debug_visualizer import DebugJointVisualizer, JointMarker, marker_scale
from .session import SessionGate, SessionStatus
from .tracker import HandAnchorTracker, TrackingResult

__all__ = [
    # Frames
    'Frame',
    'pinhole_intrinsics',
    # Scheduling
    'CancellationToken',
    'GenerationCounter',
    'InferenceScheduler',
    'MainContextDispatcher',
    'InferenceJob',
    'InferenceWorker',
    'run_job',
    # Projection
    'Projection',
    'Ray',
    'WorldAnchorProjector',
    'camera_ray',
    'point_along_ray',
    'project_world_to_screen',
    # Render state
    'HudSnapshot',
    'HudState',
    'local_plane_offset',
    'DebugJointVisualizer',
    'JointMarker',
    'marker_scale',
    # Session and orchestration
    'SessionGate',
    'SessionStatus',
    'HandAnchorTracker',
    'TrackingResult',
]

"""
Fingertip HUD - Depth-registered hand anchor for a heads-up display.

Turns a 2D hand joint detection into a stabilized 3D world position used to
place a small HUD panel, with an optional per-joint debug overlay.

Main components:
- config: Tunable constants grouped by concern
- geometry: Detector / image / display / screen coordinate conversions
- depth: Confidence-weighted bilinear depth lookup
- detection: Hand observations, candidate selection, MediaPipe detector
- core: Scheduling, workers, projection, HUD state, tracker orchestration
- touch: Remote touch samples and payload decoding
- ui: Camera setup and overlay rendering for the demo shell
"""

__version__ = "1.0.0"

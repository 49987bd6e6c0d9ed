"""
UI Module - Camera setup and overlay drawing for the demo shell.
"""

from .display import draw_hud, draw_joint_markers, draw_ui_overlay, setup_camera

__all__ = [
    'draw_hud',
    'draw_joint_markers',
    'draw_ui_overlay',
    'setup_camera',
]

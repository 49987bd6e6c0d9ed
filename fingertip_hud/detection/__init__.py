"""
Detection Module - Hand observations and candidate selection.

This module provides:
- Hand observation types and joint names (hand_observation.py)
- Most-confident-hand selection (candidate_selector.py)
- MediaPipe Hands adapter (hand_detector.py, imported explicitly since it loads MediaPipe)
"""

from .hand_observation import HandDetector, HandObservation, Joint, JointName, JOINT_ORDER
from .candidate_selector import Candidate, CandidateSelector, select_candidate

__all__ = [
    'HandDetector',
    'HandObservation',
    'Joint',
    'JointName',
    'JOINT_ORDER',
    'Candidate',
    'CandidateSelector',
    'select_candidate',
]

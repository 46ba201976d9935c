"""Calibration module for RRLabel.

Turns the four-corner calibration rectangle and the physical layout size into
a pixel-to-millimeter perspective transform and a dots-per-track scale.
"""

from .homography import PerspectiveTransform, compute_homography
from .engine import CalibrationEngine, CalibrationMonitor, estimate_layout_height

__all__ = [
    "PerspectiveTransform",
    "compute_homography",
    "CalibrationEngine",
    "CalibrationMonitor",
    "estimate_layout_height",
]

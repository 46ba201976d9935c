"""OpenCV rendering of calibrated photographs.

Draws the calibration rectangle and labels onto a photograph, and produces a
top-down (rectified) view of the layout from the calibration homography.
"""

import math
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from ..core.calibration import PerspectiveTransform
from ..core.constants import CalibrationCorners, Defaults
from ..core.models import Document

# Colors (BGR format for OpenCV)
COLOR_CALIBRATION = (0, 200, 0)       # Green
COLOR_DEFAULT_LABEL = (255, 100, 0)   # Blue
COLOR_TEXT = (255, 255, 255)          # White
LABEL_COLORS: Dict[str, Tuple[int, int, int]] = {
    'detector': (0, 165, 255),    # Orange
    'track': (255, 100, 0),       # Blue
    'train': (0, 0, 255),         # Red
    'train-end': (180, 0, 180),   # Purple
    'coupling': (0, 255, 255),    # Yellow
}

LINE_THICKNESS = 2
FONT_SCALE = 0.5


def draw_markers(
    image: np.ndarray,
    document: Document,
    image_index: int = 0,
    radius: int = Defaults.DRAG_HANDLE_VISUAL_RADIUS,
    show_ids: bool = False
) -> np.ndarray:
    """Draw calibration corners, the calibration outline and labels.

    Args:
        image: BGR photograph (H, W, 3); not modified
        document: Manifest snapshot
        image_index: Image whose labels are drawn
        radius: Marker circle radius in pixels
        show_ids: Whether to write marker ids next to labels

    Returns:
        Annotated copy of the image
    """
    canvas = image.copy()

    corners = [document.calibration.get(c) for c in CalibrationCorners.CLOCKWISE]
    if all(corner is not None for corner in corners):
        outline = np.array([[int(p.x), int(p.y)] for p in corners], dtype=np.int32)
        cv2.polylines(canvas, [outline], True, COLOR_CALIBRATION, LINE_THICKNESS)
    for corner_id, point in document.calibration.items():
        center = (int(point.x), int(point.y))
        cv2.circle(canvas, center, radius, COLOR_CALIBRATION, LINE_THICKNESS)
        cv2.putText(canvas, corner_id, (center[0] + radius + 2, center[1] - radius),
                    cv2.FONT_HERSHEY_SIMPLEX, FONT_SCALE, COLOR_CALIBRATION, 1, cv2.LINE_AA)

    target = document.image(image_index)
    if target is None:
        return canvas

    for marker_id, marker in target.labels.items():
        center = (int(marker.x), int(marker.y))
        color = LABEL_COLORS.get(marker.type, COLOR_DEFAULT_LABEL)
        cv2.circle(canvas, center, radius, color, -1)
        if show_ids:
            cv2.putText(canvas, f"{marker.type} {marker_id[:8]}", (center[0] + radius + 2, center[1]),
                        cv2.FONT_HERSHEY_SIMPLEX, FONT_SCALE, COLOR_TEXT, 1, cv2.LINE_AA)

    return canvas


def rectify_image(
    image: np.ndarray,
    transform: PerspectiveTransform,
    px_per_mm: float = Defaults.PX_PER_MM,
    bounds: Optional[Tuple[float, float, float, float]] = None
) -> np.ndarray:
    """Warp a photograph into a top-down view of the layout.

    Args:
        image: Photograph (H, W[, C])
        transform: Pixel-to-mm homography from the calibration
        px_per_mm: Output resolution
        bounds: Region (xmin, ymin, xmax, ymax) in mm to render; defaults to
            the transformed bounds of the whole photograph

    Returns:
        Rectified image where one pixel covers ``1 / px_per_mm`` mm

    Raises:
        ValueError: If the output region is empty
    """
    if px_per_mm <= 0:
        raise ValueError(f"px_per_mm must be positive, got {px_per_mm}")

    if bounds is None:
        height, width = image.shape[:2]
        bounds = transform.transformed_bounds(width, height)
    xmin, ymin, xmax, ymax = bounds

    out_width = int(math.ceil((xmax - xmin) * px_per_mm))
    out_height = int(math.ceil((ymax - ymin) * px_per_mm))
    if out_width <= 0 or out_height <= 0:
        raise ValueError(f"Empty output region: {bounds}")

    # mm -> output pixels
    to_output = np.array([
        [px_per_mm, 0.0, -xmin * px_per_mm],
        [0.0, px_per_mm, -ymin * px_per_mm],
        [0.0, 0.0, 1.0],
    ])
    return cv2.warpPerspective(image, to_output @ transform.matrix, (out_width, out_height))

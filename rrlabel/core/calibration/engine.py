"""Physical-unit quantities derived from the calibration rectangle."""

from typing import Optional, Tuple

import numpy as np
from loguru import logger

from ..constants import CalibrationCorners, Defaults
from ..exceptions import CalibrationError, IncompleteCalibrationError
from ..models import Document, Layout, Point, Resolution, round_coordinate
from .homography import PerspectiveTransform


class CalibrationEngine:
    """Compute scale and perspective from a document's calibration."""

    @staticmethod
    def dots_per_track(document: Document) -> int:
        """Pixels spanned by one model track gauge, or -1 if unavailable.

        Uses the top edge of the calibration rectangle only
        (``rect-0`` to ``rect-2``) against the layout width. This is exact
        while the top edge runs parallel to the real-world width and an
        approximation when the camera is tilted.
        """
        layout = document.layout
        if layout.size.is_unset:
            return Defaults.DOTS_PER_TRACK_UNAVAILABLE

        width_mm = layout.size.width
        track_mm = layout.track_mm
        top_left = document.calibration.get(CalibrationCorners.TOP_LEFT)
        top_right = document.calibration.get(CalibrationCorners.TOP_RIGHT)
        if not width_mm or track_mm is None or top_left is None or top_right is None:
            return Defaults.DOTS_PER_TRACK_UNAVAILABLE

        width_px = top_left.distance_to(top_right)
        px_per_mm = width_px / width_mm
        return round_coordinate(px_per_mm * track_mm)

    @staticmethod
    def corner_arrays(document: Document) -> Tuple[np.ndarray, np.ndarray]:
        """Source corners (pixels) and target rectangle (mm), clockwise from top-left.

        Raises:
            IncompleteCalibrationError: If a corner or the layout size is missing
        """
        calibration = document.calibration
        size = document.layout.size
        missing = [corner for corner in CalibrationCorners.CLOCKWISE if corner not in calibration]
        if not size.width:
            missing.append("layout.size.width")
        if not size.height:
            missing.append("layout.size.height")
        if missing:
            raise IncompleteCalibrationError(missing)

        source = np.array(
            [calibration[corner].as_tuple() for corner in CalibrationCorners.CLOCKWISE],
            dtype=float
        )
        target = np.array([
            [0.0, 0.0],
            [size.width, 0.0],
            [size.width, size.height],
            [0.0, size.height],
        ])
        return source, target

    @classmethod
    def perspective_transform(cls, document: Document) -> PerspectiveTransform:
        """Homography from image pixels to layout millimeters.

        Raises:
            IncompleteCalibrationError: If corners or layout size are missing
            DegenerateCalibrationError: If the corners are collinear/coincident
        """
        source, target = cls.corner_arrays(document)
        return PerspectiveTransform.from_points(source, target)

    @classmethod
    def pixel_to_mm(cls, document: Document, x: float, y: float) -> Point:
        return cls.perspective_transform(document).transform_point(x, y)


def estimate_layout_height(width_mm: float, resolution: Resolution) -> Optional[float]:
    """Guess the layout height from its width and the image aspect ratio."""
    if not resolution.width or not resolution.height:
        return None
    return float(round_coordinate(width_mm * resolution.height / resolution.width))


class CalibrationMonitor:
    """Keeps calibration outputs current as a manifest listener.

    Dots-per-track and the perspective transform are recomputed from scratch,
    and only when the layout or the calibration corners changed.
    """

    def __init__(self, document: Optional[Document] = None):
        self._layout: Optional[Layout] = None
        self._calibration = None
        self.dots_per_track: int = Defaults.DOTS_PER_TRACK_UNAVAILABLE
        self.transform: Optional[PerspectiveTransform] = None
        self.error: Optional[CalibrationError] = None
        self.recomputations = 0
        if document is not None:
            self(document)

    def __call__(self, document: Document) -> None:
        if document.layout == self._layout and document.calibration == self._calibration:
            return

        self._layout = document.layout
        self._calibration = document.calibration
        self.recomputations += 1

        self.dots_per_track = CalibrationEngine.dots_per_track(document)
        try:
            self.transform = CalibrationEngine.perspective_transform(document)
            self.error = None
        except CalibrationError as e:
            self.transform = None
            self.error = e
            if isinstance(e, IncompleteCalibrationError):
                logger.debug(f"Calibration incomplete: {e}")
            else:
                logger.warning(f"Calibration unusable, please re-calibrate: {e}")

    @property
    def is_ready(self) -> bool:
        return self.transform is not None

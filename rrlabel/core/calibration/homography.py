"""Planar homography from four point correspondences."""

from itertools import combinations
from typing import Tuple

import cv2
import numpy as np

from ..exceptions import DegenerateCalibrationError
from ..models import Point

# Triangles smaller than this fraction of the squared extent count as collinear
COLLINEAR_TOLERANCE = 1e-9

# Determinant below which the solved homography is treated as singular
SINGULAR_TOLERANCE = 1e-12


def _check_quadrilateral(points: np.ndarray, label: str) -> None:
    """Raise if any three of the four points are collinear or coincident."""
    extent = float(np.ptp(points, axis=0).max()) if len(points) else 0.0
    if extent == 0.0:
        raise DegenerateCalibrationError(
            f"{label} points are coincident", {"points": points.tolist()}
        )

    tolerance = COLLINEAR_TOLERANCE * extent * extent
    for i, j, k in combinations(range(4), 3):
        a, b, c = points[i], points[j], points[k]
        doubled_area = abs((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0]))
        if doubled_area <= tolerance:
            raise DegenerateCalibrationError(
                f"{label} points {i}, {j}, {k} are collinear",
                {"points": points.tolist()}
            )


def compute_homography(source_points: np.ndarray, target_points: np.ndarray) -> np.ndarray:
    """Solve the homography mapping four source points onto four targets.

    The corners are checked here; the solve itself is OpenCV's
    ``getPerspectiveTransform`` with h22 fixed to 1.

    Args:
        source_points: Source quadrilateral [4, 2]
        target_points: Corresponding target points [4, 2]

    Returns:
        3x3 homography matrix

    Raises:
        ValueError: If the inputs are not two sets of four 2D points
        DegenerateCalibrationError: If the points do not define a homography
    """
    src = np.asarray(source_points, dtype=float)
    dst = np.asarray(target_points, dtype=float)
    if src.shape != (4, 2) or dst.shape != (4, 2):
        raise ValueError(
            f"Exactly 4 point pairs required, got shapes {src.shape} and {dst.shape}"
        )
    if not (np.all(np.isfinite(src)) and np.all(np.isfinite(dst))):
        raise DegenerateCalibrationError("Calibration points contain NaN or infinite values")

    _check_quadrilateral(src, "Source")
    _check_quadrilateral(dst, "Target")

    try:
        matrix = cv2.getPerspectiveTransform(src.astype(np.float32), dst.astype(np.float32))
    except cv2.error as e:
        raise DegenerateCalibrationError(f"Homography system is singular: {e}") from e

    if not np.all(np.isfinite(matrix)):
        raise DegenerateCalibrationError("Homography contains NaN or infinite values")
    # A singular system comes back from OpenCV as all zeros apart from h22
    if abs(np.linalg.det(matrix)) < SINGULAR_TOLERANCE:
        raise DegenerateCalibrationError("Homography system is singular")
    return matrix.astype(float)


class PerspectiveTransform:
    """A planar perspective transform (3x3 homography)."""

    # Homogeneous w below this maps to the line at infinity
    MIN_W = 1e-10

    def __init__(self, matrix: np.ndarray):
        matrix = np.asarray(matrix, dtype=float)
        if matrix.shape != (3, 3):
            raise ValueError(f"Homography must be 3x3, got shape {matrix.shape}")
        if abs(matrix[2, 2]) > self.MIN_W:
            matrix = matrix / matrix[2, 2]
        self.matrix = matrix

    @classmethod
    def from_points(cls, source_points: np.ndarray, target_points: np.ndarray) -> "PerspectiveTransform":
        return cls(compute_homography(source_points, target_points))

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """Transform an [N, 2] array of points.

        Raises:
            DegenerateCalibrationError: If a point maps to infinity
        """
        pts = np.asarray(points, dtype=float).reshape(-1, 2)
        homogeneous = np.column_stack([pts, np.ones(len(pts))]) @ self.matrix.T
        w = homogeneous[:, 2]
        if np.any(np.abs(w) < self.MIN_W):
            raise DegenerateCalibrationError(
                "Point maps to infinity under the perspective transform",
                {"points": pts[np.abs(w) < self.MIN_W].tolist()}
            )
        return homogeneous[:, :2] / w[:, None]

    def transform_point(self, x: float, y: float) -> Point:
        u, v = self.transform_points(np.array([[x, y]]))[0]
        return Point(float(u), float(v))

    def inverse(self) -> "PerspectiveTransform":
        try:
            return PerspectiveTransform(np.linalg.inv(self.matrix))
        except np.linalg.LinAlgError as e:
            raise DegenerateCalibrationError(f"Homography is not invertible: {e}") from e

    def matrix3d(self) -> np.ndarray:
        """4x4 matrix acting on (x, y, z, w) that leaves z untouched."""
        h = self.matrix
        return np.array([
            [h[0, 0], h[0, 1], 0.0, h[0, 2]],
            [h[1, 0], h[1, 1], 0.0, h[1, 2]],
            [0.0, 0.0, 1.0, 0.0],
            [h[2, 0], h[2, 1], 0.0, h[2, 2]],
        ])

    def css_matrix3d(self) -> str:
        """CSS ``matrix3d()`` value; CSS lists the matrix column by column."""
        values = ", ".join(repr(float(v)) for v in self.matrix3d().flatten(order="F"))
        return f"matrix3d({values})"

    def transformed_bounds(self, width: float, height: float) -> Tuple[float, float, float, float]:
        """Axis-aligned bounds (xmin, ymin, xmax, ymax) of a transformed rectangle."""
        corners = np.array([[0, 0], [width, 0], [width, height], [0, height]], dtype=float)
        mapped = self.transform_points(corners)
        xmin, ymin = mapped.min(axis=0)
        xmax, ymax = mapped.max(axis=0)
        return float(xmin), float(ymin), float(xmax), float(ymax)

    def __repr__(self) -> str:
        return f"PerspectiveTransform({self.matrix.tolist()!r})"

"""Tabular export of manifest labels.

One row per label, optionally with the label position converted to layout
millimeters through the calibration homography.
"""

from typing import Dict, Optional

import numpy as np
import pandas as pd
from loguru import logger

from ..core.calibration import PerspectiveTransform
from ..core.constants import ColumnNames
from ..core.exceptions import DegenerateCalibrationError
from ..core.models import Document

COLUMNS = [
    ColumnNames.IMAGE_INDEX,
    ColumnNames.FILENAME,
    ColumnNames.MARKER_ID,
    ColumnNames.TYPE,
    ColumnNames.X,
    ColumnNames.Y,
]


def labels_to_dataframe(
    document: Document,
    transform: Optional[PerspectiveTransform] = None
) -> pd.DataFrame:
    """Collect every label of every image into a DataFrame.

    Args:
        document: Manifest snapshot
        transform: Pixel-to-mm transform; adds ``x_mm``/``y_mm`` columns

    Returns:
        DataFrame with one row per label, ordered by image then insertion
    """
    rows = []
    for index, image in enumerate(document.images):
        for marker_id, marker in image.labels.items():
            rows.append({
                ColumnNames.IMAGE_INDEX: index,
                ColumnNames.FILENAME: image.filename,
                ColumnNames.MARKER_ID: marker_id,
                ColumnNames.TYPE: marker.type,
                ColumnNames.X: marker.x,
                ColumnNames.Y: marker.y,
            })

    df = pd.DataFrame(rows, columns=COLUMNS)
    if transform is None:
        return df

    df[ColumnNames.X_MM] = np.nan
    df[ColumnNames.Y_MM] = np.nan
    if df.empty:
        return df

    points = df[[ColumnNames.X, ColumnNames.Y]].to_numpy(dtype=float)
    try:
        mapped = transform.transform_points(points)
    except DegenerateCalibrationError as e:
        # Labels mapping to infinity stay NaN
        logger.warning(f"Some labels cannot be converted to mm: {e}")
        mapped = np.full_like(points, np.nan)
        for i, (x, y) in enumerate(points):
            try:
                mapped[i] = transform.transform_point(x, y).as_tuple()
            except DegenerateCalibrationError:
                continue

    df[ColumnNames.X_MM] = mapped[:, 0]
    df[ColumnNames.Y_MM] = mapped[:, 1]
    return df


def label_counts(document: Document) -> Dict[str, int]:
    """Number of labels per marker type across all images."""
    df = labels_to_dataframe(document)
    if df.empty:
        return {}
    return {str(k): int(v) for k, v in df[ColumnNames.TYPE].value_counts().sort_index().items()}

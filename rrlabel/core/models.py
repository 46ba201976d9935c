"""Data models for the RRLabel manifest document.

All models are immutable values. Mappings inside a document are exposed as
read-only views, so a snapshot handed to a listener can never be changed by a
later mutation of the store.
"""

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import Defaults, SCALE_RATIOS, SUPPORTED_DOCUMENT_VERSION, CalibrationCorners
from .enums import MarkerCategory


def freeze_mapping(mapping: Optional[Mapping] = None) -> Mapping:
    """Return a read-only copy of ``mapping``."""
    return MappingProxyType(dict(mapping or {}))


def round_coordinate(value: float) -> int:
    """Round half-up to the nearest integer (10.5 -> 11, -10.5 -> -10)."""
    return int(math.floor(float(value) + 0.5))


@dataclass(frozen=True)
class Point:
    """A point in image pixel space."""
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, other: "Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Marker(Point):
    """A typed point placed on an image (track, train, coupling, ...)."""
    type: str = Defaults.MARKER_TYPE

    def moved_to(self, x: float, y: float) -> "Marker":
        return replace(self, x=x, y=y)

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "type": self.type}


@dataclass(frozen=True)
class LayoutSize:
    """Physical layout size in millimeters; either side may be unset."""
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_unset(self) -> bool:
        return not self.width and not self.height

    def to_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class Layout:
    """The photographed layout: name, model scale and physical size.

    ``gauge_mm`` and ``scale_ratio`` are carried per document. When
    ``scale_ratio`` is not given it is looked up from the named ``scale``.
    """
    name: Optional[str] = None
    scale: str = Defaults.SCALE
    size: LayoutSize = field(default_factory=LayoutSize)
    description: Optional[str] = None
    contact: Optional[str] = None
    gauge_mm: float = Defaults.STANDARD_GAUGE_MM
    scale_ratio: Optional[int] = None

    @property
    def ratio(self) -> Optional[int]:
        """Scale ratio N of a 1:N model scale, or None if unknown."""
        if self.scale_ratio:
            return self.scale_ratio
        return SCALE_RATIOS.get(self.scale)

    @property
    def track_mm(self) -> Optional[float]:
        """Modelled rail spacing in millimeters."""
        ratio = self.ratio
        if not ratio:
            return None
        return self.gauge_mm / ratio

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "scale": self.scale,
            "size": self.size.to_dict(),
            "description": self.description,
            "contact": self.contact,
            "gauge_mm": self.gauge_mm,
            "scale_ratio": self.scale_ratio,
        }


@dataclass(frozen=True)
class Resolution:
    """Image size in pixels."""
    width: int = 0
    height: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class Camera:
    resolution: Resolution = field(default_factory=Resolution)
    model: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"resolution": self.resolution.to_dict(), "model": self.model}


@dataclass(frozen=True)
class Image:
    """One photograph and the labels placed on it, keyed by marker id."""
    filename: str
    labels: Mapping[str, Marker] = field(default_factory=freeze_mapping)

    # Mapping fields are unhashable
    __hash__ = None

    def __post_init__(self):
        if not isinstance(self.labels, MappingProxyType):
            object.__setattr__(self, "labels", freeze_mapping(self.labels))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "labels": {marker_id: marker.to_dict() for marker_id, marker in self.labels.items()},
        }


@dataclass(frozen=True)
class Document:
    """A complete manifest snapshot."""
    version: int = SUPPORTED_DOCUMENT_VERSION
    layout: Layout = field(default_factory=Layout)
    camera: Camera = field(default_factory=Camera)
    calibration: Mapping[str, Point] = field(default_factory=freeze_mapping)
    images: Tuple[Image, ...] = ()

    __hash__ = None

    def __post_init__(self):
        if not isinstance(self.calibration, MappingProxyType):
            object.__setattr__(self, "calibration", freeze_mapping(self.calibration))
        if not isinstance(self.images, tuple):
            object.__setattr__(self, "images", tuple(self.images))

    @property
    def is_calibrated(self) -> bool:
        """True when all four calibration corners are present."""
        return all(corner in self.calibration for corner in CalibrationCorners.ALL)

    def image(self, index: int) -> Optional[Image]:
        """Return the image at ``index`` or None when out of range."""
        if 0 <= index < len(self.images):
            return self.images[index]
        return None

    def find_marker(
        self,
        category: MarkerCategory,
        marker_id: str,
        image_index: int = 0
    ) -> Optional[Point]:
        """Look up a calibration corner or a label of one image."""
        if category is MarkerCategory.CALIBRATION:
            return self.calibration.get(marker_id)
        image = self.image(image_index)
        if image is None:
            return None
        return image.labels.get(marker_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "layout": self.layout.to_dict(),
            "camera": self.camera.to_dict(),
            "calibration": {corner: point.to_dict() for corner, point in self.calibration.items()},
            "images": [image.to_dict() for image in self.images],
        }


def inset_calibration(width: int, height: int, inset: int = Defaults.CALIBRATION_INSET) -> Mapping[str, Point]:
    """Starting-guess calibration rectangle inset from the image bounds."""
    return freeze_mapping({
        CalibrationCorners.TOP_LEFT: Point(inset, inset),
        CalibrationCorners.BOTTOM_LEFT: Point(inset, height - inset),
        CalibrationCorners.TOP_RIGHT: Point(width - inset, inset),
        CalibrationCorners.BOTTOM_RIGHT: Point(width - inset, height - inset),
    })

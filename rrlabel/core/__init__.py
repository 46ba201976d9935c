"""Core components for RRLabel."""

# Document model and store
from .models import (
    Point, Marker, LayoutSize, Layout, Resolution, Camera, Image, Document
)
from .manifest_store import ManifestStore

# Calibration
from .calibration import (
    CalibrationEngine, CalibrationMonitor, PerspectiveTransform,
    compute_homography, estimate_layout_height
)

# Rendering boundary
from .coordinate_transform import (
    CoordinateMapper, ScreenSurface, ScreenTransform, ViewportSurface
)
from .symbol_size import RenderSurface, ResizeCoalescer, SymbolGeometry, SymbolSizeAdapter

# Interaction
from .interaction import (
    MarkerInteractionController, PointerEvent, ToolSelection,
    CreateMarker, MoveMarker, DeleteMarker
)

# Settings and packaging
from .config_spec import Settings, load_settings, validate_settings
from .archive import load_project, save_project

# Exceptions
from .exceptions import (
    RRLabelError, DocumentError, UnsupportedVersionError, DocumentFormatError,
    CalibrationError, IncompleteCalibrationError, DegenerateCalibrationError,
    TransformUnavailableError, ListenerError, ConfigurationError, ArchiveError
)

__all__ = [
    # Document model and store
    "Point",
    "Marker",
    "LayoutSize",
    "Layout",
    "Resolution",
    "Camera",
    "Image",
    "Document",
    "ManifestStore",

    # Calibration
    "CalibrationEngine",
    "CalibrationMonitor",
    "PerspectiveTransform",
    "compute_homography",
    "estimate_layout_height",

    # Rendering boundary
    "CoordinateMapper",
    "ScreenSurface",
    "ScreenTransform",
    "ViewportSurface",
    "RenderSurface",
    "ResizeCoalescer",
    "SymbolGeometry",
    "SymbolSizeAdapter",

    # Interaction
    "MarkerInteractionController",
    "PointerEvent",
    "ToolSelection",
    "CreateMarker",
    "MoveMarker",
    "DeleteMarker",

    # Settings and packaging
    "Settings",
    "load_settings",
    "validate_settings",
    "load_project",
    "save_project",

    # Exceptions
    "RRLabelError",
    "DocumentError",
    "UnsupportedVersionError",
    "DocumentFormatError",
    "CalibrationError",
    "IncompleteCalibrationError",
    "DegenerateCalibrationError",
    "TransformUnavailableError",
    "ListenerError",
    "ConfigurationError",
    "ArchiveError",
]

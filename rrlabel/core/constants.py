"""Constants used throughout the RRLabel system."""

# Document schema
class DocumentKeys:
    """Top-level manifest document keys."""
    VERSION = 'version'
    LAYOUT = 'layout'
    CAMERA = 'camera'
    CALIBRATION = 'calibration'
    IMAGES = 'images'


SUPPORTED_DOCUMENT_VERSION = 2


# Calibration rectangle corners
class CalibrationCorners:
    """Corner ids of the calibration rectangle.

    TOP_LEFT/TOP_RIGHT are the two top corners; BOTTOM_LEFT sits below
    TOP_LEFT and BOTTOM_RIGHT below TOP_RIGHT.
    """
    TOP_LEFT = 'rect-0'
    BOTTOM_LEFT = 'rect-1'
    TOP_RIGHT = 'rect-2'
    BOTTOM_RIGHT = 'rect-3'

    ALL = (TOP_LEFT, BOTTOM_LEFT, TOP_RIGHT, BOTTOM_RIGHT)

    # Order used for the perspective transform: clockwise from top-left
    CLOCKWISE = (TOP_LEFT, TOP_RIGHT, BOTTOM_RIGHT, BOTTOM_LEFT)


# Named model scales -> ratio (1:N)
SCALE_RATIOS = {
    'G': 25,
    'O': 48,
    'S': 64,
    'HO': 87,
    'TT': 120,
    'N': 160,
    'Z': 220,
    'T': 450,
}


# Tool tags
class Tools:
    """Tool identifiers understood by the interaction controller."""
    DELETE = 'delete'
    CALIBRATE = 'calibrate'


# Marker types offered by the labelling toolbar
MARKER_TYPES = ('detector', 'track', 'train', 'train-end', 'coupling')


# File names
class FileNames:
    """Standard file names."""
    MANIFEST_JSON = 'manifest.json'
    ARCHIVE_SUFFIX = '.r49'
    IMAGE_PREFIX = 'image'


# Label export columns
class ColumnNames:
    """Standard DataFrame column names."""
    IMAGE_INDEX = 'image_index'
    FILENAME = 'filename'
    MARKER_ID = 'marker_id'
    TYPE = 'type'
    X = 'x'
    Y = 'y'
    X_MM = 'x_mm'
    Y_MM = 'y_mm'


# Default values
class Defaults:
    """Default configuration values."""
    SCALE = 'HO'
    STANDARD_GAUGE_MM = 1435.0
    MARKER_TYPE = 'track'
    CALIBRATION_INSET = 50
    DOTS_PER_TRACK_UNAVAILABLE = -1

    # Interaction
    CLICK_THRESHOLD_MS = 100
    CLICK_MOVE_TOLERANCE = 3.0
    DRAG_HANDLE_VISUAL_RADIUS = 8
    DRAG_HANDLE_INTERACTION_RADIUS = 60

    # Rendering
    SYMBOL_FIXED_SIZE_MM = 5.0
    CSS_PPI = 96.0
    MM_PER_INCH = 25.4
    PX_PER_MM = 1.0

    LOG_LEVEL = 'info'

"""Enumerations for RRLabel system."""

from enum import Enum


class MarkerCategory(Enum):
    """Categories of markers kept in a manifest document."""
    CALIBRATION = "calibration"
    LABEL = "label"

    @classmethod
    def from_string(cls, value) -> 'MarkerCategory':
        """Parse a category name, accepting existing enum members unchanged.

        Raises:
            ValueError: If the name is not a known category
        """
        if isinstance(value, cls):
            return value
        for category in cls:
            if category.value == str(value).strip().lower():
                return category
        available = ", ".join(c.value for c in cls)
        raise ValueError(f"Invalid marker category: {value}. Available: {available}")


class ToolKind(Enum):
    """How the active tool resolves pointer gestures."""
    NONE = "none"
    DELETE = "delete"
    MOVE_ONLY = "move_only"
    CREATE = "create"


class InteractionPhase(Enum):
    """States of the marker interaction state machine."""
    IDLE = "idle"
    DRAGGING = "dragging"

"""Pointer interaction for placing, dragging and deleting markers."""

from .tools import ToolSelection
from .handles import Handle, HandleRegistry, handle_id, iter_markers
from .controller import (
    CreateMarker,
    DeleteMarker,
    InteractionState,
    MarkerIntent,
    MarkerInteractionController,
    MoveMarker,
    PointerEvent,
)

__all__ = [
    "ToolSelection",
    "Handle",
    "HandleRegistry",
    "handle_id",
    "iter_markers",
    "CreateMarker",
    "DeleteMarker",
    "InteractionState",
    "MarkerIntent",
    "MarkerInteractionController",
    "MoveMarker",
    "PointerEvent",
]

"""Drag handle bookkeeping.

Rendered drag handles are identified by element ids. The registry maps those
ids back to the marker they represent, so pointer events never need to carry
marker data on the rendered element itself. Events without a target fall back
to a nearest-marker hit test in document space.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from loguru import logger

from ..constants import Defaults
from ..enums import MarkerCategory
from ..models import Document, Point


@dataclass(frozen=True)
class Handle:
    """A reference to one draggable marker."""
    category: MarkerCategory
    marker_id: str


def handle_id(category: MarkerCategory, marker_id: str) -> str:
    """Default element id of the handle drawn for a marker."""
    return f"{category.value}:{marker_id}"


def iter_markers(document: Document, image_index: int = 0) -> Iterator[Tuple[Handle, Point]]:
    """Calibration corners followed by the labels of one image."""
    for corner, point in document.calibration.items():
        yield Handle(MarkerCategory.CALIBRATION, corner), point
    image = document.image(image_index)
    if image is not None:
        for marker_id, marker in image.labels.items():
            yield Handle(MarkerCategory.LABEL, marker_id), marker


class HandleRegistry:
    """Side table from element ids to marker handles."""

    def __init__(self, interaction_radius: float = Defaults.DRAG_HANDLE_INTERACTION_RADIUS):
        self.interaction_radius = interaction_radius
        self._handles: Dict[str, Handle] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._handles

    def register(self, element_id: str, category: MarkerCategory, marker_id: str) -> Handle:
        handle = Handle(MarkerCategory.from_string(category), marker_id)
        self._handles[element_id] = handle
        return handle

    def lookup(self, element_id: Optional[str]) -> Optional[Handle]:
        if element_id is None:
            return None
        return self._handles.get(element_id)

    def handles_for(self, category: MarkerCategory, marker_id: str) -> List[str]:
        """Element ids registered for a marker."""
        return [
            element_id for element_id, handle in self._handles.items()
            if handle.category is category and handle.marker_id == marker_id
        ]

    def unregister(self, element_id: str) -> None:
        self._handles.pop(element_id, None)

    def unregister_marker(self, category: MarkerCategory, marker_id: str) -> None:
        for element_id in self.handles_for(category, marker_id):
            del self._handles[element_id]

    def sync(self, document: Document, image_index: int = 0) -> None:
        """Match the table to the markers of ``document``.

        Handles of markers that no longer exist are dropped and every existing
        marker gets its default element id.
        """
        live = set(handle for handle, _ in iter_markers(document, image_index))
        stale = [element_id for element_id, handle in self._handles.items() if handle not in live]
        for element_id in stale:
            del self._handles[element_id]
        for handle in live:
            self._handles.setdefault(handle_id(handle.category, handle.marker_id), handle)
        if stale:
            logger.debug(f"Dropped {len(stale)} stale handle(s)")

    def hit_test(self, document: Document, point: Point, image_index: int = 0) -> Optional[Handle]:
        """Nearest marker within the interaction radius, if any.

        Ties go to the marker listed first (calibration corners before labels).
        """
        best: Optional[Handle] = None
        best_distance = self.interaction_radius
        for handle, position in iter_markers(document, image_index):
            distance = point.distance_to(position)
            if distance <= best_distance and (best is None or distance < best_distance):
                best, best_distance = handle, distance
        return best

"""Pointer-driven marker interaction.

Resolves pointer gestures on a rendering surface into marker intents (create,
move, delete) and applies them to a :class:`ManifestStore`. The controller is
a two-state machine:

    Idle --pointer_down on handle--> Dragging(target)
    Dragging --pointer_move--> Dragging (marker follows the pointer)
    Dragging --pointer_up--> Idle (the following click is consumed)

A pointer_down on a deletable handle with the delete tool removes the marker
instead of starting a drag. Clicks on empty canvas create a label when a
creation tool is active and the gesture was a genuine click.
"""

import math
import time
import uuid
from dataclasses import dataclass
from typing import AbstractSet, Callable, Iterable, Optional, Tuple, Union

from loguru import logger

from ..config_spec import Settings
from ..constants import Defaults
from ..coordinate_transform import CoordinateMapper
from ..enums import InteractionPhase, MarkerCategory
from ..exceptions import TransformUnavailableError
from ..manifest_store import ManifestStore
from ..models import Document, Marker, Point, round_coordinate
from .handles import Handle, HandleRegistry
from .tools import ToolSelection


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event in screen pixels, optionally aimed at an element id."""
    screen_x: float
    screen_y: float
    target: Optional[str] = None


@dataclass(frozen=True)
class InteractionState:
    phase: InteractionPhase = InteractionPhase.IDLE
    target_id: Optional[str] = None
    category: Optional[MarkerCategory] = None

    @classmethod
    def dragging(cls, handle: Handle) -> "InteractionState":
        return cls(InteractionPhase.DRAGGING, handle.marker_id, handle.category)

    @property
    def is_dragging(self) -> bool:
        return self.phase is InteractionPhase.DRAGGING


IDLE = InteractionState()


@dataclass(frozen=True)
class CreateMarker:
    marker_id: str
    x: int
    y: int
    marker_type: str
    image_index: int = 0


@dataclass(frozen=True)
class MoveMarker:
    category: MarkerCategory
    marker_id: str
    x: int
    y: int
    image_index: int = 0


@dataclass(frozen=True)
class DeleteMarker:
    category: MarkerCategory
    marker_id: str
    image_index: int = 0


MarkerIntent = Union[CreateMarker, MoveMarker, DeleteMarker]


def new_marker_id() -> str:
    return uuid.uuid4().hex


class MarkerInteractionController:
    """Turns pointer events into marker edits on a manifest store."""

    def __init__(
        self,
        store: ManifestStore,
        mapper: CoordinateMapper,
        tool: Optional[str] = None,
        image_index: int = 0,
        click_threshold_ms: float = Defaults.CLICK_THRESHOLD_MS,
        click_move_tolerance: float = Defaults.CLICK_MOVE_TOLERANCE,
        interaction_radius: float = Defaults.DRAG_HANDLE_INTERACTION_RADIUS,
        deletable_categories: Iterable[MarkerCategory] = (MarkerCategory.LABEL,),
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = new_marker_id
    ):
        """Initialize controller and subscribe it to ``store``.

        Args:
            store: Store the intents are applied to
            mapper: Screen-to-document mapping of the rendering surface
            tool: Initial tool tag (see :meth:`ToolSelection.parse`)
            image_index: Image whose labels are edited
            click_threshold_ms: Longest press still treated as a click
            click_move_tolerance: Pointer travel in screen pixels tolerated in a click
            interaction_radius: Hit-test radius for events without a target
            deletable_categories: Categories the delete tool may remove
            clock: Monotonic time source in seconds
            id_factory: Generator of fresh marker ids
        """
        self.store = store
        self.mapper = mapper
        self.tool = ToolSelection.parse(tool)
        self.image_index = image_index
        self.click_threshold_ms = click_threshold_ms
        self.click_move_tolerance = click_move_tolerance
        self.deletable: AbstractSet[MarkerCategory] = frozenset(
            MarkerCategory.from_string(c) for c in deletable_categories
        )
        self.clock = clock
        self.id_factory = id_factory
        self.handles = HandleRegistry(interaction_radius)

        self._state = IDLE
        self._press_time: Optional[float] = None
        self._press_position: Optional[Tuple[float, float]] = None
        self._moved = False
        self._suppress_click = False

        self._document = store.document
        self.handles.sync(self._document, image_index)
        self._unsubscribe: Optional[Callable[[], None]] = store.subscribe(self._on_document)

    @classmethod
    def from_settings(
        cls,
        store: ManifestStore,
        mapper: CoordinateMapper,
        settings: Settings,
        **kwargs
    ) -> "MarkerInteractionController":
        return cls(
            store,
            mapper,
            click_threshold_ms=settings.click_threshold_ms,
            click_move_tolerance=settings.click_move_tolerance,
            interaction_radius=settings.interaction_radius,
            deletable_categories=settings.deletable,
            **kwargs
        )

    @property
    def state(self) -> InteractionState:
        return self._state

    def close(self) -> None:
        """Stop following the store."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def select_tool(self, tag: Optional[str]) -> None:
        self.tool = ToolSelection.parse(tag)
        logger.debug(f"Tool selected: {self.tool.kind.value} ({self.tool.tag})")

    def select_image(self, image_index: int) -> None:
        self.image_index = image_index
        self._reset()
        self.handles.sync(self._document, image_index)

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, event: PointerEvent) -> Optional[MarkerIntent]:
        self._press_time = self.clock()
        self._press_position = (event.screen_x, event.screen_y)
        self._moved = False
        self._suppress_click = False

        handle = self._resolve_handle(event)
        if handle is None:
            return None

        if self.tool.deletes_markers and handle.category in self.deletable:
            self.store.delete_marker(handle.category, handle.marker_id, self.image_index)
            self.handles.unregister_marker(handle.category, handle.marker_id)
            logger.debug(f"Deleted {handle.category.value} marker {handle.marker_id}")
            return DeleteMarker(handle.category, handle.marker_id, self.image_index)

        self._state = InteractionState.dragging(handle)
        return None

    def pointer_move(self, event: PointerEvent) -> Optional[MarkerIntent]:
        if not self._state.is_dragging:
            if self._press_position is not None and not self._moved:
                travel = math.hypot(
                    event.screen_x - self._press_position[0],
                    event.screen_y - self._press_position[1]
                )
                self._moved = travel > self.click_move_tolerance
            return None

        position = self._to_document(event)
        if position is None:
            return None

        category = self._state.category
        marker_id = self._state.target_id
        existing = self._document.find_marker(category, marker_id, self.image_index)
        marker_type = existing.type if isinstance(existing, Marker) else None

        self._moved = True
        self.store.set_marker(category, marker_id, position.x, position.y, marker_type, self.image_index)
        return MoveMarker(
            category, marker_id,
            round_coordinate(position.x), round_coordinate(position.y),
            self.image_index
        )

    def pointer_up(self, event: PointerEvent) -> Optional[MarkerIntent]:
        if self._state.is_dragging:
            self._state = IDLE
            self._suppress_click = True
        self._press_position = None
        return None

    def click(self, event: PointerEvent) -> Optional[MarkerIntent]:
        if self._suppress_click:
            self._suppress_click = False
            self._press_time = None
            return None

        genuine = not self._moved and (
            self._press_time is None
            or (self.clock() - self._press_time) * 1000.0 < self.click_threshold_ms
        )
        self._press_time = None
        self._moved = False
        if not genuine or not self.tool.creates_markers:
            return None

        if self._document.image(self.image_index) is None:
            logger.debug(f"No image at index {self.image_index}, click ignored")
            return None

        position = self._to_document(event)
        if position is None:
            return None

        marker_id = self.id_factory()
        self.store.set_marker(
            MarkerCategory.LABEL, marker_id, position.x, position.y, self.tool.tag, self.image_index
        )
        logger.debug(f"Created {self.tool.tag} marker {marker_id}")
        return CreateMarker(
            marker_id,
            round_coordinate(position.x), round_coordinate(position.y),
            self.tool.tag, self.image_index
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_handle(self, event: PointerEvent) -> Optional[Handle]:
        if event.target is not None:
            handle = self.handles.lookup(event.target)
        else:
            position = self._to_document(event)
            if position is None:
                return None
            handle = self.handles.hit_test(self._document, position, self.image_index)

        if handle is None:
            return None
        if self._document.find_marker(handle.category, handle.marker_id, self.image_index) is None:
            return None
        return handle

    def _to_document(self, event: PointerEvent) -> Optional[Point]:
        try:
            return self.mapper.to_document(event.screen_x, event.screen_y)
        except TransformUnavailableError as e:
            logger.warning(f"Pointer event dropped: {e}")
            return None

    def _reset(self) -> None:
        self._state = IDLE
        self._press_time = None
        self._press_position = None
        self._moved = False
        self._suppress_click = False

    def _on_document(self, document: Document) -> None:
        self._document = document
        self.handles.sync(document, self.image_index)
        if self._state.is_dragging and document.find_marker(
            self._state.category, self._state.target_id, self.image_index
        ) is None:
            logger.debug(f"Drag target {self._state.target_id} disappeared")
            self._state = IDLE

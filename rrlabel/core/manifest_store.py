"""Versioned manifest store.

The store holds exactly one immutable :class:`Document`. Each mutation builds a
new document, replacing only the affected substructure, commits it, and then
notifies every subscribed listener with the complete new document. Listeners
are called synchronously, in registration order, before the mutation returns.
"""

import json
from dataclasses import replace
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from loguru import logger

from .constants import CalibrationCorners, Defaults
from .document_spec import parse_document
from .enums import MarkerCategory
from .exceptions import DocumentFormatError, ListenerError
from .models import (
    Document, Image, Layout, Marker, Point, Resolution,
    freeze_mapping, inset_calibration, round_coordinate
)

Listener = Callable[[Document], None]
Unsubscribe = Callable[[], None]


class ManifestStore:
    """Authoritative holder of the current manifest document."""

    def __init__(
        self,
        document: Optional[Document] = None,
        default_marker_type: str = Defaults.MARKER_TYPE,
        calibration_inset: int = Defaults.CALIBRATION_INSET
    ):
        """Initialize store.

        Args:
            document: Initial snapshot (an empty document if None)
            default_marker_type: Type given to labels created without one
            calibration_inset: Inset of the seeded calibration rectangle
        """
        self._document = document if document is not None else Document()
        self._listeners: List[Listener] = []
        self.default_marker_type = default_marker_type
        self.calibration_inset = calibration_inset

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def document(self) -> Document:
        """The current snapshot."""
        return self._document

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a listener and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, document: Document) -> None:
        self._document = document

        failures = []
        for listener in tuple(self._listeners):
            try:
                listener(document)
            except Exception as e:
                logger.error(f"Manifest listener {listener!r} failed: {e}")
                failures.append(e)

        if failures:
            raise ListenerError(failures) from failures[0]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def load(self, document: Document) -> None:
        """Replace the whole document."""
        logger.info(
            f"Loaded manifest '{document.layout.name or ''}' with {len(document.images)} image(s)"
        )
        self._publish(document)

    def set_layout(self, layout: Layout) -> None:
        """Replace the layout; calibration is left untouched."""
        logger.debug(f"Layout set: {layout}")
        self._publish(replace(self._document, layout=layout))

    def set_image_dimensions(self, width: int, height: int) -> None:
        """Record the camera resolution, reseeding calibration when needed.

        The four calibration corners are regenerated at a fixed inset whenever
        the resolution changes or any of the four corners is missing. Otherwise the
        call does nothing and no notification is sent.
        """
        current = self._document.camera.resolution
        if width == current.width and height == current.height and self._document.is_calibrated:
            return

        logger.info(
            f"Image size {width}x{height}: seeding calibration rectangle "
            f"(inset {self.calibration_inset})"
        )
        camera = replace(self._document.camera, resolution=Resolution(width, height))
        self._publish(replace(
            self._document,
            camera=camera,
            calibration=inset_calibration(width, height, self.calibration_inset),
        ))

    def set_marker(
        self,
        category: Union[MarkerCategory, str],
        marker_id: str,
        x: float,
        y: float,
        marker_type: Optional[str] = None,
        image_index: int = 0
    ) -> None:
        """Insert or move a marker; coordinates are rounded to integers.

        Label markers on a nonexistent image are silently ignored.

        Raises:
            ValueError: If the category is unknown, or a calibration id is not
                one of the four rectangle corners
        """
        category = MarkerCategory.from_string(category)
        x, y = round_coordinate(x), round_coordinate(y)

        if category is MarkerCategory.CALIBRATION:
            if marker_id not in CalibrationCorners.ALL:
                available = ", ".join(CalibrationCorners.ALL)
                raise ValueError(f"Invalid calibration corner: {marker_id}. Available: {available}")
            calibration = dict(self._document.calibration)
            calibration[marker_id] = Point(x, y)
            logger.debug(f"Calibration corner {marker_id} -> ({x}, {y})")
            self._publish(replace(self._document, calibration=freeze_mapping(calibration)))
            return

        image = self._document.image(image_index)
        if image is None:
            logger.debug(f"Ignoring label {marker_id}: no image at index {image_index}")
            return

        labels = dict(image.labels)
        labels[marker_id] = Marker(x, y, marker_type or self.default_marker_type)
        logger.debug(f"Label {marker_id} on image {image_index} -> ({x}, {y}) {labels[marker_id].type}")
        self._replace_image(image_index, replace(image, labels=freeze_mapping(labels)))

    def delete_marker(
        self,
        category: Union[MarkerCategory, str],
        marker_id: str,
        image_index: int = 0
    ) -> None:
        """Remove a marker if present; missing markers are a silent no-op.

        Deleting a calibration corner does not reseed the rectangle.
        """
        category = MarkerCategory.from_string(category)

        if category is MarkerCategory.CALIBRATION:
            if marker_id not in self._document.calibration:
                return
            calibration = {k: v for k, v in self._document.calibration.items() if k != marker_id}
            logger.debug(f"Calibration corner {marker_id} deleted")
            self._publish(replace(self._document, calibration=freeze_mapping(calibration)))
            return

        image = self._document.image(image_index)
        if image is None or marker_id not in image.labels:
            return
        labels = {k: v for k, v in image.labels.items() if k != marker_id}
        logger.debug(f"Label {marker_id} on image {image_index} deleted")
        self._replace_image(image_index, replace(image, labels=freeze_mapping(labels)))

    def set_images(self, images: Iterable[Image]) -> None:
        """Replace the entire image list."""
        images = tuple(images)
        logger.debug(f"Image list set ({len(images)} image(s))")
        self._publish(replace(self._document, images=images))

    def add_image(self, filename: str) -> int:
        """Append an image without labels and return its index."""
        self.set_images(self._document.images + (Image(filename),))
        return len(self._document.images) - 1

    def clear_labels(self, image_index: int = 0) -> None:
        """Drop every label of one image; no-op for a missing or empty image."""
        image = self._document.image(image_index)
        if image is None or not image.labels:
            return
        self._replace_image(image_index, replace(image, labels=freeze_mapping()))

    def _replace_image(self, image_index: int, image: Image) -> None:
        images = list(self._document.images)
        images[image_index] = image
        self._publish(replace(self._document, images=tuple(images)))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_document(self) -> dict:
        """Current document as a JSON-compatible dictionary."""
        return self._document.to_dict()

    def to_json(self) -> str:
        return json.dumps(self.to_document(), indent=2)

    @staticmethod
    def from_document(raw: Mapping[str, Any], source: Optional[str] = None) -> Document:
        """Validate a raw dictionary and return the document it describes.

        Raises:
            UnsupportedVersionError: If the version tag is not supported
            DocumentFormatError: If the content does not match the schema
        """
        return parse_document(raw, source)

    @classmethod
    def from_json(cls, text: str, source: Optional[str] = None, **kwargs) -> "ManifestStore":
        """Create a store holding the document encoded in ``text``."""
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentFormatError([f"not valid JSON: {e}"], source) from e
        return cls(cls.from_document(raw, source), **kwargs)

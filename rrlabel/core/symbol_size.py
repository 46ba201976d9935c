"""Fixed physical size for marker symbols.

Marker symbols are drawn in document units, so a zoomed or stretched surface
would scale them with the photograph. The adapter computes, per marker, the
document-space box that renders as ``symbol_size_mm`` on screen at the given
pixel density.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple

from loguru import logger

from .constants import Defaults
from .models import Document
from .interaction.handles import handle_id, iter_markers


class RenderSurface(Protocol):
    """A surface that knows its rendered and intrinsic sizes."""

    def rendered_size(self) -> Tuple[float, float]:
        """On-screen size (width, height) in CSS pixels."""
        ...

    def intrinsic_size(self) -> Tuple[float, float]:
        """Size (width, height) in document units."""
        ...


@dataclass(frozen=True)
class SymbolGeometry:
    """Box of one symbol in document units, centered on its marker."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)


class SymbolSizeAdapter:
    """Keeps marker symbols at a constant physical size."""

    def __init__(
        self,
        surface: RenderSurface,
        symbol_size_mm: float = Defaults.SYMBOL_FIXED_SIZE_MM,
        ppi: float = Defaults.CSS_PPI,
        image_index: int = 0
    ):
        self.surface = surface
        self.symbol_size_mm = symbol_size_mm
        self.ppi = ppi
        self.image_index = image_index
        self.scale: Optional[Tuple[float, float]] = None
        self.geometry: Dict[str, SymbolGeometry] = {}

    @property
    def symbol_size_px(self) -> float:
        return self.symbol_size_mm / Defaults.MM_PER_INCH * self.ppi

    def update(self, document: Document, image_index: Optional[int] = None) -> Optional[Dict[str, SymbolGeometry]]:
        """Recompute symbol boxes for every marker of one image.

        Returns the new geometry keyed by handle element id, or None when the
        surface has no area yet. In that case the previous geometry is kept.
        """
        if image_index is not None:
            self.image_index = image_index

        rendered_w, rendered_h = self.surface.rendered_size()
        intrinsic_w, intrinsic_h = self.surface.intrinsic_size()
        if rendered_w <= 0 or rendered_h <= 0 or intrinsic_w <= 0 or intrinsic_h <= 0:
            logger.debug("Surface not laid out, symbol sizes unchanged")
            return None

        scale_x = rendered_w / intrinsic_w
        scale_y = rendered_h / intrinsic_h
        width = self.symbol_size_px / scale_x
        height = self.symbol_size_px / scale_y

        geometry = {}
        for handle, point in iter_markers(document, self.image_index):
            geometry[handle_id(handle.category, handle.marker_id)] = SymbolGeometry(
                point.x - width / 2.0, point.y - height / 2.0, width, height
            )

        self.scale = (scale_x, scale_y)
        self.geometry = geometry
        return geometry

    def __call__(self, document: Document) -> None:
        self.update(document)


class ResizeCoalescer:
    """Collapses bursts of resize notifications into one recompute.

    With a ``scheduler`` the first notification of a burst schedules
    :meth:`flush`; without one the owner calls :meth:`flush` itself, e.g.
    once per frame.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        scheduler: Optional[Callable[[Callable[[], bool]], None]] = None
    ):
        self.callback = callback
        self.scheduler = scheduler
        self.pending = False

    def notify_resize(self) -> None:
        if self.pending:
            return
        self.pending = True
        if self.scheduler is not None:
            self.scheduler(self.flush)

    def flush(self) -> bool:
        """Run the callback if a resize is pending; return whether it ran."""
        if not self.pending:
            return False
        self.pending = False
        self.callback()
        return True

"""Screen-to-document coordinate transformation.

Pointer events arrive in screen (client) pixels. Markers live in the
document's intrinsic coordinate space, which is the image pixel space. The
mapping between them is the surface's current screen transform (CTM); its
inverse turns a pointer position into document coordinates regardless of
zoom, stretching or letterboxing.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import numpy as np

from .exceptions import TransformUnavailableError
from .models import Point

# (left, top, width, height) of a surface on screen
ClientRect = Tuple[float, float, float, float]
# (x, y, width, height) of the visible document area
ViewBox = Tuple[float, float, float, float]

_ALIGN_FACTORS = {"min": 0.0, "mid": 0.5, "max": 1.0}


@dataclass(frozen=True)
class ScreenTransform:
    """2D affine transform in SVG/DOM matrix form.

        x' = a * x + c * y + e
        y' = b * x + d * y + f
    """
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def from_array(cls, matrix: np.ndarray) -> "ScreenTransform":
        m = np.asarray(matrix, dtype=float)
        return cls(m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])

    def as_array(self) -> np.ndarray:
        return np.array([
            [self.a, self.c, self.e],
            [self.b, self.d, self.f],
            [0.0, 0.0, 1.0],
        ])

    def apply(self, x: float, y: float) -> Point:
        return Point(self.a * x + self.c * y + self.e, self.b * x + self.d * y + self.f)

    def multiply(self, other: "ScreenTransform") -> "ScreenTransform":
        """Return ``self @ other`` (``other`` is applied first)."""
        return ScreenTransform.from_array(self.as_array() @ other.as_array())

    def inverse(self) -> "ScreenTransform":
        """Inverse transform.

        Raises:
            TransformUnavailableError: If the transform is singular
        """
        det = self.a * self.d - self.b * self.c
        if abs(det) < 1e-12 or not np.isfinite(det):
            raise TransformUnavailableError(
                "Screen transform is not invertible", {"determinant": det}
            )
        return ScreenTransform.from_array(np.linalg.inv(self.as_array()))

    @classmethod
    def fit_viewbox(
        cls,
        client_rect: ClientRect,
        viewbox: ViewBox,
        preserve_aspect_ratio: str = "xMidYMid meet"
    ) -> "ScreenTransform":
        """CTM of a surface showing ``viewbox`` inside ``client_rect``.

        Supports ``"none"`` (independent horizontal and vertical scale) and
        the ``x{Min,Mid,Max}Y{Min,Mid,Max} [meet|slice]`` forms, where
        ``meet`` letterboxes and ``slice`` crops.

        Raises:
            TransformUnavailableError: If the surface or viewbox has no area
        """
        left, top, width, height = client_rect
        vx, vy, vw, vh = viewbox
        if width <= 0 or height <= 0 or vw <= 0 or vh <= 0:
            raise TransformUnavailableError(
                "Surface is not rendered",
                {"client_rect": client_rect, "viewbox": viewbox}
            )

        scale_x = width / vw
        scale_y = height / vh
        offset_x = offset_y = 0.0

        parts = preserve_aspect_ratio.split()
        align = parts[0] if parts else "none"
        if align != "none":
            mode = parts[1] if len(parts) > 1 else "meet"
            try:
                fx = _ALIGN_FACTORS[align[1:4].lower()]
                fy = _ALIGN_FACTORS[align[5:8].lower()]
            except KeyError:
                raise ValueError(f"Unsupported preserveAspectRatio: {preserve_aspect_ratio!r}")
            scale = min(scale_x, scale_y) if mode == "meet" else max(scale_x, scale_y)
            scale_x = scale_y = scale
            offset_x = (width - vw * scale) * fx
            offset_y = (height - vh * scale) * fy

        return cls(
            a=scale_x, d=scale_y,
            e=left + offset_x - vx * scale_x,
            f=top + offset_y - vy * scale_y,
        )


class ScreenSurface(Protocol):
    """A rendering surface that can report its current screen transform."""

    def get_screen_ctm(self) -> Optional[ScreenTransform]:
        """Document-to-screen transform, or None if not attached/rendered."""
        ...


class ViewportSurface:
    """A surface described by its client rectangle and viewbox.

    Satisfies both :class:`ScreenSurface` and the render-size surface used by
    the symbol size adapter. Call :meth:`resize` when the layout changes.
    """

    def __init__(
        self,
        client_rect: Optional[ClientRect],
        viewbox: ViewBox,
        preserve_aspect_ratio: str = "xMidYMid meet"
    ):
        self.client_rect = client_rect
        self.viewbox = viewbox
        self.preserve_aspect_ratio = preserve_aspect_ratio

    def resize(self, client_rect: Optional[ClientRect]) -> None:
        self.client_rect = client_rect

    def get_screen_ctm(self) -> Optional[ScreenTransform]:
        if self.client_rect is None:
            return None
        return ScreenTransform.fit_viewbox(self.client_rect, self.viewbox, self.preserve_aspect_ratio)

    def rendered_size(self) -> Tuple[float, float]:
        """On-screen size of the drawn viewbox content.

        Differs from the client rectangle when the aspect ratio is preserved:
        ``meet`` leaves letterbox bars and ``slice`` crops the content.
        """
        if self.client_rect is None or self.client_rect[2] <= 0 or self.client_rect[3] <= 0:
            return (0.0, 0.0)
        if self.viewbox[2] <= 0 or self.viewbox[3] <= 0:
            return (0.0, 0.0)
        ctm = self.get_screen_ctm()
        return (self.viewbox[2] * abs(ctm.a), self.viewbox[3] * abs(ctm.d))

    def intrinsic_size(self) -> Tuple[float, float]:
        return (self.viewbox[2], self.viewbox[3])


class CoordinateMapper:
    """Maps pointer positions on a surface into document coordinates."""

    def __init__(self, surface: ScreenSurface):
        self.surface = surface

    def to_document(self, screen_x: float, screen_y: float) -> Point:
        """Inverse-transform a screen point into document space.

        Raises:
            TransformUnavailableError: If the surface has no (invertible) CTM
        """
        ctm = self.surface.get_screen_ctm()
        if ctm is None:
            raise TransformUnavailableError(
                "Unable to get screen CTM", {"surface": type(self.surface).__name__}
            )
        return ctm.inverse().apply(screen_x, screen_y)

    def to_screen(self, x: float, y: float) -> Point:
        """Document point to screen pixels."""
        ctm = self.surface.get_screen_ctm()
        if ctm is None:
            raise TransformUnavailableError(
                "Unable to get screen CTM", {"surface": type(self.surface).__name__}
            )
        return ctm.apply(x, y)

"""OpenCV renderers for calibrated photographs."""

from .overlay import draw_markers, rectify_image

__all__ = ['draw_markers', 'rectify_image']

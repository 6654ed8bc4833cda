"""
Conversion between document space and view space.

Document space is what annotations store: PDF points with a top-left origin,
independent of zoom. View space is pixels at the current zoom factor. Nothing
here mutates stored geometry; a zoom change only changes how it is displayed.
"""
from typing import NamedTuple, Tuple


class DocPoint(NamedTuple):
    """A point in document space (unscaled PDF points)."""
    x: float
    y: float


class ViewPoint(NamedTuple):
    """A point in view space (pixels at the current zoom)."""
    x: float
    y: float


Rect = Tuple[float, float, float, float]  # x, y, width, height


def to_view(point: DocPoint, scale: float) -> ViewPoint:
    """
    Scale a document-space point into view space.

    Args:
        point: Point in document space
        scale: Current zoom factor

    Returns:
        The same point in view pixels
    """
    return ViewPoint(point[0] * scale, point[1] * scale)


def to_doc(point: ViewPoint, scale: float) -> DocPoint:
    """
    Convert a view-space point back to document space.

    Args:
        point: Point in view pixels
        scale: Zoom factor the point was measured at

    Returns:
        The same point in document space
    """
    return DocPoint(point[0] / scale, point[1] / scale)


def delta_to_doc(dx: float, dy: float, scale: float) -> Tuple[float, float]:
    """Convert a pointer delta measured on screen into document units."""
    return dx / scale, dy / scale


def rect_to_view(rect: Rect, scale: float) -> Rect:
    """Scale an (x, y, width, height) rectangle into view space."""
    x, y, width, height = rect
    return x * scale, y * scale, width * scale, height * scale


def rect_to_doc(rect: Rect, scale: float) -> Rect:
    """Convert an (x, y, width, height) view rectangle into document space."""
    x, y, width, height = rect
    return x / scale, y / scale, width / scale, height / scale


def clamp_zoom(factor: float, min_zoom: float = 0.5, max_zoom: float = 3.0) -> float:
    """Clamp a zoom factor to the supported range."""
    return max(min_zoom, min(max_zoom, factor))

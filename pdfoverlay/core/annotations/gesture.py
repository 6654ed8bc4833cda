"""
Drag and resize gestures for text boxes.

A gesture has three phases. ``start`` captures the reference geometry, the
pointer position and the zoom. ``move`` may be called any number of times and
only makes transient store updates. ``end`` makes exactly one committing
update; ``cancel`` puts the reference geometry back instead.

Every move is computed from the total pointer delta since ``start``, divided
by the zoom captured at ``start``, so rounding never accumulates.
"""
import logging
from typing import Dict, Optional, Tuple

from ..geometry import ViewPoint, delta_to_doc
from .manager import AnnotationManager
from .models import Annotation
from .undo_redo import Snapshot

logger = logging.getLogger(__name__)

MIN_BOX_WIDTH = 50.0
MIN_BOX_HEIGHT = 20.0

RESIZE_HANDLES = ('nw', 'ne', 'sw', 'se')


class Gesture:
    """Base class for pointer gestures on a single annotation."""

    def __init__(self, manager: AnnotationManager, annotation_id: str):
        self.manager = manager
        self.annotation_id = annotation_id
        self.reference: Optional[Annotation] = None
        self._origin: Optional[ViewPoint] = None
        self._scale: float = 1.0
        self._last: Dict[str, float] = {}

    @property
    def active(self) -> bool:
        return self.reference is not None

    def start(self, pointer: ViewPoint, scale: float) -> bool:
        """
        Capture the reference state. Does not touch the store.

        Args:
            pointer: Pointer position in view pixels
            scale: Zoom factor in effect for the whole gesture

        Returns:
            False if the annotation does not exist

        Raises:
            RuntimeError: If this gesture is already running
        """
        if self.active:
            raise RuntimeError("Gesture already in progress")

        annotation = self.manager.get(self.annotation_id)
        if annotation is None:
            return False

        self.reference = annotation
        self._origin = ViewPoint(*pointer)
        self._scale = scale
        self._last = self._geometry(annotation)
        return True

    def move(self, pointer: ViewPoint) -> Snapshot:
        """Apply the pointer position as a transient update."""
        if not self.active:
            return self.manager.annotations

        dx, dy = delta_to_doc(pointer[0] - self._origin[0],
                              pointer[1] - self._origin[1], self._scale)
        self._last = self._apply(self.reference, dx, dy)
        return self.manager.update_transient(self.annotation_id, self._last)

    def end(self) -> Snapshot:
        """Commit the final geometry with a single update."""
        if not self.active:
            return self.manager.annotations

        final = self._last
        unchanged = final == self._geometry(self.reference)
        self._finish()
        if unchanged:
            # A click without movement is treated as abandoned: nothing is committed
            return self.manager.annotations
        return self.manager.update(self.annotation_id, final)

    def cancel(self) -> Snapshot:
        """Abandon the gesture and restore the reference geometry."""
        if not self.active:
            return self.manager.annotations

        reference = self._geometry(self.reference)
        self._finish()
        return self.manager.update_transient(self.annotation_id, reference)

    def _finish(self) -> None:
        self.reference = None
        self._origin = None

    @staticmethod
    def _geometry(annotation: Annotation) -> Dict[str, float]:
        return {
            'x': annotation.x,
            'y': annotation.y,
            'width': annotation.width,
            'height': annotation.height,
        }

    def _apply(self, ref: Annotation, dx: float, dy: float) -> Dict[str, float]:
        raise NotImplementedError


class DragGesture(Gesture):
    """Moves a box; the top-left corner is kept on the page (x, y >= 0)."""

    def _apply(self, ref: Annotation, dx: float, dy: float) -> Dict[str, float]:
        return {
            'x': max(0.0, ref.x + dx),
            'y': max(0.0, ref.y + dy),
            'width': ref.width,
            'height': ref.height,
        }


class ResizeGesture(Gesture):
    """Resizes a box from one of its corner handles."""

    def __init__(self, manager: AnnotationManager, annotation_id: str, handle: str):
        if handle not in RESIZE_HANDLES:
            raise ValueError(f"Unknown resize handle: {handle!r}")
        super().__init__(manager, annotation_id)
        self.handle = handle

    def _apply(self, ref: Annotation, dx: float, dy: float) -> Dict[str, float]:
        x, width = self._resize_axis(ref.x, ref.width, dx,
                                     moves_origin='w' in self.handle,
                                     minimum=MIN_BOX_WIDTH)
        y, height = self._resize_axis(ref.y, ref.height, dy,
                                      moves_origin='n' in self.handle,
                                      minimum=MIN_BOX_HEIGHT)
        return {'x': x, 'y': y, 'width': width, 'height': height}

    @staticmethod
    def _resize_axis(start: float, size: float, delta: float,
                     moves_origin: bool, minimum: float) -> Tuple[float, float]:
        if not moves_origin:
            return start, max(minimum, size + delta)
        # Opposite edge stays fixed
        new_size = max(minimum, size - delta)
        return start + size - new_size, new_size

"""
Controller for managing annotation operations.
"""
import logging
from typing import Any, List, Mapping, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from ..core.annotations import Annotation, AnnotationManager, DragGesture, ResizeGesture
from ..core.annotations.gesture import Gesture
from ..core.document import DocumentSession
from ..core.geometry import Rect, ViewPoint, rect_to_view, to_doc

logger = logging.getLogger(__name__)


class AnnotationController(QObject):
    """Handles all annotation-related operations coming from the UI.

    Positions arriving from the UI are in view pixels; they are converted to
    document space with the session's current zoom before reaching the store.
    """

    # Signals
    annotations_changed = pyqtSignal()  # Emitted when the live list changes
    annotation_selected = pyqtSignal(object)  # Annotation or None
    history_changed = pyqtSignal(bool, bool)  # can_undo, can_redo

    def __init__(self, annotation_manager: AnnotationManager,
                 session: DocumentSession, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.annotation_manager = annotation_manager
        self.session = session
        self._gesture: Optional[Gesture] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def page_annotations(self) -> List[Annotation]:
        """Annotations on the page currently shown."""
        return self.annotation_manager.get_annotations_for_page(self.session.current_page)

    def annotation_at_view(self, x: float, y: float) -> Optional[Annotation]:
        """Topmost annotation under a view-space point on the current page."""
        return self.annotation_manager.get_annotation_at_point(
            self.session.current_page, x, y, self.session.zoom)

    def view_rect(self, annotation: Annotation) -> Rect:
        """Where an annotation is drawn at the current zoom."""
        return rect_to_view((annotation.x, annotation.y, annotation.width, annotation.height),
                            self.session.zoom)

    # ------------------------------------------------------------------
    # Structural edits
    # ------------------------------------------------------------------

    def add_text_box(self, x: float, y: float) -> Annotation:
        """
        Create a text box at a document-space position on the current page.

        Args:
            x: Left edge in PDF points
            y: Top edge in PDF points

        Returns:
            The new annotation
        """
        annotation = self.annotation_manager.create(x, y, self.session.current_page)
        self._emit_changed()
        return annotation

    def add_text_box_at_view(self, x: float, y: float) -> Annotation:
        """Create a text box where the user clicked (view pixels)."""
        point = to_doc(ViewPoint(x, y), self.session.zoom)
        return self.add_text_box(point.x, point.y)

    def update(self, annotation_id: str, changes: Mapping[str, Any]) -> None:
        """Apply property panel or text edits with undo support."""
        self.annotation_manager.update(annotation_id, changes)
        self._emit_changed()

    def delete(self, annotation_id: str) -> None:
        was_selected = self.annotation_manager.selected_id == annotation_id
        self.annotation_manager.delete(annotation_id)
        self._emit_changed()
        if was_selected:
            self.annotation_selected.emit(None)

    def duplicate(self) -> Optional[Annotation]:
        """Copy the selected text box; does nothing without a selection."""
        copy = self.annotation_manager.duplicate()
        if copy is not None:
            self._emit_changed()
            self.annotation_selected.emit(copy)
        return copy

    def select(self, annotation_id: Optional[str]) -> None:
        """
        Select or deselect an annotation.

        Args:
            annotation_id: Annotation to select, or None to deselect
        """
        if self.annotation_manager.select(annotation_id):
            self.annotation_selected.emit(self.annotation_manager.selected_annotation)

    def undo(self) -> bool:
        """
        Undo the last annotation action.

        Returns:
            True if undo was successful
        """
        if self.annotation_manager.undo():
            self._emit_changed()
            self.annotation_selected.emit(self.annotation_manager.selected_annotation)
            return True
        return False

    def redo(self) -> bool:
        """
        Redo the last undone annotation action.

        Returns:
            True if redo was successful
        """
        if self.annotation_manager.redo():
            self._emit_changed()
            self.annotation_selected.emit(self.annotation_manager.selected_annotation)
            return True
        return False

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    @property
    def gesture_active(self) -> bool:
        return self._gesture is not None

    def begin_drag(self, annotation_id: str, x: float, y: float) -> bool:
        """Start moving a text box from a view-space pointer position."""
        return self._begin(DragGesture(self.annotation_manager, annotation_id), x, y)

    def begin_resize(self, annotation_id: str, handle: str, x: float, y: float) -> bool:
        """Start resizing a text box from one of its corner handles."""
        return self._begin(ResizeGesture(self.annotation_manager, annotation_id, handle), x, y)

    def _begin(self, gesture: Gesture, x: float, y: float) -> bool:
        if self._gesture is not None:
            logger.debug("Ignoring new gesture while another is active")
            return False
        if not gesture.start(ViewPoint(x, y), self.session.zoom):
            return False
        self._gesture = gesture
        return True

    def move_gesture(self, x: float, y: float) -> None:
        if self._gesture is None:
            return
        self._gesture.move(ViewPoint(x, y))
        self.annotations_changed.emit()

    def end_gesture(self) -> None:
        """Commit the gesture's final geometry as one undo step."""
        if self._gesture is None:
            return
        gesture, self._gesture = self._gesture, None
        gesture.end()
        self._emit_changed()

    def cancel_gesture(self) -> None:
        if self._gesture is None:
            return
        gesture, self._gesture = self._gesture, None
        gesture.cancel()
        self.annotations_changed.emit()

    def reset(self) -> None:
        """Forget any gesture after the document was replaced."""
        self._gesture = None
        self._emit_changed()
        self.annotation_selected.emit(None)

    def _emit_changed(self) -> None:
        self.annotations_changed.emit()
        self.history_changed.emit(self.annotation_manager.can_undo(),
                                  self.annotation_manager.can_redo())

"""
Annotation store: the live list of text boxes, its history and the selection.
"""
import logging
import uuid
from dataclasses import replace
from typing import Any, List, Mapping, Optional, Tuple

from ...config import AppConfig
from .models import Annotation, coerce_changes, find_annotation
from .undo_redo import History, Snapshot

logger = logging.getLogger(__name__)


def new_annotation_id() -> str:
    """Allocate an opaque unique annotation id."""
    return uuid.uuid4().hex


class AnnotationManager:
    """
    Manages all text box annotations for a loaded document.

    Structural operations (create, update, delete, duplicate) commit a history
    checkpoint. ``update_transient`` only changes the live list and is meant
    for the move phase of a drag or resize; the gesture must finish with a
    committing ``update``.
    """

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()
        self.history = History(max_size=self.config.history_limit)

        # Live list, equal to history.present except during a gesture
        self._annotations: Snapshot = ()
        self.selected_id: Optional[str] = None

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        """Current live annotations, including uncommitted gesture changes."""
        return self._annotations

    @property
    def committed(self) -> Snapshot:
        """The committed snapshot (history present)."""
        return self.history.present

    @property
    def has_pending_changes(self) -> bool:
        """True while transient changes have not been committed."""
        return self._annotations != self.history.present

    @property
    def selected_annotation(self) -> Optional[Annotation]:
        """The selected annotation in the live list, if any."""
        return find_annotation(self._annotations, self.selected_id)

    def get(self, annotation_id: str) -> Optional[Annotation]:
        """Look up a live annotation by id."""
        return find_annotation(self._annotations, annotation_id)

    def _commit(self, annotations: Snapshot) -> Snapshot:
        self.history.commit(annotations)
        self._annotations = self.history.present
        return self._annotations

    def create(self, x: float, y: float, page: int) -> Annotation:
        """
        Create a text box with default styling and commit it.

        Args:
            x: Left edge in document space
            y: Top edge in document space
            page: 1-based page the box belongs to

        Returns:
            The new annotation
        """
        cfg = self.config
        annotation = Annotation(
            id=new_annotation_id(),
            x=x,
            y=y,
            width=cfg.default_width,
            height=cfg.default_height,
            page=page,
            text=cfg.default_text,
            font_size=cfg.default_font_size,
            font_family=cfg.default_font_family,
            color=cfg.default_color,
            background_color=cfg.default_background,
        )
        self._commit(self._annotations + (annotation,))
        logger.debug("Created annotation %s on page %d", annotation.id, page)
        return annotation

    def add(self, annotation: Annotation) -> Annotation:
        """
        Commit an existing annotation, e.g. one received in wire form.

        A colliding id is replaced with a fresh one.

        Returns:
            The annotation as stored
        """
        if self.get(annotation.id) is not None:
            annotation = replace(annotation, id=new_annotation_id())
        self._commit(self._annotations + (annotation,))
        return annotation

    def _merged(self, base: Snapshot, annotation_id: str,
                changes: Mapping[str, Any]) -> Optional[Snapshot]:
        """Return ``base`` with ``changes`` merged into one annotation."""
        if find_annotation(base, annotation_id) is None:
            logger.debug("No annotation %s to update", annotation_id)
            return None

        fields = coerce_changes(changes, allow_id=False)
        if not fields:
            logger.debug("No valid changes for annotation %s", annotation_id)
            return None
        return tuple(replace(ann, **fields) if ann.id == annotation_id else ann
                     for ann in base)

    def update(self, annotation_id: str, changes: Mapping[str, Any]) -> Snapshot:
        """
        Merge field changes into an annotation and commit.

        Changes are applied on top of the live list, so the final geometry of
        a gesture lands on top of its transient moves.

        Args:
            annotation_id: Id of the annotation to change
            changes: Partial fields, in wire or field naming

        Returns:
            The committed annotation list (unchanged if the id is unknown)
        """
        merged = self._merged(self._annotations, annotation_id, changes)
        if merged is None:
            return self._annotations
        return self._commit(merged)

    def update_transient(self, annotation_id: str,
                         changes: Mapping[str, Any]) -> Snapshot:
        """
        Merge field changes without recording a history entry.

        Returns:
            The live annotation list
        """
        merged = self._merged(self._annotations, annotation_id, changes)
        if merged is not None:
            self._annotations = merged
        return self._annotations

    def discard_transient(self) -> Snapshot:
        """Drop uncommitted changes and return to the committed snapshot."""
        self._annotations = self.history.present
        return self._annotations

    def delete(self, annotation_id: str) -> Snapshot:
        """
        Remove an annotation and commit.

        Returns:
            The committed annotation list (unchanged if the id is unknown)
        """
        if find_annotation(self._annotations, annotation_id) is None:
            logger.debug("No annotation %s to delete", annotation_id)
            return self._annotations

        if self.selected_id == annotation_id:
            self.selected_id = None
        return self._commit(tuple(ann for ann in self._annotations
                                  if ann.id != annotation_id))

    def duplicate(self) -> Optional[Annotation]:
        """
        Copy the selected annotation, offset it slightly and select the copy.

        Returns:
            The new annotation, or None when nothing is selected
        """
        selected = self.selected_annotation
        if selected is None:
            return None

        offset = self.config.duplicate_offset
        copy = replace(selected, id=new_annotation_id(),
                       x=selected.x + offset, y=selected.y + offset)
        self._commit(self._annotations + (copy,))
        self.selected_id = copy.id
        return copy

    def select(self, annotation_id: Optional[str]) -> bool:
        """
        Select an annotation, or clear the selection with None.

        Returns:
            False if the id does not exist (selection is left unchanged)
        """
        if annotation_id is not None and self.get(annotation_id) is None:
            logger.debug("Cannot select unknown annotation %s", annotation_id)
            return False
        self.selected_id = annotation_id
        return True

    def _restore(self, snapshot: Snapshot) -> None:
        self._annotations = snapshot
        if self.selected_id is not None and find_annotation(snapshot, self.selected_id) is None:
            self.selected_id = None

    def undo(self) -> bool:
        """
        Perform undo operation.

        Returns:
            True if undo was successful
        """
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    def redo(self) -> bool:
        """
        Perform redo operation.

        Returns:
            True if redo was successful
        """
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return self.history.can_undo()

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return self.history.can_redo()

    def reset(self) -> None:
        """Clear all annotations, the history and the selection."""
        self.history.reset()
        self._annotations = ()
        self.selected_id = None

    def get_annotations_for_page(self, page: int) -> List[Annotation]:
        """
        Get all annotations for a specific page.

        Args:
            page: 1-based page number

        Returns:
            List of annotations on the specified page
        """
        return [ann for ann in self._annotations if ann.page == page]

    def get_annotation_at_point(self, page: int, x: float, y: float,
                                zoom: float = 1.0) -> Optional[Annotation]:
        """
        Get annotation at a specific point on a page.

        Args:
            page: 1-based page number
            x: X coordinate in view pixels
            y: Y coordinate in view pixels
            zoom: Zoom level the point was measured at

        Returns:
            The topmost annotation at the point, or None
        """
        doc_x = x / zoom
        doc_y = y / zoom

        # Later annotations are drawn on top
        for ann in reversed(self.get_annotations_for_page(page)):
            if ann.contains_point(doc_x, doc_y):
                return ann
        return None

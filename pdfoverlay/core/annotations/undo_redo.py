"""
Linear undo/redo history over immutable annotation snapshots.
"""
from typing import List, Optional, Tuple

from .models import Annotation

Snapshot = Tuple[Annotation, ...]


class History:
    """
    Past/present/future history of committed annotation lists.

    Snapshots are tuples of frozen annotations, so they are shared between
    entries instead of deep-copied on every commit. ``past`` is kept oldest
    first and ``future`` nearest first.
    """

    def __init__(self, max_size: Optional[int] = None):
        """
        Initialize an empty history.

        Args:
            max_size: Maximum number of undo steps to keep, or None for no limit
        """
        self.max_size = max_size
        self._past: List[Snapshot] = []
        self._future: List[Snapshot] = []  # top of stack is the nearest redo
        self.present: Snapshot = ()

    @property
    def past(self) -> Tuple[Snapshot, ...]:
        """Prior snapshots, oldest first."""
        return tuple(self._past)

    @property
    def future(self) -> Tuple[Snapshot, ...]:
        """Snapshots available for redo, nearest first."""
        return tuple(reversed(self._future))

    def commit(self, snapshot: Snapshot) -> None:
        """
        Record a new present state.

        The previous present moves onto the past and any redo chain is
        discarded.

        Args:
            snapshot: The new committed annotation list
        """
        self._past.append(self.present)
        self.present = tuple(snapshot)
        self._future.clear()

        if self.max_size is not None and len(self._past) > self.max_size:
            del self._past[:len(self._past) - self.max_size]

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._past) > 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._future) > 0

    def undo(self) -> Optional[Snapshot]:
        """
        Step back one commit.

        Returns:
            The restored snapshot, or None if there is nothing to undo
        """
        if not self.can_undo():
            return None

        self._future.append(self.present)
        self.present = self._past.pop()
        return self.present

    def redo(self) -> Optional[Snapshot]:
        """
        Step forward one commit.

        Returns:
            The restored snapshot, or None if there is nothing to redo
        """
        if not self.can_redo():
            return None

        self._past.append(self.present)
        self.present = self._future.pop()
        return self.present

    def reset(self, present: Snapshot = ()) -> None:
        """Clear both stacks and start again from ``present``."""
        self._past.clear()
        self._future.clear()
        self.present = tuple(present)

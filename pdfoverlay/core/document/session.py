"""
Document session: the loaded source bytes, current page and zoom.
"""
import logging
import os
from typing import Callable, List, Optional, Tuple

from PyQt5.QtCore import QThread, pyqtSignal

from ...config import AppConfig
from ..annotations.manager import AnnotationManager
from ..errors import LoadError
from ..export.naming import DEFAULT_FILE_NAME, annotated_file_name
from ..geometry import clamp_zoom
from .backend import DocumentInfo, parse_document
from .rasterizer import PageRasterizer, RenderTarget, RenderWorker

logger = logging.getLogger(__name__)


class DocumentSession:
    """
    Holds one loaded document and the view state over it.

    The source bytes are copied once on load and kept for the whole session so
    export can always be regenerated. Loading a new document resets the
    annotation store and its history.
    """

    def __init__(self, annotation_manager: AnnotationManager,
                 rasterizer: Optional[PageRasterizer] = None,
                 config: Optional[AppConfig] = None):
        self.annotation_manager = annotation_manager
        self.rasterizer = rasterizer
        self.config = config or AppConfig()

        self._data: Optional[bytes] = None
        self.file_name: str = DEFAULT_FILE_NAME
        self.info: Optional[DocumentInfo] = None
        self.current_page: int = 1
        self.zoom: float = 1.0

        # Bumped on every load so old render targets never match new ones
        self.generation: int = 0

        self._render_task = None
        self._render_target: Optional[RenderTarget] = None
        self._render_listeners: List[Callable[[RenderWorker], None]] = []
        # Cancelled tasks stay referenced until their thread exits
        self._retired_tasks: List[RenderWorker] = []

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, data: bytes, file_name: Optional[str] = None) -> int:
        """
        Parse and adopt a new document.

        Nothing changes if parsing fails.

        Args:
            data: Raw PDF bytes
            file_name: Original file name, used for the export name

        Returns:
            Page count of the loaded document

        Raises:
            LoadError: If the bytes are not a usable PDF
        """
        source = bytes(data)
        info = parse_document(source)
        self.commit_load(source, file_name, info)
        return info.page_count

    def commit_load(self, data: bytes, file_name: Optional[str],
                    info: DocumentInfo) -> None:
        """Adopt already parsed document bytes and reset all editing state."""
        self._data = bytes(data)
        self.file_name = os.path.basename(file_name) if file_name else DEFAULT_FILE_NAME
        self.info = info
        self.current_page = 1
        self.zoom = 1.0
        self.generation += 1
        self.annotation_manager.reset()

        logger.info("Loaded %s (%d pages)", self.file_name, info.page_count)
        self.request_render()

    def is_loaded(self) -> bool:
        """Check if a document is currently loaded."""
        return self._data is not None

    @property
    def page_count(self) -> int:
        return self.info.page_count if self.info else 0

    def source_bytes(self) -> bytes:
        """
        The original document bytes.

        Raises:
            LoadError: If no document is loaded
        """
        if self._data is None:
            raise LoadError("no document loaded")
        return self._data

    @property
    def export_file_name(self) -> str:
        return annotated_file_name(self.file_name)

    def page_size(self, page: Optional[int] = None) -> Tuple[float, float]:
        """
        Get the size of a page in points.

        Args:
            page: 1-based page number, the current page if omitted

        Returns:
            Tuple of (width, height), or (0, 0) for a page that does not exist
        """
        page = self.current_page if page is None else page
        if not self.info or not 1 <= page <= self.info.page_count:
            return 0.0, 0.0
        return self.info.page_sizes[page - 1]

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def set_page(self, page: int) -> int:
        """
        Show a page, clamped to the document.

        Returns:
            The page actually shown
        """
        clamped = max(1, min(self.page_count, page)) if self.page_count else 1
        if clamped != self.current_page:
            self.current_page = clamped
            self.request_render()
        return self.current_page

    def next_page(self) -> int:
        return self.set_page(self.current_page + 1)

    def previous_page(self) -> int:
        return self.set_page(self.current_page - 1)

    def set_zoom(self, factor: float) -> float:
        """
        Set the zoom factor, clamped to the configured range.

        Stored annotation geometry is never touched.

        Returns:
            The zoom actually applied
        """
        clamped = clamp_zoom(factor, self.config.min_zoom, self.config.max_zoom)
        if clamped != self.zoom:
            self.zoom = clamped
            self.request_render()
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + self.config.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - self.config.zoom_step)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def add_render_listener(self, listener: Callable[[RenderWorker], None]) -> None:
        """Register a callback that receives each render task before it starts."""
        self._render_listeners.append(listener)

    @property
    def render_target(self) -> Optional[RenderTarget]:
        return RenderTarget(self.generation, self.current_page, self.zoom) \
            if self.is_loaded() else None

    def request_render(self):
        """
        Start rendering the current page at the current zoom.

        A running render for another target is cancelled first; a running
        render for the same target is left alone and no new one is started.

        Returns:
            The started task, or None if nothing was started
        """
        if self.rasterizer is None or not self.is_loaded():
            return None

        target = self.render_target
        task = self._render_task
        if task is not None and task.isRunning():
            if self._render_target == target:
                logger.debug("Render of page %d already in progress", target.page)
                return None
            task.cancel()
            self._retired_tasks.append(task)
        self._retired_tasks = [t for t in self._retired_tasks if t.isRunning()]

        task = self.rasterizer.create_task(self._data, target)
        self._render_task = task
        self._render_target = target
        for listener in self._render_listeners:
            listener(task)
        task.start()
        return task

    def cancel_render(self) -> None:
        """Cancel the in-flight render, if any."""
        if self._render_task is not None and self._render_task.isRunning():
            self._render_task.cancel()

    def is_current(self, target: RenderTarget) -> bool:
        """Check whether a finished render still matches what should be shown."""
        return target == self.render_target


class LoadWorker(QThread):
    """Worker thread that parses a document without freezing the UI."""

    # Signals
    loaded = pyqtSignal(object, str, object)  # data, file name, DocumentInfo
    failed = pyqtSignal(str)  # error message

    def __init__(self, data: bytes, file_name: str, parent=None):
        super().__init__(parent)
        self._data = bytes(data)
        self._file_name = file_name

    def run(self) -> None:
        """Parse the document in background thread."""
        try:
            info = parse_document(self._data)
        except LoadError as e:
            logger.error("Failed to load %s: %s", self._file_name, e)
            self.failed.emit(str(e))
            return
        self.loaded.emit(self._data, self._file_name, info)

"""
Controller for document loading, page navigation, rendering and export.
"""
import logging
import os
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from ..core.document import DocumentInfo, DocumentSession, LoadWorker, RenderTarget, RenderWorker
from ..core.errors import LoadError
from ..core.export import ExportWorker, PDFExporter

logger = logging.getLogger(__name__)


class ViewController(QObject):
    """Drives the document session and its background workers."""

    # Signals
    document_loaded = pyqtSignal(int)  # page count
    load_failed = pyqtSignal(str)  # error message
    page_changed = pyqtSignal(int)  # 1-based page
    zoom_changed = pyqtSignal(float)
    page_rendered = pyqtSignal(int, float, object)  # page, zoom, QImage
    render_failed = pyqtSignal(str)
    export_progress = pyqtSignal(str)
    export_finished = pyqtSignal(bool, str)  # success, message

    def __init__(self, session: DocumentSession,
                 exporter: Optional[PDFExporter] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.session = session
        self.exporter = exporter or PDFExporter(session.config)

        self._load_worker: Optional[LoadWorker] = None
        self._export_worker: Optional[ExportWorker] = None
        # Keep finished-but-not-deleted workers alive
        self._workers: List[QObject] = []

        self.session.add_render_listener(self._attach_render_task)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def open_file(self, file_path: str) -> bool:
        """
        Read a PDF from disk and start loading it.

        Returns:
            False if the file could not be read
        """
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            logger.error("Cannot read %s: %s", file_path, e)
            self.load_failed.emit(f"Error loading PDF: {e}")
            return False

        self.load_bytes(data, os.path.basename(file_path))
        return True

    def load_bytes(self, data: bytes, file_name: str) -> None:
        """Parse a document in the background; state changes only on success."""
        worker = LoadWorker(data, file_name)
        worker.loaded.connect(lambda d, n, info, w=worker: self._on_loaded(w, d, n, info))
        worker.failed.connect(lambda message, w=worker: self._on_load_failed(w, message))
        self._load_worker = worker
        self._keep(worker)
        worker.start()

    def load_now(self, data: bytes, file_name: str) -> bool:
        """Load synchronously, for callers without an event loop."""
        try:
            page_count = self.session.load(data, file_name)
        except LoadError as e:
            self.load_failed.emit(f"Error loading PDF: {e}")
            return False
        self._announce_loaded(page_count)
        return True

    def _on_loaded(self, worker: LoadWorker, data: bytes, file_name: str,
                   info: DocumentInfo) -> None:
        if worker is not self._load_worker:
            logger.debug("Ignoring result of superseded load of %s", file_name)
            return
        self._load_worker = None
        self.session.commit_load(data, file_name, info)
        self._announce_loaded(info.page_count)

    def _on_load_failed(self, worker: LoadWorker, message: str) -> None:
        if worker is not self._load_worker:
            return
        self._load_worker = None
        self.load_failed.emit(f"Error loading PDF: {message}")

    def _announce_loaded(self, page_count: int) -> None:
        self.document_loaded.emit(page_count)
        self.page_changed.emit(self.session.current_page)
        self.zoom_changed.emit(self.session.zoom)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def set_page(self, page: int) -> int:
        previous = self.session.current_page
        current = self.session.set_page(page)
        if current != previous:
            self.page_changed.emit(current)
        return current

    def next_page(self) -> int:
        return self.set_page(self.session.current_page + 1)

    def previous_page(self) -> int:
        return self.set_page(self.session.current_page - 1)

    def set_zoom(self, factor: float) -> float:
        previous = self.session.zoom
        current = self.session.set_zoom(factor)
        if current != previous:
            self.zoom_changed.emit(current)
        return current

    def zoom_in(self) -> float:
        return self.set_zoom(self.session.zoom + self.session.config.zoom_step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.session.zoom - self.session.config.zoom_step)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _attach_render_task(self, task: RenderWorker) -> None:
        task.rendered.connect(self._on_page_rendered)
        task.failed.connect(self._on_render_failed)
        task.cancelled.connect(self._on_render_cancelled)
        self._keep(task)

    def _on_page_rendered(self, target: RenderTarget, image) -> None:
        if not self.session.is_current(target):
            logger.debug("Dropping stale render of page %d", target.page)
            return
        self.page_rendered.emit(target.page, target.zoom, image)

    def _on_render_failed(self, target: RenderTarget, message: str) -> None:
        if self.session.is_current(target):
            self.render_failed.emit(message)

    def _on_render_cancelled(self, target: RenderTarget) -> None:
        logger.debug("Render of page %d at %.2fx superseded", target.page, target.zoom)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def suggested_export_path(self, directory: str) -> str:
        return os.path.join(directory, self.session.export_file_name)

    def export_to(self, output_path: str) -> bool:
        """
        Export the committed annotations in the background.

        Returns:
            False if there is no document or an export is already running
        """
        if not self.session.is_loaded():
            self.export_finished.emit(False, "No PDF loaded to save")
            return False
        if self._export_worker is not None and self._export_worker.isRunning():
            logger.debug("Export already in progress")
            return False

        worker = ExportWorker(self.session.source_bytes(), output_path,
                              self.session.annotation_manager.committed,
                              exporter=self.exporter)
        worker.progress.connect(self.export_progress)
        worker.finished.connect(self.export_finished)
        self._export_worker = worker
        self._keep(worker)
        worker.start()
        return True

    def _keep(self, worker: QObject) -> None:
        self._workers = [w for w in self._workers if w.isRunning()]
        self._workers.append(worker)

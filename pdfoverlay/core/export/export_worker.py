"""
Background export of the annotated document to disk.
"""
import logging
import os
import shutil
import tempfile
from typing import Optional, Sequence

from PyQt5.QtCore import QThread, pyqtSignal

from ..annotations.models import Annotation
from ..errors import ExportError
from .pdf_exporter import PDFExporter

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """Worker thread for exporting annotations to PDF without freezing the UI.

    The document is written to a temp file next to the destination and moved
    into place only after it was fully written, so a failed export never
    leaves a partial file behind.
    """

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    annotation_progress = pyqtSignal(int, int)  # done, total annotations

    def __init__(self, source: bytes, output_path: str,
                 annotations: Sequence[Annotation],
                 exporter: Optional[PDFExporter] = None, parent=None):
        super().__init__(parent)
        self.source = source
        self.output_path = output_path
        self.annotations = tuple(annotations)
        self.exporter = exporter or PDFExporter()
        self.temp_path: Optional[str] = None

    def run(self) -> None:
        """Execute the export in a background thread."""
        try:
            self.progress.emit("Exporting annotations...")
            data = self.exporter.flatten(self.annotations, self.source,
                                         progress=self.annotation_progress.emit)

            self.progress.emit("Finalizing...")
            output_dir = os.path.dirname(os.path.abspath(self.output_path))
            temp_fd, self.temp_path = tempfile.mkstemp(suffix='.pdf', dir=output_dir)
            with os.fdopen(temp_fd, 'wb') as f:
                f.write(data)
            shutil.move(self.temp_path, self.output_path)
            self.temp_path = None
        except (ExportError, OSError) as e:
            self._remove_temp_file()
            logger.error("Export to %s failed: %s", self.output_path, e)
            self.finished.emit(False, f"Error during export: {e}")
            return

        logger.info("Exported %d annotations to %s", len(self.annotations), self.output_path)
        self.finished.emit(True, "Annotations saved successfully to PDF!")

    def _remove_temp_file(self) -> None:
        if self.temp_path and os.path.exists(self.temp_path):
            os.remove(self.temp_path)
        self.temp_path = None

"""
Wiring of the store, session and controllers for an interactive front end.
"""
import logging
from typing import Optional

from .config import AppConfig
from .controllers import AnnotationController, ViewController
from .core.annotations import AnnotationManager
from .core.document import DocumentSession, RasterizerConfig, initialize_rasterizer

logger = logging.getLogger(__name__)


class OverlayApp:
    """Owns one editing session and the controllers a UI talks to.

    The rasterizer is configured from the settings before the session is
    created. A UI needs a running ``QApplication`` (or ``QCoreApplication``)
    before building this.
    """

    def __init__(self, config: Optional[AppConfig] = None):
        self.config = config or AppConfig()

        self.rasterizer = initialize_rasterizer(RasterizerConfig.from_app_config(self.config))
        self.annotation_manager = AnnotationManager(self.config)
        self.session = DocumentSession(self.annotation_manager,
                                       rasterizer=self.rasterizer, config=self.config)

        self.annotation_controller = AnnotationController(self.annotation_manager, self.session)
        self.view_controller = ViewController(self.session)

        # A new document invalidates gestures and selection shown by the UI
        self.view_controller.document_loaded.connect(self._on_document_loaded)

    def _on_document_loaded(self, page_count: int) -> None:
        logger.debug("Document with %d pages loaded; resetting annotation view", page_count)
        self.annotation_controller.reset()

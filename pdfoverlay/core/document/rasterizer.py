"""
Page rasterization in background threads.

``initialize_rasterizer`` configures PyMuPDF once for the whole process and
returns the ``PageRasterizer`` handle, which is then passed to each
``DocumentSession``. Nothing here is reconfigured afterwards.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import fitz  # PyMuPDF
from PyQt5.QtCore import QThread, pyqtSignal
from PyQt5.QtGui import QImage

from ...config import AppConfig
from ..errors import RenderCancelled, RenderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterizerConfig:
    """Process-wide rendering options."""
    antialias: int = 8  # 0 (off) .. 8 (best)
    alpha: bool = False

    @classmethod
    def from_app_config(cls, config: AppConfig) -> 'RasterizerConfig':
        """Take the rendering options from the application settings."""
        return cls(antialias=config.antialias)


@dataclass(frozen=True)
class RenderTarget:
    """What a render request is for: document generation, 1-based page and zoom."""
    generation: int
    page: int
    zoom: float


def render_page_image(data: bytes, page: int, zoom: float,
                      is_cancelled: Callable[[], bool] = lambda: False,
                      alpha: bool = False) -> QImage:
    """
    Render one page of a PDF to an image.

    Args:
        data: Source PDF bytes
        page: 1-based page number
        zoom: Zoom factor (1.0 = 72 dpi)
        is_cancelled: Polled between steps; returning True aborts the render
        alpha: Render with a transparent background

    Returns:
        QImage sized to the page at ``zoom``

    Raises:
        RenderCancelled: If ``is_cancelled`` reported True
        RenderError: If the page could not be rendered
    """
    if is_cancelled():
        raise RenderCancelled(f"render of page {page} cancelled")

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        raise RenderError(f"cannot open document: {e}") from e

    try:
        if not 1 <= page <= doc.page_count:
            raise RenderError(f"page {page} does not exist")

        pdf_page = doc.load_page(page - 1)
        if is_cancelled():
            raise RenderCancelled(f"render of page {page} cancelled")

        mat = fitz.Matrix(zoom, zoom)
        pix = pdf_page.get_pixmap(matrix=mat, alpha=alpha)
    except (RenderCancelled, RenderError):
        raise
    except Exception as e:
        raise RenderError(f"error rendering page {page}: {e}") from e
    finally:
        doc.close()

    if is_cancelled():
        raise RenderCancelled(f"render of page {page} cancelled")

    fmt = QImage.Format_RGBA8888 if alpha else QImage.Format_RGB888
    img = QImage(pix.samples, pix.width, pix.height, pix.stride, fmt)
    # Detach from the pixmap buffer, which is freed with ``pix``
    return img.copy()


class RenderWorker(QThread):
    """Worker thread that renders one page and can be cancelled."""

    # Signals
    rendered = pyqtSignal(object, object)  # RenderTarget, QImage
    failed = pyqtSignal(object, str)  # RenderTarget, error message
    cancelled = pyqtSignal(object)  # RenderTarget

    def __init__(self, data: bytes, target: RenderTarget, alpha: bool = False, parent=None):
        super().__init__(parent)
        self._data = data
        self.target = target
        self._alpha = alpha
        self._cancelled = False

    def cancel(self) -> None:
        """Ask the render to stop. Cancellation is not an error."""
        self._cancelled = True

    def is_cancelled(self) -> bool:
        return self._cancelled

    def run(self) -> None:
        """Execute the render in background thread."""
        try:
            image = render_page_image(self._data, self.target.page, self.target.zoom,
                                      self.is_cancelled, self._alpha)
        except RenderCancelled:
            logger.debug("Render of page %d at %.2fx cancelled",
                         self.target.page, self.target.zoom)
            self.cancelled.emit(self.target)
            return
        except RenderError as e:
            logger.error("Render failed: %s", e)
            self.failed.emit(self.target, str(e))
            return

        self.rendered.emit(self.target, image)


class PageRasterizer:
    """Creates render workers using the process-wide configuration."""

    def __init__(self, config: RasterizerConfig):
        self.config = config

    def create_task(self, data: bytes, target: RenderTarget) -> RenderWorker:
        """Create a worker for ``target``; the caller starts it."""
        return RenderWorker(data, target, alpha=self.config.alpha)


_rasterizer: Optional[PageRasterizer] = None


def initialize_rasterizer(config: Optional[RasterizerConfig] = None) -> PageRasterizer:
    """
    Configure PyMuPDF rendering once per process.

    Args:
        config: Rendering options; defaults are used if omitted

    Returns:
        The process-wide rasterizer handle

    Raises:
        RuntimeError: If called again with a different configuration
    """
    global _rasterizer
    config = config or RasterizerConfig()

    if _rasterizer is not None:
        if _rasterizer.config != config:
            raise RuntimeError("Rasterizer already initialized with a different configuration")
        return _rasterizer

    fitz.TOOLS.set_aa_level(max(0, min(8, config.antialias)))
    _rasterizer = PageRasterizer(config)
    logger.debug("Rasterizer initialized: %s", config)
    return _rasterizer

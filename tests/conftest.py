"""Shared fixtures: generated PDFs, a Qt application and a fake rasterizer."""

from typing import List, Optional, Sequence, Tuple

import fitz
import pytest
from PyQt5.QtCore import QCoreApplication

from pdfoverlay.config import AppConfig
from pdfoverlay.core.annotations import AnnotationManager
from pdfoverlay.core.document import DocumentSession, RenderTarget


def make_pdf(sizes: Sequence[Tuple[float, float]] = ((612, 792),)) -> bytes:
    """Build a PDF with one blank page per (width, height)."""
    doc = fitz.open()
    for width, height in sizes:
        doc.new_page(width=width, height=height)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def pdf_bytes() -> bytes:
    """Two letter pages followed by one A4 page."""
    return make_pdf([(612, 792), (612, 792), (595, 842)])


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def manager(config: AppConfig) -> AnnotationManager:
    return AnnotationManager(config)


class FakeTask:
    """Stands in for a RenderWorker without starting a thread."""

    def __init__(self, target: RenderTarget):
        self.target = target
        self.started = False
        self.cancelled = False
        self.running = False

    def start(self) -> None:
        self.started = True
        self.running = True

    def cancel(self) -> None:
        self.cancelled = True

    def isRunning(self) -> bool:
        return self.running


class FakeRasterizer:
    def __init__(self):
        self.tasks: List[FakeTask] = []

    def create_task(self, data: bytes, target: RenderTarget) -> FakeTask:
        task = FakeTask(target)
        self.tasks.append(task)
        return task

    @property
    def last(self) -> Optional[FakeTask]:
        return self.tasks[-1] if self.tasks else None


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def session(manager: AnnotationManager, rasterizer: FakeRasterizer,
            config: AppConfig) -> DocumentSession:
    return DocumentSession(manager, rasterizer=rasterizer, config=config)

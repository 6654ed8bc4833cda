"""
Core business logic for PDF Overlay.
"""
from .annotations import Annotation, AnnotationManager, TextAlign, VerticalAlign
from .document import DocumentSession
from .errors import ExportError, LoadError, RenderCancelled, RenderError
from .export import PDFExporter

__all__ = [
    'Annotation',
    'AnnotationManager',
    'TextAlign',
    'VerticalAlign',
    'DocumentSession',
    'ExportError',
    'LoadError',
    'RenderCancelled',
    'RenderError',
    'PDFExporter',
]

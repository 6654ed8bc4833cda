"""
Export of annotated documents.
"""
from .pdf_exporter import (
    BoxLayout,
    ExportResult,
    FillRect,
    PDFExporter,
    TextRun,
    layout_annotation,
)
from .naming import annotated_file_name
from .export_worker import ExportWorker

__all__ = [
    'BoxLayout',
    'ExportResult',
    'FillRect',
    'PDFExporter',
    'TextRun',
    'annotated_file_name',
    'layout_annotation',
    'ExportWorker',
]

"""
Exception types raised by the document, rendering and export layers.
"""


class PdfOverlayError(Exception):
    """Base class for all pdfoverlay errors."""


class LoadError(PdfOverlayError):
    """Source bytes could not be opened as a PDF document."""


class RenderCancelled(PdfOverlayError):
    """A rasterization request was superseded before it finished.

    This is routine and never reported as a failure.
    """


class RenderError(PdfOverlayError):
    """A page could not be rasterized."""


class ExportError(PdfOverlayError):
    """The annotated document could not be produced."""

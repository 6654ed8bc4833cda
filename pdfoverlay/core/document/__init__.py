"""
Document loading, rendering and the PDF backend.
"""
from .backend import DocumentInfo, FitzDocument, parse_document, resolve_font
from .rasterizer import (
    PageRasterizer,
    RasterizerConfig,
    RenderTarget,
    RenderWorker,
    initialize_rasterizer,
    render_page_image,
)
from .session import DocumentSession, LoadWorker

__all__ = [
    'DocumentInfo',
    'FitzDocument',
    'parse_document',
    'resolve_font',
    'PageRasterizer',
    'RasterizerConfig',
    'RenderTarget',
    'RenderWorker',
    'initialize_rasterizer',
    'render_page_image',
    'DocumentSession',
    'LoadWorker',
]

"""
Text box annotation system.
"""
from .models import (
    ALLOWED_FONT_SIZES,
    Annotation,
    TextAlign,
    VerticalAlign,
    normalize_font_size,
)
from .undo_redo import History
from .manager import AnnotationManager
from .gesture import DragGesture, ResizeGesture

__all__ = [
    'ALLOWED_FONT_SIZES',
    'Annotation',
    'TextAlign',
    'VerticalAlign',
    'normalize_font_size',
    'History',
    'AnnotationManager',
    'DragGesture',
    'ResizeGesture',
]

"""
Controllers connecting the core to a Qt user interface.
"""
from .annotation_controller import AnnotationController
from .view_controller import ViewController

__all__ = ['AnnotationController', 'ViewController']

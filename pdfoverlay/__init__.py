"""
PDF Overlay: positioned text boxes drawn onto PDF pages.
"""

__version__ = "0.1.0"

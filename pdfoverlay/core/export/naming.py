"""
File names for exported documents.
"""
import os
from typing import Optional

DEFAULT_FILE_NAME = "document.pdf"
EXPORT_SUFFIX = "_annotated"


def annotated_file_name(file_name: Optional[str]) -> str:
    """
    Derive the export file name by inserting ``_annotated`` before the extension.

    Args:
        file_name: Original file name (a path is reduced to its base name)

    Returns:
        e.g. "report_annotated.pdf" for "report.pdf"
    """
    base_name = os.path.basename(file_name or "") or DEFAULT_FILE_NAME
    stem, ext = os.path.splitext(base_name)
    return f"{stem}{EXPORT_SUFFIX}{ext or '.pdf'}"

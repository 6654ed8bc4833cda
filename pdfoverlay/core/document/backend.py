"""
PDF backend used for loading and flattening.

The export code talks to the small capability contract defined by
``DocumentBackend`` and ``PageHandle`` with bottom-left-origin coordinates,
the usual PDF convention. ``FitzDocument`` implements it over PyMuPDF, which
works top-left, and does the conversion in one place.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import fitz  # PyMuPDF

from ..errors import LoadError

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]

# Font families offered in the text box editor mapped onto PDF base fonts
FONT_MAP = {
    'arial': 'helv',
    'helvetica': 'helv',
    'times new roman': 'tiro',
    'times': 'tiro',
    'georgia': 'tiro',
    'courier new': 'cour',
    'courier': 'cour',
}
DEFAULT_FONT = 'helv'


class BackendError(Exception):
    """Raised when the backend cannot open, draw on or serialize a document."""


def resolve_font(family: Optional[str]) -> str:
    """
    Map a free-form font family name onto a PDF base-14 font.

    Args:
        family: Family name such as "Arial" or "Times New Roman"

    Returns:
        PyMuPDF font name, Helvetica for anything unknown
    """
    if not family:
        return DEFAULT_FONT
    return FONT_MAP.get(family.strip().lower(), DEFAULT_FONT)


class PageHandle(Protocol):
    def get_size(self) -> Tuple[float, float]: ...

    def draw_rectangle(self, x: float, y: float, width: float, height: float,
                       color: RGB) -> None: ...

    def draw_text(self, text: str, x: float, y: float, size: float,
                  color: RGB, font: str = DEFAULT_FONT) -> None: ...

    def text_width(self, text: str, size: float, font: str = DEFAULT_FONT) -> float: ...


class DocumentBackend(Protocol):
    @property
    def page_count(self) -> int: ...

    def get_page(self, number: int) -> PageHandle: ...

    def save(self) -> bytes: ...

    def close(self) -> None: ...


class FitzPage:
    """A PyMuPDF page seen through bottom-left-origin coordinates."""

    def __init__(self, page: fitz.Page):
        self._page = page

    def get_size(self) -> Tuple[float, float]:
        rect = self._page.rect
        return rect.width, rect.height

    def draw_rectangle(self, x: float, y: float, width: float, height: float,
                       color: RGB) -> None:
        """Fill a rectangle whose bottom-left corner is at (x, y)."""
        page_height = self._page.rect.height
        rect = fitz.Rect(x, page_height - y - height, x + width, page_height - y)

        shape = self._page.new_shape()
        shape.draw_rect(rect)
        shape.finish(color=None, fill=color, width=0)
        shape.commit()

    def draw_text(self, text: str, x: float, y: float, size: float,
                  color: RGB, font: str = DEFAULT_FONT) -> None:
        """Draw one line of text with its baseline starting at (x, y)."""
        page_height = self._page.rect.height
        self._page.insert_text(
            fitz.Point(x, page_height - y),
            text,
            fontsize=size,
            fontname=font,
            color=color,
        )

    def text_width(self, text: str, size: float, font: str = DEFAULT_FONT) -> float:
        """Advance width of ``text`` in points."""
        return fitz.get_text_length(text, fontname=font, fontsize=size)


class FitzDocument:
    """Editable in-memory PDF backed by PyMuPDF."""

    def __init__(self, data: bytes):
        """
        Open a document from bytes.

        Raises:
            BackendError: If the bytes are not an openable PDF
        """
        try:
            self._doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise BackendError(f"cannot open document: {e}") from e

        if self._doc.needs_pass and not self._doc.authenticate(""):
            self._doc.close()
            raise BackendError("document is password protected")

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def get_page(self, number: int) -> FitzPage:
        """
        Get a page by 1-based number.

        Raises:
            IndexError: If the page does not exist
        """
        if not 1 <= number <= self._doc.page_count:
            raise IndexError(f"page {number} out of range 1..{self._doc.page_count}")
        return FitzPage(self._doc.load_page(number - 1))

    def save(self) -> bytes:
        """Serialize the document; output does not get a fresh file id."""
        try:
            return self._doc.tobytes(garbage=4, deflate=True, no_new_id=True)
        except Exception as e:
            raise BackendError(f"cannot serialize document: {e}") from e

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> 'FitzDocument':
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@dataclass(frozen=True)
class DocumentInfo:
    """Metadata extracted when a document is loaded."""
    page_count: int
    page_sizes: Tuple[Tuple[float, float], ...]  # (width, height) per page, in points


def parse_document(data: bytes) -> DocumentInfo:
    """
    Validate source bytes and read their page metadata.

    Args:
        data: Raw PDF bytes

    Returns:
        DocumentInfo for the document

    Raises:
        LoadError: If the bytes are empty, corrupt, encrypted or have no pages
    """
    if not data:
        raise LoadError("document is empty")

    try:
        with FitzDocument(data) as doc:
            sizes = tuple(doc.get_page(n).get_size()
                          for n in range(1, doc.page_count + 1))
    except BackendError as e:
        raise LoadError(str(e)) from e
    except Exception as e:
        raise LoadError(f"cannot read document: {e}") from e

    if not sizes:
        raise LoadError("document has no pages")

    logger.debug("Parsed document with %d pages", len(sizes))
    return DocumentInfo(page_count=len(sizes), page_sizes=sizes)


"""
Flattening of text box annotations into PDF page content.

Layout is computed by pure functions in PDF's bottom-left-origin space and
then drawn through the document backend. Without exact alignment, centered
text starts at the middle of the box and right-aligned text starts 5pt from
its right edge.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ...config import AppConfig
from ..annotations.models import Annotation, TextAlign, VerticalAlign, normalize_font_size
from ..document.backend import BackendError, DocumentBackend, FitzDocument, resolve_font
from ..errors import ExportError
from .naming import annotated_file_name

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]
TextMeasure = Callable[[str, float, str], float]  # text, size, font -> width

LINE_HEIGHT_FACTOR = 1.2
BOTTOM_PADDING_FACTOR = 0.2
HORIZONTAL_PADDING = 5.0


@dataclass(frozen=True)
class FillRect:
    """A filled rectangle; (x, y) is its bottom-left corner."""
    x: float
    y: float
    width: float
    height: float
    color: RGB


@dataclass(frozen=True)
class TextRun:
    """One line of text; (x, y) is the start of its baseline."""
    text: str
    x: float
    y: float
    size: int
    color: RGB
    font: str


@dataclass(frozen=True)
class BoxLayout:
    """Drawing operations for one annotation."""
    fill: Optional[FillRect]
    runs: Tuple[TextRun, ...]


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    file_name: str


def parse_hex_color(value: Optional[str], default: RGB = (0.0, 0.0, 0.0)) -> RGB:
    """
    Parse ``#RRGGBB`` (or ``#RGB``) into normalized 0-1 RGB.

    Args:
        value: Hex color string
        default: Returned for anything unparsable

    Returns:
        Tuple of red, green, blue in [0, 1]
    """
    text = (value or "").strip().lstrip('#')
    if len(text) == 3:
        text = ''.join(c * 2 for c in text)
    try:
        if len(text) != 6:
            raise ValueError(text)
        return tuple(int(text[i:i + 2], 16) / 255 for i in (0, 2, 4))
    except ValueError:
        logger.warning("Invalid color %r, using %s", value, default)
        return default


def split_lines(text: str) -> List[str]:
    """Split on line breaks, keeping empty lines so they take up space."""
    return text.replace('\r\n', '\n').replace('\r', '\n').split('\n')


def compute_vertical_offset(vertical_align: VerticalAlign, box_height: float,
                            line_count: int, font_size: float) -> float:
    """
    Baseline of the first line, measured up from the bottom of the box.

    Args:
        vertical_align: top, middle or bottom
        box_height: Height of the box in points
        line_count: Number of lines, blank ones included
        font_size: Normalized font size

    Returns:
        Offset from the box's bottom edge
    """
    line_height = font_size * LINE_HEIGHT_FACTOR
    total_text_height = line_count * line_height

    if vertical_align == VerticalAlign.MIDDLE:
        return box_height / 2 + total_text_height / 2 - line_height
    if vertical_align == VerticalAlign.BOTTOM:
        return total_text_height - BOTTOM_PADDING_FACTOR * font_size
    return box_height - line_height


def compute_line_x(text_align: TextAlign, origin_x: float, width: float,
                   text_width: Optional[float] = None) -> float:
    """
    Horizontal start of a line.

    Without ``text_width`` center and right use the fixed approximation; with
    it the line is truly centered or right-justified.
    """
    if text_align == TextAlign.CENTER:
        if text_width is None:
            return origin_x + width / 2
        return origin_x + (width - text_width) / 2
    if text_align == TextAlign.RIGHT:
        if text_width is None:
            return origin_x + width - HORIZONTAL_PADDING
        return origin_x + width - text_width - HORIZONTAL_PADDING
    return origin_x + HORIZONTAL_PADDING


def layout_annotation(annotation: Annotation, page_height: float,
                      measure: Optional[TextMeasure] = None) -> BoxLayout:
    """
    Compute the drawing operations for an annotation.

    Args:
        annotation: Text box in document space (top-left origin)
        page_height: Height of the target page in points
        measure: Optional text width function for exact alignment

    Returns:
        BoxLayout in bottom-left-origin page space
    """
    origin_x = annotation.x
    origin_y = page_height - annotation.y - annotation.height

    fill = None
    if annotation.has_background:
        fill = FillRect(origin_x, origin_y, annotation.width, annotation.height,
                        parse_hex_color(annotation.background_color, (1.0, 1.0, 1.0)))

    runs: List[TextRun] = []
    if annotation.text.strip():
        font_size = normalize_font_size(annotation.font_size)
        font = resolve_font(annotation.font_family)
        color = parse_hex_color(annotation.color)
        lines = split_lines(annotation.text)
        line_height = font_size * LINE_HEIGHT_FACTOR
        offset = compute_vertical_offset(annotation.vertical_align, annotation.height,
                                         len(lines), font_size)

        for index, line in enumerate(lines):
            if not line.strip():
                continue
            text_width = None
            if measure is not None and annotation.text_align != TextAlign.LEFT:
                text_width = measure(line, font_size, font)
            runs.append(TextRun(
                text=line,
                x=compute_line_x(annotation.text_align, origin_x, annotation.width, text_width),
                y=origin_y + offset - index * line_height,
                size=font_size,
                color=color,
                font=font,
            ))

    return BoxLayout(fill=fill, runs=tuple(runs))


class PDFExporter:
    """Writes annotations into a copy of the source document."""

    def __init__(self, config: Optional[AppConfig] = None,
                 backend_factory: Callable[[bytes], DocumentBackend] = FitzDocument):
        self.config = config or AppConfig()
        self.backend_factory = backend_factory

    def flatten(self, annotations: Sequence[Annotation], source: bytes,
                progress: Optional[Callable[[int, int], None]] = None) -> bytes:
        """
        Draw every annotation onto its page and serialize the result.

        Annotations whose page does not exist are skipped.

        Args:
            annotations: Committed annotation list
            source: Original document bytes
            progress: Optional callback receiving (done, total)

        Returns:
            The annotated document

        Raises:
            ExportError: If the source cannot be opened, drawn on or saved
        """
        try:
            doc = self.backend_factory(bytes(source))
        except BackendError as e:
            raise ExportError(str(e)) from e

        total = len(annotations)
        try:
            for done, annotation in enumerate(annotations, start=1):
                self._draw(doc, annotation)
                if progress is not None:
                    progress(done, total)
            return doc.save()
        except BackendError as e:
            raise ExportError(str(e)) from e
        except Exception as e:
            raise ExportError(f"failed to flatten annotations: {e}") from e
        finally:
            doc.close()

    def _draw(self, doc: DocumentBackend, annotation: Annotation) -> None:
        if not 1 <= annotation.page <= doc.page_count:
            logger.warning("Skipping annotation %s: page %d not in document (%d pages)",
                           annotation.id, annotation.page, doc.page_count)
            return

        page = doc.get_page(annotation.page)
        _, page_height = page.get_size()
        measure = page.text_width if self.config.exact_alignment else None
        layout = layout_annotation(annotation, page_height, measure)

        if layout.fill is not None:
            fill = layout.fill
            page.draw_rectangle(fill.x, fill.y, fill.width, fill.height, fill.color)
        for run in layout.runs:
            page.draw_text(run.text, run.x, run.y, run.size, run.color, run.font)

    def export(self, annotations: Iterable[Annotation], source: bytes,
               file_name: Optional[str] = None) -> ExportResult:
        """
        Produce the annotated document and its suggested file name.

        Raises:
            ExportError: If flattening fails
        """
        data = self.flatten(tuple(annotations), source)
        return ExportResult(data=data, file_name=annotated_file_name(file_name))

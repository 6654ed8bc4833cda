"""
Data models for text box annotations.
"""
import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

ALLOWED_FONT_SIZES = (6, 8, 10, 12, 14, 16, 18, 20, 24, 28, 32)
FALLBACK_FONT_SIZE = 14
TRANSPARENT = "transparent"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalAlign(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class Annotation:
    """A positioned, styled text box on one page of a document.

    Geometry is stored in document space (PDF points, top-left origin) and is
    never rescaled by zoom changes.
    """
    id: str
    x: float
    y: float
    width: float
    height: float
    page: int  # 1-based page number
    text: str = "Type here..."
    font_size: float = 14
    font_family: str = "Arial"
    color: str = "#000000"
    background_color: str = "#ffffff"
    text_align: TextAlign = TextAlign.LEFT
    vertical_align: VerticalAlign = VerticalAlign.TOP

    @property
    def has_background(self) -> bool:
        """True when the box should be filled on export."""
        return bool(self.background_color) and \
            self.background_color.strip().lower() != TRANSPARENT

    def contains_point(self, x: float, y: float) -> bool:
        """Check if a document-space point lies within this box."""
        return (self.x <= x <= self.x + self.width and
                self.y <= y <= self.y + self.height)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the flat camelCase wire shape used at the UI boundary."""
        return {
            'id': self.id,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'text': self.text,
            'fontSize': self.font_size,
            'fontFamily': self.font_family,
            'color': self.color,
            'backgroundColor': self.background_color,
            'textAlign': self.text_align.value,
            'verticalAlign': self.vertical_align.value,
            'page': self.page,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> 'Annotation':
        """
        Create an annotation from its wire shape.

        Required keys are ``id``, ``x``, ``y``, ``width``, ``height`` and
        ``page``; the styling keys fall back to the defaults. Keys outside
        the wire shape (such as ``type``) are ignored.

        Raises:
            KeyError: If a required key is missing
            ValueError: If a value has the wrong shape
        """
        changes = coerce_changes(data, strict=True)
        missing = [name for name in ('id', 'x', 'y', 'width', 'height', 'page')
                   if name not in changes]
        if missing:
            raise KeyError(f"Annotation is missing fields: {', '.join(missing)}")
        return Annotation(**changes)


# Wire (camelCase) names mapped onto dataclass field names.
WIRE_TO_FIELD = {
    'fontSize': 'font_size',
    'fontFamily': 'font_family',
    'backgroundColor': 'background_color',
    'textAlign': 'text_align',
    'verticalAlign': 'vertical_align',
}

FIELD_NAMES = frozenset(f.name for f in fields(Annotation))
NUMERIC_FIELDS = frozenset(('x', 'y', 'width', 'height', 'font_size'))
STRING_FIELDS = frozenset(('id', 'text', 'font_family', 'color', 'background_color'))


def normalize_font_size(size: Any) -> int:
    """
    Map a font size onto the allowed set.

    Args:
        size: Requested font size

    Returns:
        The size itself when it is allowed, otherwise 14
    """
    if isinstance(size, (int, float)) and not isinstance(size, bool) \
            and size in ALLOWED_FONT_SIZES:
        return int(size)
    return FALLBACK_FONT_SIZE


def _coerce_value(name: str, value: Any) -> Any:
    """Return ``value`` shaped for field ``name`` or raise ValueError."""
    if name in NUMERIC_FIELDS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{name} must be a number, got {value!r}")
        return value
    if name == 'page':
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"page must be an integer, got {value!r}")
        return value
    if name in STRING_FIELDS:
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string, got {value!r}")
        return value
    if name == 'text_align':
        return TextAlign(value)
    if name == 'vertical_align':
        return VerticalAlign(value)
    raise ValueError(f"Unknown annotation field: {name}")


def coerce_changes(changes: Mapping[str, Any], strict: bool = False,
                   allow_id: bool = True) -> Dict[str, Any]:
    """
    Normalize a partial set of annotation fields.

    Accepts either wire (camelCase) or field (snake_case) names.

    Args:
        changes: Partial field values
        strict: Raise on bad input instead of dropping it
        allow_id: Whether ``id`` may appear in the result

    Returns:
        Dictionary keyed by dataclass field name
    """
    result: Dict[str, Any] = {}
    for key, value in changes.items():
        name = WIRE_TO_FIELD.get(key, key)
        if name not in FIELD_NAMES:
            if strict:
                # Extra wire keys are tolerated when reading whole objects
                continue
            logger.warning("Dropping unknown annotation field %r", key)
            continue
        if name == 'id' and not allow_id:
            logger.warning("Annotation id is immutable; ignoring change")
            continue
        try:
            result[name] = _coerce_value(name, value)
        except ValueError:
            if strict:
                raise
            logger.warning("Dropping %s=%r: wrong type", key, value)
    return result


def find_annotation(annotations, annotation_id: Optional[str]) -> Optional[Annotation]:
    """Return the annotation with ``annotation_id`` or None."""
    if annotation_id is None:
        return None
    for ann in annotations:
        if ann.id == annotation_id:
            return ann
    return None

"""
Annotation Models

Value types shared by the annotation engine: points, affine transforms,
colors, font weights and the annotation request itself.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from functools import cached_property
from typing import NamedTuple, Optional

from ..errors import InvalidArgumentError


class Point(NamedTuple):
    """A position in page units (1/96 inch)."""

    x: float
    y: float


@dataclass(frozen=True)
class Matrix:
    """
    Affine transform using the XPS row-vector convention.

    A point (x, y) maps to:
        x' = x * m11 + y * m21 + offset_x
        y' = x * m12 + y * m22 + offset_y
    """

    m11: float = 1.0
    m12: float = 0.0
    m21: float = 0.0
    m22: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @classmethod
    def translation(cls, dx: float, dy: float) -> "Matrix":
        return cls(offset_x=dx, offset_y=dy)

    @classmethod
    def from_xps(cls, value: str) -> "Matrix":
        """
        Parse an XPS matrix string ("m11,m12,m21,m22,offsetX,offsetY").

        Raises:
            InvalidArgumentError: If the string does not hold six numbers
        """
        parts = [p for p in value.replace(",", " ").split() if p]
        if len(parts) != 6:
            raise InvalidArgumentError(f"Invalid matrix '{value}': expected 6 numbers", "matrix")
        try:
            return cls(*(float(p) for p in parts))
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid matrix '{value}': {e}", "matrix") from e

    def transform(self, point: Point) -> Point:
        x, y = point
        return Point(
            x * self.m11 + y * self.m21 + self.offset_x,
            x * self.m12 + y * self.m22 + self.offset_y,
        )

    def multiply(self, other: "Matrix") -> "Matrix":
        """Return the transform that applies ``self`` first, then ``other``."""
        return Matrix(
            m11=self.m11 * other.m11 + self.m12 * other.m21,
            m12=self.m11 * other.m12 + self.m12 * other.m22,
            m21=self.m21 * other.m11 + self.m22 * other.m21,
            m22=self.m21 * other.m12 + self.m22 * other.m22,
            offset_x=self.offset_x * other.m11 + self.offset_y * other.m21 + other.offset_x,
            offset_y=self.offset_x * other.m12 + self.offset_y * other.m22 + other.offset_y,
        )

    @property
    def is_identity(self) -> bool:
        return self == IDENTITY

    def to_xps(self) -> str:
        return ",".join(
            format_number(v)
            for v in (self.m11, self.m12, self.m21, self.m22, self.offset_x, self.offset_y)
        )


IDENTITY = Matrix()


def format_number(value: float) -> str:
    # XPS rejects exponent notation in some consumers
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


# Subset of the named colors understood by XPS consumers
NAMED_COLORS = {
    "black": "#FF000000",
    "white": "#FFFFFFFF",
    "red": "#FFFF0000",
    "green": "#FF008000",
    "lime": "#FF00FF00",
    "blue": "#FF0000FF",
    "navy": "#FF000080",
    "brown": "#FFA52A2A",
    "gray": "#FF808080",
    "grey": "#FF808080",
    "darkgray": "#FFA9A9A9",
    "orange": "#FFFFA500",
    "yellow": "#FFFFFF00",
    "purple": "#FF800080",
    "magenta": "#FFFF00FF",
    "cyan": "#FF00FFFF",
    "maroon": "#FF800000",
    "darkred": "#FF8B0000",
    "darkgreen": "#FF006400",
    "darkblue": "#FF00008B",
    "transparent": "#00FFFFFF",
}


@dataclass(frozen=True)
class Color:
    """An sRGB color with alpha, each channel 0-255."""

    a: int
    r: int
    g: int
    b: int

    def __post_init__(self):
        for channel in (self.a, self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise InvalidArgumentError(f"Color channel out of range: {channel}", "color")

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int, a: int = 255) -> "Color":
        return cls(a=a, r=r, g=g, b=b)

    @classmethod
    def from_string(cls, value: str) -> "Color":
        """
        Parse "#RRGGBB", "#AARRGGBB" or a named color such as "Blue".

        Raises:
            InvalidArgumentError: If the value is not a recognised color
        """
        text = (value or "").strip()
        named = NAMED_COLORS.get(text.lower())
        if named:
            text = named

        digits = text[1:] if text.startswith("#") else ""
        if len(digits) == 6:
            digits = "FF" + digits
        if len(digits) != 8:
            raise InvalidArgumentError(f"Unrecognised color '{value}'", "color")
        try:
            a, r, g, b = (int(digits[i:i + 2], 16) for i in range(0, 8, 2))
        except ValueError as e:
            raise InvalidArgumentError(f"Unrecognised color '{value}'", "color") from e
        return cls(a=a, r=r, g=g, b=b)

    def to_xps(self) -> str:
        return f"#{self.a:02X}{self.r:02X}{self.g:02X}{self.b:02X}"


BLACK = Color(255, 0, 0, 0)


class FontWeight(IntEnum):
    """OpenType weight classes."""

    THIN = 100
    EXTRA_LIGHT = 200
    LIGHT = 300
    NORMAL = 400
    MEDIUM = 500
    SEMI_BOLD = 600
    BOLD = 700
    EXTRA_BOLD = 800
    BLACK = 900
    EXTRA_BLACK = 950


class PositioningMethod(Enum):
    """How an annotation is positioned on the page."""

    # Never configured; such annotations are not drawn
    UNKNOWN = "unknown"
    # Offset from the origin of a matched text label
    LABEL_RELATIVE = "label_relative"
    # Offset from the upper left corner of the page
    ABSOLUTE = "absolute"


class LabelMatchMethod(Enum):
    """How the anchor label is matched against page text."""

    EXACT_MATCH = "exact_match"
    EXACT_MATCH_IGNORE_CASE = "exact_match_ignore_case"
    REGULAR_EXPRESSION = "regular_expression"


# page_number value for annotations applied to every page
ALL_PAGES = None


@dataclass(frozen=True)
class Annotation:
    """
    One piece of text to place on a document.

    ``page_number`` is zero-based; ``None`` applies the annotation to every page.
    ``position`` is absolute for ``ABSOLUTE`` positioning and an offset from the
    label origin for ``LABEL_RELATIVE``. ``text_size`` is in 1/96 inch units.
    """

    text: str
    page_number: Optional[int] = ALL_PAGES
    position_method: PositioningMethod = PositioningMethod.UNKNOWN
    position: Point = Point(0.0, 0.0)
    anchor_label: Optional[str] = None
    match_method: Optional[LabelMatchMethod] = None
    foreground_color: Optional[Color] = None
    text_size: float = 12.0
    font_weight: Optional[FontWeight] = None
    font_name: Optional[str] = None
    is_italic: bool = False
    custom_transform: Optional[Matrix] = None


@dataclass(frozen=True)
class TextRun:
    """A run of text already present on a page."""

    content: str
    origin: Point
    render_transform: Matrix = field(default=IDENTITY)

    @cached_property
    def lower_content(self) -> str:
        return self.content.lower()

    @property
    def anchor_point(self) -> Point:
        """Origin of the run in page coordinates."""
        return self.render_transform.transform(self.origin)

"""
Style Resolver

Fills in default text styling for annotations and hands out shared
paint brushes, one per distinct color.
"""

from dataclasses import dataclass
from typing import Optional

from .models import BLACK, IDENTITY, Annotation, Color, FontWeight, Matrix

DEFAULT_FONT_FAMILY = "Arial"


class SolidColorBrush:
    """Paint handle for a solid color. Compared by identity."""

    __slots__ = ("color",)

    def __init__(self, color: Color):
        self.color = color

    def to_xps(self) -> str:
        return self.color.to_xps()

    def __repr__(self):
        return f"SolidColorBrush({self.color.to_xps()})"


BLACK_BRUSH = SolidColorBrush(BLACK)


@dataclass(frozen=True)
class TextStyle:
    """Resolved styling of one annotation."""

    brush: SolidColorBrush
    size: float
    weight: FontWeight
    family: str
    is_italic: bool
    transform: Matrix


class StyleResolver:
    """
    Resolves optional style fields to concrete values.

    Brushes are cached per color for the lifetime of the resolver, so the
    cache grows with the number of distinct colors, not with annotations.
    """

    def __init__(self, default_font_family: str = DEFAULT_FONT_FAMILY):
        self.default_font_family = default_font_family
        self._brush_cache: dict[Color, SolidColorBrush] = {}

    def resolve_paint(self, color: Optional[Color]) -> SolidColorBrush:
        if color is None:
            return BLACK_BRUSH

        brush = self._brush_cache.get(color)
        if brush is None:
            brush = SolidColorBrush(color)
            self._brush_cache[color] = brush
        return brush

    def resolve_weight(self, weight: Optional[FontWeight]) -> FontWeight:
        return FontWeight.NORMAL if weight is None else FontWeight(weight)

    def resolve_family(self, font_name: Optional[str]) -> str:
        return font_name if font_name else self.default_font_family

    def resolve(self, annotation: Annotation) -> TextStyle:
        return TextStyle(
            brush=self.resolve_paint(annotation.foreground_color),
            size=annotation.text_size,
            weight=self.resolve_weight(annotation.font_weight),
            family=self.resolve_family(annotation.font_name),
            is_italic=annotation.is_italic,
            transform=annotation.custom_transform or IDENTITY,
        )

    @property
    def cached_brush_count(self) -> int:
        return len(self._brush_cache)

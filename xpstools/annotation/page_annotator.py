"""
Page Annotator

Builds the overlay layer for a single page: page-specific annotations are
drawn first, common annotations on top of them.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..config import OVERLAY_LAYER_NAME
from .anchor_matcher import AnchorMatcher, describe_matcher
from .annotation_index import AnnotationIndex, PreparedAnnotation
from .models import FontWeight, Matrix, Point, TextRun
from .style_resolver import SolidColorBrush, StyleResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageLayout:
    """Measured state of a page: its size and the text runs on it."""

    width: float
    height: float
    text_runs: tuple[TextRun, ...] = ()


class LayoutSource(Protocol):
    """Anything that can lay out a page on demand."""

    def layout(self) -> PageLayout:
        ...


@dataclass(frozen=True)
class OverlayText:
    """One piece of annotation text placed on the overlay layer."""

    text: str
    left: float
    top: float
    brush: SolidColorBrush
    font_size: float
    font_weight: FontWeight
    font_family: str
    is_italic: bool
    render_transform: Matrix

    @property
    def position(self) -> Point:
        return Point(self.left, self.top)


@dataclass(frozen=True)
class OverlayLayer:
    """The generated annotation canvas of a page."""

    width: float
    height: float
    elements: tuple[OverlayText, ...] = field(default_factory=tuple)
    name: str = OVERLAY_LAYER_NAME

    @property
    def is_empty(self) -> bool:
        return not self.elements


class PageAnnotator:
    """
    Applies indexed annotations to one page at a time.

    Pages without any candidate annotation are skipped before layout, so
    untouched pages cost nothing.
    """

    def __init__(
        self,
        index: AnnotationIndex,
        style_resolver: Optional[StyleResolver] = None,
        anchor_matcher: Optional[AnchorMatcher] = None
    ):
        self.index = index
        self.style_resolver = style_resolver or StyleResolver()
        self.anchor_matcher = anchor_matcher or AnchorMatcher()

    def annotate(self, page_number: int, page: LayoutSource) -> Optional[OverlayLayer]:
        """
        Build the overlay layer for a page.

        Args:
            page_number: Zero-based page index
            page: Source of the page layout

        Returns:
            OverlayLayer (possibly empty) or None if the page has no candidates
        """
        if not self.index.has_candidates(page_number):
            return None

        candidates = self.index.candidates_for(page_number)
        layout = page.layout()
        elements: list[OverlayText] = []

        for prepared in candidates:
            elements.extend(self._place(prepared, layout.text_runs))

        logger.debug(
            f"Page {page_number}: {len(candidates)} candidate annotations, "
            f"{len(elements)} elements placed"
        )

        return OverlayLayer(
            width=layout.width,
            height=layout.height,
            elements=tuple(elements),
        )

    def _place(self, prepared: PreparedAnnotation, text_runs) -> list[OverlayText]:
        annotation = prepared.annotation
        points = list(self.anchor_matcher.locate(prepared, text_runs))
        if not points:
            logger.debug(
                f"No position for '{annotation.text}' "
                f"(label: {describe_matcher(prepared.matcher)})"
            )
            return []

        style = self.style_resolver.resolve(annotation)
        return [
            OverlayText(
                text=annotation.text,
                left=point.x,
                top=point.y,
                brush=style.brush,
                font_size=style.size,
                font_weight=style.weight,
                font_family=style.family,
                is_italic=style.is_italic,
                render_transform=style.transform,
            )
            for point in points
        ]

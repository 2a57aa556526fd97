"""
XPS Annotation Service

This module places text annotations on the pages of XPS documents.

Components:
- Annotation: Immutable description of one annotation (models)
- AnnotationIndex: Groups annotations by page, plus common annotations
- AnchorMatcher: Resolves absolute or label-relative positions on a page
- StyleResolver: Applies style defaults and caches brushes per color
- PageAnnotator: Builds the overlay layer for one page
- XpsEditor: Main orchestrator that annotates a whole document
- load_annotations: Reads annotation definitions from YAML/JSON
"""

from .models import (
    ALL_PAGES,
    Annotation,
    Color,
    FontWeight,
    LabelMatchMethod,
    Matrix,
    Point,
    PositioningMethod,
    TextRun,
)
from .anchor_matcher import AnchorMatcher, build_label_matcher
from .annotation_index import AnnotationIndex, PreparedAnnotation
from .style_resolver import SolidColorBrush, StyleResolver, TextStyle
from .page_annotator import OverlayLayer, OverlayText, PageAnnotator, PageLayout
from .annotation_loader import load_annotations, parse_annotations
from .xps_editor import XpsEditor

__all__ = [
    "ALL_PAGES",
    "Annotation",
    "Color",
    "FontWeight",
    "LabelMatchMethod",
    "Matrix",
    "Point",
    "PositioningMethod",
    "TextRun",
    "AnchorMatcher",
    "build_label_matcher",
    "AnnotationIndex",
    "PreparedAnnotation",
    "SolidColorBrush",
    "StyleResolver",
    "TextStyle",
    "OverlayLayer",
    "OverlayText",
    "PageAnnotator",
    "PageLayout",
    "load_annotations",
    "parse_annotations",
    "XpsEditor",
]

"""
Annotation Index

Groups annotation requests by target page once, at editor construction,
so each page can look up its annotations without rescanning the full set.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import InvalidArgumentError
from .anchor_matcher import LabelMatcher, build_label_matcher
from .models import Annotation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedAnnotation:
    """An annotation together with its pre-built label matcher."""

    annotation: Annotation
    matcher: LabelMatcher

    @classmethod
    def prepare(cls, annotation: Annotation) -> "PreparedAnnotation":
        return cls(annotation=annotation, matcher=build_label_matcher(annotation))


class AnnotationIndex:
    """
    Page-keyed view of a set of annotations.

    Annotations with a page number are grouped under that page; annotations
    without one are "common" and apply to every page. Input order is kept
    inside each group and later decides draw order.
    """

    def __init__(self, annotations: Optional[Iterable[Annotation]]):
        """
        Build the index.

        Args:
            annotations: Ordered annotation requests (may be empty)

        Raises:
            InvalidArgumentError: If annotations is None
        """
        if annotations is None:
            raise InvalidArgumentError("annotations must not be None", "annotations")

        by_page: dict[int, list[PreparedAnnotation]] = {}
        common: list[PreparedAnnotation] = []
        count = 0

        for annotation in annotations:
            prepared = PreparedAnnotation.prepare(annotation)
            count += 1
            if annotation.page_number is None:
                common.append(prepared)
            else:
                by_page.setdefault(annotation.page_number, []).append(prepared)

        self._page_annotations = {page: tuple(items) for page, items in by_page.items()}
        self._common_annotations = tuple(common)
        self._count = count

        logger.debug(
            f"Indexed {count} annotations: {len(self._common_annotations)} common, "
            f"{count - len(self._common_annotations)} across {len(self._page_annotations)} pages"
        )

    def annotations_for(self, page_number: int) -> tuple[PreparedAnnotation, ...]:
        """Annotations scoped to one page, in input order."""
        return self._page_annotations.get(page_number, ())

    def common_annotations(self) -> tuple[PreparedAnnotation, ...]:
        """Annotations applied to every page, in input order."""
        return self._common_annotations

    def candidates_for(self, page_number: int) -> tuple[PreparedAnnotation, ...]:
        """Page-specific annotations followed by common ones (draw order)."""
        return self.annotations_for(page_number) + self._common_annotations

    def has_candidates(self, page_number: int) -> bool:
        return bool(self._common_annotations) or page_number in self._page_annotations

    @property
    def page_numbers(self) -> list[int]:
        """Pages with page-specific annotations."""
        return sorted(self._page_annotations)

    def __len__(self) -> int:
        return self._count

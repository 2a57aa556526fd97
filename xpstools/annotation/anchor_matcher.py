"""
Anchor Matcher

Resolves where an annotation is drawn on a page. Absolute annotations
resolve to their own position; label-relative annotations resolve to one
position per text run whose content matches the anchor label.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from ..errors import InvalidArgumentError, UnreachableError
from .models import Annotation, LabelMatchMethod, Point, PositioningMethod, TextRun

logger = logging.getLogger(__name__)


class LabelMatcher(ABC):
    """Decides whether a text run matches an anchor label."""

    @abstractmethod
    def matches(self, run: TextRun) -> bool:
        """Return True if the run's content matches the label."""
        pass


class NeverMatcher(LabelMatcher):
    """Matches nothing. Used when there is no usable label."""

    def matches(self, run: TextRun) -> bool:
        return False

    def __repr__(self):
        return "NeverMatcher()"


@dataclass(frozen=True)
class LiteralExactMatcher(LabelMatcher):
    """Case-sensitive equality, no normalization."""

    label: str

    def matches(self, run: TextRun) -> bool:
        return run.content == self.label


@dataclass(frozen=True)
class LiteralIgnoreCaseMatcher(LabelMatcher):
    """Equality of lower-cased content against a lower-cased label."""

    lower_label: str

    def matches(self, run: TextRun) -> bool:
        return run.lower_content == self.lower_label


@dataclass(frozen=True)
class PatternMatcher(LabelMatcher):
    """Case-insensitive regular expression search in lower-cased content."""

    pattern: re.Pattern

    def matches(self, run: TextRun) -> bool:
        return self.pattern.search(run.lower_content) is not None


NEVER_MATCHER = NeverMatcher()


def build_label_matcher(annotation: Annotation) -> LabelMatcher:
    """
    Build the label matcher for an annotation.

    Non label-relative annotations and label-relative annotations without a
    label get a matcher that matches nothing.

    Raises:
        InvalidArgumentError: If a regular expression label does not compile
        UnreachableError: If the match method is not a LabelMatchMethod
    """
    if annotation.position_method != PositioningMethod.LABEL_RELATIVE:
        return NEVER_MATCHER

    label = annotation.anchor_label
    if not label:
        logger.warning(f"Label-relative annotation '{annotation.text}' has no anchor label")
        return NEVER_MATCHER

    method = annotation.match_method
    if method is None or method == LabelMatchMethod.EXACT_MATCH:
        return LiteralExactMatcher(label)
    if method == LabelMatchMethod.EXACT_MATCH_IGNORE_CASE:
        return LiteralIgnoreCaseMatcher(label.lower())
    if method == LabelMatchMethod.REGULAR_EXPRESSION:
        try:
            return PatternMatcher(re.compile(label, re.IGNORECASE))
        except re.error as e:
            raise InvalidArgumentError(
                f"Invalid anchor label pattern '{label}': {e}", "anchor_label"
            ) from e

    raise UnreachableError(f"Invalid match method: {method!r}")


class AnchorMatcher:
    """
    Computes the positions of an annotation on one page.

    For label-relative annotations each matching run contributes the point
    (position.x + A.x, position.y + A.y - text_size), where A is the run
    origin in page coordinates. Subtracting text_size approximates the
    distance from the glyph baseline to the top of the rendered text; it is
    exact only for the default font and size.
    """

    def locate(self, prepared, text_runs: Iterable[TextRun]) -> Iterator[Point]:
        """
        Yield the positions for a prepared annotation.

        Args:
            prepared: PreparedAnnotation (annotation plus its label matcher)
            text_runs: Text runs of the page, in page order

        Raises:
            UnreachableError: If the positioning method is not recognised
        """
        annotation = prepared.annotation
        method = annotation.position_method

        if method == PositioningMethod.ABSOLUTE:
            yield Point(*annotation.position)
            return

        if method == PositioningMethod.UNKNOWN:
            return

        if method != PositioningMethod.LABEL_RELATIVE:
            raise UnreachableError(f"Invalid positioning method: {method!r}")

        offset_x, offset_y = annotation.position
        for run in find_matching_runs(prepared.matcher, text_runs):
            anchor = run.anchor_point
            yield Point(
                offset_x + anchor.x,
                (offset_y + anchor.y) - annotation.text_size,
            )


def find_matching_runs(matcher: LabelMatcher, text_runs: Iterable[TextRun]) -> list[TextRun]:
    """Return the runs a label matcher accepts, in page order."""
    return [run for run in text_runs if matcher.matches(run)]


def describe_matcher(matcher: Optional[LabelMatcher]) -> str:
    """Short human readable form of a matcher for log messages."""
    if isinstance(matcher, LiteralExactMatcher):
        return f"exact '{matcher.label}'"
    if isinstance(matcher, LiteralIgnoreCaseMatcher):
        return f"ignore-case '{matcher.lower_label}'"
    if isinstance(matcher, PatternMatcher):
        return f"pattern /{matcher.pattern.pattern}/i"
    return "none"

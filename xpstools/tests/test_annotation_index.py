"""
Unit tests for AnnotationIndex.

Tests:
- Construction from None / empty input
- Grouping by page and common annotations without loss or duplication
- Order preservation inside groups
- Matcher preparation at index build time

Run with: python -m pytest xpstools/tests/test_annotation_index.py -v
"""

import pytest

from xpstools.annotation.anchor_matcher import (
    LiteralExactMatcher,
    LiteralIgnoreCaseMatcher,
    NeverMatcher,
    PatternMatcher,
)
from xpstools.annotation.annotation_index import AnnotationIndex
from xpstools.annotation.models import Annotation, LabelMatchMethod, PositioningMethod
from xpstools.errors import InvalidArgumentError, UnreachableError


def absolute(text, page=None):
    return Annotation(text=text, page_number=page, position_method=PositioningMethod.ABSOLUTE)


def label(text, anchor, method=None):
    return Annotation(
        text=text,
        position_method=PositioningMethod.LABEL_RELATIVE,
        anchor_label=anchor,
        match_method=method,
    )


class TestConstruction:
    """Tests for building the index."""

    def test_none_rejected(self):
        with pytest.raises(InvalidArgumentError):
            AnnotationIndex(None)

    def test_empty_allowed(self):
        index = AnnotationIndex([])

        assert len(index) == 0
        assert index.common_annotations() == ()
        assert index.annotations_for(0) == ()
        assert not index.has_candidates(0)

    def test_accepts_generator(self):
        index = AnnotationIndex(absolute(str(i), page=i) for i in range(3))
        assert len(index) == 3
        assert index.page_numbers == [0, 1, 2]


class TestGrouping:
    """Tests for page grouping."""

    def test_groups_sum_to_input(self):
        annotations = [
            absolute("a", 0),
            absolute("b"),
            absolute("c", 2),
            absolute("d", 0),
            absolute("e"),
        ]
        index = AnnotationIndex(annotations)

        grouped = list(index.common_annotations())
        for page in index.page_numbers:
            grouped.extend(index.annotations_for(page))

        assert len(grouped) == len(annotations)
        assert sorted(p.annotation.text for p in grouped) == ["a", "b", "c", "d", "e"]

    def test_common_separate_from_pages(self):
        index = AnnotationIndex([absolute("page", 1), absolute("all")])

        assert [p.annotation.text for p in index.common_annotations()] == ["all"]
        assert [p.annotation.text for p in index.annotations_for(1)] == ["page"]
        assert index.annotations_for(5) == ()
        assert index.has_candidates(5)  # common annotations apply everywhere

    def test_order_preserved(self):
        index = AnnotationIndex([
            absolute("R1", 0),
            absolute("C"),
            absolute("R2", 0),
        ])

        candidates = [p.annotation.text for p in index.candidates_for(0)]
        assert candidates == ["R1", "R2", "C"]

    def test_has_candidates_without_common(self):
        index = AnnotationIndex([absolute("only", 3)])

        assert index.has_candidates(3)
        assert not index.has_candidates(0)


class TestPreparation:
    """Tests for matcher preparation."""

    def test_matcher_variants(self):
        index = AnnotationIndex([
            label("a", "Total"),
            label("b", "Total", LabelMatchMethod.EXACT_MATCH_IGNORE_CASE),
            label("c", "tot.*", LabelMatchMethod.REGULAR_EXPRESSION),
            label("d", ""),
            absolute("e"),
        ])
        matchers = [p.matcher for p in index.common_annotations()]

        assert isinstance(matchers[0], LiteralExactMatcher)
        assert isinstance(matchers[1], LiteralIgnoreCaseMatcher)
        assert matchers[1].lower_label == "total"
        assert isinstance(matchers[2], PatternMatcher)
        assert isinstance(matchers[3], NeverMatcher)
        assert isinstance(matchers[4], NeverMatcher)

    def test_invalid_pattern(self):
        with pytest.raises(InvalidArgumentError):
            AnnotationIndex([label("x", "([unclosed", LabelMatchMethod.REGULAR_EXPRESSION)])

    def test_unknown_match_method(self):
        with pytest.raises(UnreachableError):
            AnnotationIndex([label("x", "Total", "fuzzy")])

"""
Unit tests for the annotation value types.

Tests:
- Matrix parsing, formatting, point transform and composition order
- Color parsing from hex strings and names
- TextRun anchor point and lower-cased content

Run with: python -m pytest xpstools/tests/test_models.py -v
"""

import pytest

from xpstools.annotation.models import (
    IDENTITY,
    Annotation,
    Color,
    Matrix,
    Point,
    PositioningMethod,
    TextRun,
)
from xpstools.errors import InvalidArgumentError


class TestMatrix:
    """Tests for Matrix."""

    def test_identity_transform(self):
        """Identity leaves points unchanged."""
        assert IDENTITY.transform(Point(3, 4)) == Point(3, 4)
        assert IDENTITY.is_identity

    def test_from_xps(self):
        """Test parsing of XPS matrix strings."""
        matrix = Matrix.from_xps("2,0,0,3,10,20")
        assert matrix == Matrix(2, 0, 0, 3, 10, 20)
        assert Matrix.from_xps("1 0 0 1 5 6") == Matrix.translation(5, 6)

    def test_from_xps_invalid(self):
        """Wrong number of values or non-numbers are rejected."""
        with pytest.raises(InvalidArgumentError):
            Matrix.from_xps("1,0,0,1")
        with pytest.raises(InvalidArgumentError):
            Matrix.from_xps("1,0,0,1,a,b")

    def test_to_xps(self):
        """Numbers are written without trailing zeros or exponents."""
        assert Matrix(1, 0, 0, 1, 12.5, -3).to_xps() == "1,0,0,1,12.5,-3"
        assert IDENTITY.to_xps() == "1,0,0,1,0,0"

    def test_transform_row_vector_convention(self):
        """x' = x*m11 + y*m21 + ox, y' = x*m12 + y*m22 + oy."""
        matrix = Matrix(0, 1, -1, 0, 100, 50)  # 90 degree rotation then translation
        assert matrix.transform(Point(10, 0)) == Point(100, 60)
        assert matrix.transform(Point(0, 10)) == Point(90, 50)

    def test_multiply_applies_self_first(self):
        """Scaling then translating differs from translating then scaling."""
        scale = Matrix(2, 0, 0, 2, 0, 0)
        move = Matrix.translation(10, 0)

        assert scale.multiply(move).transform(Point(1, 1)) == Point(12, 2)
        assert move.multiply(scale).transform(Point(1, 1)) == Point(22, 2)


class TestColor:
    """Tests for Color."""

    def test_rgb_hex(self):
        color = Color.from_string("#0000FF")
        assert color == Color(255, 0, 0, 255)
        assert color.to_xps() == "#FF0000FF"

    def test_argb_hex(self):
        assert Color.from_string("#80FF0000") == Color(128, 255, 0, 0)

    def test_named(self):
        """Names are case-insensitive."""
        assert Color.from_string("Blue") == Color.from_string("#0000ff")
        assert Color.from_string("brown").to_xps() == "#FFA52A2A"

    def test_invalid(self):
        with pytest.raises(InvalidArgumentError):
            Color.from_string("not-a-color")
        with pytest.raises(InvalidArgumentError):
            Color(256, 0, 0, 0)

    def test_hashable_value(self):
        """Equal colors hash equally (used as cache keys)."""
        assert hash(Color.from_rgb(1, 2, 3)) == hash(Color(255, 1, 2, 3))


class TestTextRun:
    """Tests for TextRun."""

    def test_anchor_point_applies_transform(self):
        run = TextRun("TOTAL", Point(10, 20), Matrix.translation(40, 180))
        assert run.anchor_point == Point(50, 200)

    def test_lower_content(self):
        assert TextRun("Grand TOTAL", Point(0, 0)).lower_content == "grand total"


class TestAnnotation:
    """Tests for Annotation defaults."""

    def test_defaults(self):
        annotation = Annotation(text="Hello")

        assert annotation.page_number is None
        assert annotation.position_method == PositioningMethod.UNKNOWN
        assert annotation.match_method is None
        assert annotation.foreground_color is None
        assert annotation.is_italic is False
        assert annotation.custom_transform is None

    def test_immutable(self):
        annotation = Annotation(text="Hello")
        with pytest.raises(AttributeError):
            annotation.text = "Changed"

"""Tests for JSON value helpers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from docshred.utils.json_util import (
    compare_nodes,
    describe_type,
    is_integral_number,
    json_equals,
    node_type,
    number_text,
    parse_json,
    to_decimal,
    to_json_text,
    utf8_length,
)


class TestNodeType:
    """Test node type detection."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ({}, "OBJECT"),
            ([], "ARRAY"),
            ("x", "STRING"),
            (1, "NUMBER"),
            (1.5, "NUMBER"),
            (True, "BOOLEAN"),
            (None, "NULL"),
        ],
    )
    def test_json_types(self, value: object, expected: str) -> None:
        """Should map Python values to JSON node types."""
        assert node_type(value) == expected

    def test_non_json_values(self) -> None:
        """Should not recognize non-JSON values."""
        assert node_type(float("nan")) is None
        assert node_type(Decimal("1")) is None
        assert node_type({1, 2}) is None

    def test_describe_type_fallback(self) -> None:
        """Should fall back to the Python type name."""
        assert describe_type((1, 2)) == "TUPLE"
        assert describe_type("a") == "STRING"

    def test_bool_is_not_integral_number(self) -> None:
        """Should keep booleans apart from integers."""
        assert is_integral_number(3)
        assert not is_integral_number(True)
        assert not is_integral_number(3.0)


class TestNumbers:
    """Test number conversion helpers."""

    def test_to_decimal_keeps_float_text(self) -> None:
        """Should convert floats via their shortest repr."""
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(10) == Decimal(10)

    def test_number_text(self) -> None:
        """Should render numbers as in serialized JSON."""
        assert number_text(12) == "12"
        assert number_text(1.5) == "1.5"


class TestSerialization:
    """Test parsing and serialization."""

    def test_compact_serialization_keeps_order(self) -> None:
        """Should serialize compactly in insertion order."""
        assert to_json_text({"b": 1, "a": [True, None]}) == '{"b":1,"a":[true,null]}'

    def test_non_ascii_kept(self) -> None:
        """Should not escape non-ASCII characters."""
        text = to_json_text({"name": "é"})

        assert text == '{"name":"é"}'
        assert utf8_length(text) == len(text) + 1

    def test_parse_rejects_infinity(self) -> None:
        """Should reject Infinity literals."""
        with pytest.raises(ValueError):
            parse_json('{"a": Infinity}')


class TestJsonEquals:
    """Test structural equality."""

    def test_object_order_sensitive(self) -> None:
        """Should respect property order of objects."""
        assert json_equals({"a": 1, "b": 2}, {"a": 1, "b": 2})
        assert not json_equals({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_array_order_sensitive(self) -> None:
        """Should respect element order of arrays."""
        assert not json_equals([1, 2], [2, 1])

    def test_numbers_by_value(self) -> None:
        """Should compare numbers by value."""
        assert json_equals(1, 1.0)

    def test_bool_and_number_differ(self) -> None:
        """Should not treat true as 1."""
        assert not json_equals(True, 1)
        assert not json_equals([0], [False])


class TestCompareNodes:
    """Test total ordering over JSON values."""

    def test_type_order(self) -> None:
        """Should order null < number < string < object < array < boolean."""
        values = [True, [1], {"a": 1}, "s", 5, None]

        ordered = sorted(values, key=_SortKey)

        assert ordered == [None, 5, "s", {"a": 1}, [1], True]

    def test_same_type(self) -> None:
        """Should compare values of the same type naturally."""
        assert compare_nodes(1, 2.5) < 0
        assert compare_nodes("b", "a") > 0
        assert compare_nodes([1, 2], [1]) > 0
        assert compare_nodes(None, None) == 0


class _SortKey:
    def __init__(self, value: object) -> None:
        self.value = value

    def __lt__(self, other: "_SortKey") -> bool:
        return compare_nodes(self.value, other.value) < 0

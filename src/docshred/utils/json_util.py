"""Helpers for working with parsed JSON trees made of plain Python values."""

from __future__ import annotations

import json
import math
from decimal import Decimal
from typing import Any

OBJECT = "OBJECT"
ARRAY = "ARRAY"
STRING = "STRING"
NUMBER = "NUMBER"
BOOLEAN = "BOOLEAN"
NULL = "NULL"

# Ordering used by $min/$max, loosely following BSON comparison order
_TYPE_ORDER = {NULL: 0, NUMBER: 1, STRING: 2, OBJECT: 3, ARRAY: 4, BOOLEAN: 5}


def node_type(value: Any) -> str | None:
    """Return the JSON node type name of ``value``, or None if it is not JSON."""
    if value is None:
        return NULL
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, int):
        return NUMBER
    if isinstance(value, float):
        return NUMBER if math.isfinite(value) else None
    if isinstance(value, str):
        return STRING
    if isinstance(value, dict):
        return OBJECT
    if isinstance(value, list):
        return ARRAY
    return None


def describe_type(value: Any) -> str:
    """Type name for error messages; falls back to the Python type name."""
    return node_type(value) or type(value).__name__.upper()


def is_number(value: Any) -> bool:
    return node_type(value) == NUMBER


def is_integral_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def number_text(value: int | float) -> str:
    """Textual form of a number as it appears in serialized JSON."""
    return json.dumps(value)


def to_decimal(value: int | float) -> Decimal:
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(repr(value))


def utf8_length(text: str) -> int:
    return len(text.encode("utf-8"))


def parse_json(text: str) -> Any:
    """Parse JSON text, rejecting the non-standard NaN/Infinity literals."""

    def _reject_constant(name: str) -> Any:
        raise ValueError(f"Invalid JSON number literal: {name}")

    return json.loads(text, parse_constant=_reject_constant)


def to_json_text(value: Any) -> str:
    """Compact canonical serialization; property order is preserved."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def json_equals(a: Any, b: Any) -> bool:
    """Structural equality that keeps booleans and numbers apart.

    Object property order is significant, as it is for value digests; numbers
    compare by value.
    """
    type_a, type_b = node_type(a), node_type(b)
    if type_a != type_b:
        return False
    if type_a == OBJECT:
        if list(a) != list(b):
            return False
        return all(json_equals(a[key], b[key]) for key in a)
    if type_a == ARRAY:
        if len(a) != len(b):
            return False
        return all(json_equals(x, y) for x, y in zip(a, b))
    if type_a == NUMBER:
        return to_decimal(a) == to_decimal(b)
    return a == b


def compare_nodes(a: Any, b: Any) -> int:
    """Total ordering over JSON values; returns negative, zero or positive."""
    type_a, type_b = node_type(a), node_type(b)
    if type_a != type_b:
        return _TYPE_ORDER[type_a] - _TYPE_ORDER[type_b]
    if type_a == NULL:
        return 0
    if type_a == NUMBER:
        return _sign(to_decimal(a) - to_decimal(b))
    if type_a in (STRING, BOOLEAN):
        return (a > b) - (a < b)
    if type_a == OBJECT:
        for (key_a, val_a), (key_b, val_b) in zip(a.items(), b.items()):
            if key_a != key_b:
                return (key_a > key_b) - (key_a < key_b)
            diff = compare_nodes(val_a, val_b)
            if diff:
                return diff
        return len(a) - len(b)
    for x, y in zip(a, b):
        diff = compare_nodes(x, y)
        if diff:
            return diff
    return len(a) - len(b)


def _sign(value: Decimal) -> int:
    return (value > 0) - (value < 0)

"""JSON extension types: non-JSON values wrapped as single-property objects.

``{"$date": 1672531200000}``, ``{"$objectId": "5f1b..."}`` and
``{"$uuid": "3f8c...-..."}`` are the only recognized wrappers.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from bson import ObjectId

from docshred.errors import ErrorCode
from docshred.utils.json_util import is_integral_number, to_json_text

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class JsonExtensionType(Enum):
    DATE = "$date"
    OBJECT_ID = "$objectId"
    UUID = "$uuid"

    @property
    def encoded_name(self) -> str:
        return self.value

    @classmethod
    def from_encoded_name(cls, name: str) -> "JsonExtensionType | None":
        for member in cls:
            if member.value == name:
                return member
        return None

    def decode(self, value: Any) -> Any:
        """Validate the wrapped value and return its Python representation."""
        if self is JsonExtensionType.DATE:
            if is_integral_number(value):
                try:
                    return _EPOCH + timedelta(milliseconds=value)
                except OverflowError:
                    pass
            raise _bad_value(self, "has to be an epoch timestamp NUMBER", value)

        if self is JsonExtensionType.OBJECT_ID:
            if isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value):
                return ObjectId(value)
            raise _bad_value(self, "has to be 24-digit hexadecimal ObjectId", value)

        if isinstance(value, str) and len(value) == 36:
            try:
                return uuid.UUID(value)
            except ValueError:
                pass
        raise _bad_value(self, "has to be 36-character UUID String", value)

    def encode(self, value: Any) -> Any:
        """Inverse of ``decode``: the JSON value to put inside the wrapper."""
        if self is JsonExtensionType.DATE:
            return (value - _EPOCH) // timedelta(milliseconds=1)
        return str(value)

    def wrap(self, value: Any) -> dict:
        return {self.encoded_name: self.encode(value)}


def match_extension(value: Any) -> "tuple[JsonExtensionType, Any] | None":
    """Return (type, wrapped value) if ``value`` is a recognized wrapper object."""
    if isinstance(value, dict) and len(value) == 1:
        key, inner = next(iter(value.items()))
        ext_type = JsonExtensionType.from_encoded_name(key)
        if ext_type is not None:
            return ext_type, inner
    return None


def _bad_value(ext_type: JsonExtensionType, requirement: str, value: Any):
    return ErrorCode.SHRED_BAD_EJSON_VALUE.to_error(
        "'%s' value %s, instead got (%s)",
        ext_type.encoded_name,
        requirement,
        _render(value),
    )


def _render(value: Any) -> str:
    try:
        return to_json_text(value)
    except (TypeError, ValueError):
        return repr(value)

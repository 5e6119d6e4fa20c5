"""Limit and naming checks applied to documents before they are shredded.

Two passes: ``FullDocValidator`` runs on the complete document (structure,
names, path lengths, number lengths) before any pruning;
``IndexableValueValidator`` runs on the indexable copy (property counts, array
lengths, string lengths) since those limits only apply to indexed values.
"""

from __future__ import annotations

from typing import Any

from docshred.config import DocumentLimitsConfig
from docshred.constants import (
    DOC_ID,
    VALID_NAME_PATTERN,
    VECTOR_EMBEDDING_FIELD,
    VECTOR_EMBEDDING_TEXT_FIELD,
)
from docshred.errors import ErrorCode
from docshred.shredding.extension import match_extension
from docshred.utils.json_util import (
    describe_type,
    is_integral_number,
    is_number,
    number_text,
    utf8_length,
)


class FullDocValidator:
    def __init__(self, limits: DocumentLimitsConfig) -> None:
        self.limits = limits

    def validate(self, doc: dict) -> None:
        self._validate_object(doc, 0, 0)

    def _validate_value(self, value: Any, depth: int, parent_path_length: int) -> None:
        if isinstance(value, dict):
            self._validate_object(value, depth, parent_path_length)
        elif isinstance(value, list):
            self._validate_array(value, depth, parent_path_length)
        elif is_number(value):
            self._validate_number(value)

    def _validate_array(self, arr: list, depth: int, parent_path_length: int) -> None:
        depth += 1
        self._validate_depth(depth)
        # array length is an indexing limit, checked on the indexable copy
        for element in arr:
            self._validate_value(element, depth, parent_path_length)

    def _validate_object(self, obj: dict, depth: int, parent_path_length: int) -> None:
        depth += 1
        self._validate_depth(depth)

        extension = match_extension(obj)
        if extension is not None:
            ext_type, inner = extension
            if isinstance(inner, str) or is_integral_number(inner):
                return
            raise ErrorCode.SHRED_BAD_EJSON_VALUE.to_error(
                "type '%s' has invalid JSON value of type %s",
                ext_type.encoded_name,
                describe_type(inner),
            )

        for key, value in obj.items():
            # _id is validated on its own, and may be an extension type
            if depth == 1 and key == DOC_ID:
                continue
            self._validate_key(key, depth, parent_path_length)
            # segments of a path are separated by a single character
            self._validate_value(value, depth, parent_path_length + 1 + len(key))

    def _validate_key(self, key: str, depth: int, parent_path_length: int) -> None:
        if not key:
            raise ErrorCode.SHRED_DOC_KEY_NAME_VIOLATION.to_error("empty names not allowed")
        if not VALID_NAME_PATTERN.fullmatch(key):
            special = depth == 1 and key in (VECTOR_EMBEDDING_FIELD, VECTOR_EMBEDDING_TEXT_FIELD)
            if not special:
                raise ErrorCode.SHRED_DOC_KEY_NAME_VIOLATION.to_error(
                    "field name ('%s') contains invalid character(s), can contain only "
                    "letters (a-z/A-Z), numbers (0-9), underscores (_), and hyphens (-)",
                    key,
                )
        total_path_length = parent_path_length + len(key)
        if total_path_length > self.limits.max_property_path_length:
            raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                "property path length (%d) exceeds maximum allowed (%d) (path ends with '%s')",
                total_path_length,
                self.limits.max_property_path_length,
                key,
            )

    def _validate_depth(self, depth: int) -> None:
        if depth > self.limits.max_depth:
            raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                "document depth exceeds maximum allowed (%s)", self.limits.max_depth
            )

    def _validate_number(self, value: int | float) -> None:
        length = len(number_text(value))
        if length > self.limits.max_number_length:
            raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                "Number value length (%d) exceeds the maximum allowed (%d)",
                length,
                self.limits.max_number_length,
            )


class IndexableValueValidator:
    def __init__(self, limits: DocumentLimitsConfig) -> None:
        self.limits = limits
        self.total_properties = 0

    def validate(self, doc: dict) -> None:
        self._validate_object(None, doc)
        if self.total_properties > self.limits.max_document_properties:
            raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                "total number of indexed properties (%d) in document exceeds maximum allowed (%d)",
                self.total_properties,
                self.limits.max_document_properties,
            )

    def _validate_value(self, referring_property: str | None, value: Any) -> None:
        if isinstance(value, dict):
            self._validate_object(referring_property, value)
        elif isinstance(value, list):
            self._validate_array(referring_property, value)
        elif isinstance(value, str):
            self._validate_string(referring_property, value)

    def _validate_array(self, referring_property: str | None, arr: list) -> None:
        size = len(arr)
        if size > self.limits.max_array_length:
            if referring_property == VECTOR_EMBEDDING_FIELD:
                if size > self.limits.max_vector_embedding_length:
                    raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                        "number of elements Vector embedding (property '%s') has (%d) "
                        "exceeds maximum allowed (%d)",
                        referring_property,
                        size,
                        self.limits.max_vector_embedding_length,
                    )
            else:
                raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                    "number of elements an indexable Array (property '%s') has (%d) "
                    "exceeds maximum allowed (%d)",
                    referring_property,
                    size,
                    self.limits.max_array_length,
                )
        for element in arr:
            self._validate_value(referring_property, element)

    def _validate_object(self, referring_property: str | None, obj: dict) -> None:
        count = len(obj)
        if count > self.limits.max_object_properties:
            raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                "number of properties an indexable Object (property '%s') has (%d) "
                "exceeds maximum allowed (%d)",
                referring_property,
                count,
                self.limits.max_object_properties,
            )
        self.total_properties += count
        for key, value in obj.items():
            self._validate_value(key, value)

    def _validate_string(self, referring_property: str | None, value: str) -> None:
        if referring_property == VECTOR_EMBEDDING_TEXT_FIELD:
            return
        # cheap pre-check: UTF-8 is at most 4 bytes per character
        if len(value) * 4 <= self.limits.max_string_length_in_bytes:
            return
        length = utf8_length(value)
        if length > self.limits.max_string_length_in_bytes:
            raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                "indexed String value (property '%s') length (%d bytes) exceeds maximum allowed "
                "(%d bytes)",
                referring_property,
                length,
                self.limits.max_string_length_in_bytes,
            )

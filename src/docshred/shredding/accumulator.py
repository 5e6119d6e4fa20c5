"""Collects indexed facts during traversal and builds the immutable record."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Optional, Set

import numpy as np

from docshred.models import ArrayContainsKey, ShreddedDocument
from docshred.shredding.doc_id import DocumentId
from docshred.shredding.hasher import DocValueHasher
from docshred.shredding.path import JsonPath

_EMPTY_MAP: MappingProxyType = MappingProxyType({})


class ShredAccumulator:
    """Fact collector local to a single shred call.

    Collections start out as ``None`` and are only allocated when the first
    fact of their kind arrives.
    """

    def __init__(
        self,
        hasher: DocValueHasher,
        doc_id: DocumentId,
        tx_id: Optional[uuid.UUID],
        doc_json: str,
    ) -> None:
        self.hasher = hasher
        self.doc_id = doc_id
        self.tx_id = tx_id
        self.doc_json = doc_json

        # dict keeps document order; used as an ordered set
        self._exist_keys: Dict[JsonPath, None] = {}
        self._sub_doc_equals: Optional[Dict[JsonPath, str]] = None
        self._array_size: Optional[Dict[JsonPath, int]] = None
        self._array_equals: Optional[Dict[JsonPath, str]] = None
        self._array_contains: Optional[Set[ArrayContainsKey]] = None
        self._bool_values: Optional[Dict[JsonPath, bool]] = None
        self._number_values: Optional[Dict[JsonPath, Decimal]] = None
        self._text_values: Optional[Dict[JsonPath, str]] = None
        self._null_values: Optional[Set[JsonPath]] = None
        self._timestamp_values: Optional[Dict[JsonPath, datetime]] = None
        self._vector: Optional[np.ndarray] = None
        self._has_vectorize = False

    def build(self) -> ShreddedDocument:
        return ShreddedDocument(
            id=self.doc_id,
            tx_id=self.tx_id,
            doc_json=self.doc_json,
            exist_keys=tuple(self._exist_keys),
            sub_doc_equals=_frozen_map(self._sub_doc_equals),
            array_size=_frozen_map(self._array_size),
            array_equals=_frozen_map(self._array_equals),
            array_contains=frozenset(self._array_contains or ()),
            query_bool_values=_frozen_map(self._bool_values),
            query_number_values=_frozen_map(self._number_values),
            query_text_values=_frozen_map(self._text_values),
            query_null_values=frozenset(self._null_values or ()),
            query_timestamp_values=_frozen_map(self._timestamp_values),
            query_vector_values=self._vector,
            has_vectorize_text=self._has_vectorize,
        )

    def shred_object(self, path: JsonPath, obj: dict) -> bool:
        self._add_key(path)
        if self._sub_doc_equals is None:
            self._sub_doc_equals = {}
        self._sub_doc_equals[path] = self.hasher.hash(obj).digest
        return True

    def shred_array(self, path: JsonPath, arr: list) -> None:
        self._add_key(path)
        if self._array_size is None:
            self._array_size = {}
            self._array_equals = {}
            self._array_contains = set()
        self._array_size[path] = len(arr)
        self._array_equals[path] = self.hasher.hash(arr).digest
        for element in arr:
            self._array_contains.add(ArrayContainsKey(path, self.hasher.hash(element).digest))

    def shred_text(self, path: JsonPath, text: str) -> None:
        self._add_key(path)
        if self._text_values is None:
            self._text_values = {}
        self._text_values[path] = text

    def shred_number(self, path: JsonPath, number: Decimal) -> None:
        self._add_key(path)
        if self._number_values is None:
            self._number_values = {}
        self._number_values[path] = number

    def shred_boolean(self, path: JsonPath, value: bool) -> None:
        self._add_key(path)
        if self._bool_values is None:
            self._bool_values = {}
        self._bool_values[path] = value

    def shred_null(self, path: JsonPath) -> None:
        self._add_key(path)
        if self._null_values is None:
            self._null_values = set()
        self._null_values.add(path)

    def shred_timestamp(self, path: JsonPath, value: datetime) -> None:
        self._add_key(path)
        if self._timestamp_values is None:
            self._timestamp_values = {}
        self._timestamp_values[path] = value

    def shred_vector(self, path: JsonPath, vector: list) -> None:
        self._add_key(path)
        self._vector = np.asarray(vector, dtype="float32")
        self._vector.flags.writeable = False

    def shred_vectorize(self, path: JsonPath) -> None:
        self._add_key(path)
        self._has_vectorize = True

    def _add_key(self, path: JsonPath) -> None:
        self._exist_keys[path] = None


def _frozen_map(values: Optional[Dict[Any, Any]]) -> MappingProxyType:
    return _EMPTY_MAP if values is None else MappingProxyType(values)

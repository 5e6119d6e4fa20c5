"""Core docshred data models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, FrozenSet, Mapping, NamedTuple, Optional, Tuple

import numpy as np

from docshred.shredding.path import JsonPath

if TYPE_CHECKING:
    from docshred.shredding.doc_id import DocumentId


class ArrayContainsKey(NamedTuple):
    """Array path paired with the digest of one of its elements."""

    path: JsonPath
    digest: str

    def encode(self) -> str:
        # digest is fixed width, so it can lead without any escaping of the path
        return f"{self.digest} {self.path}"


@dataclass(frozen=True, slots=True)
class ShreddedDocument:
    """Everything the storage layer needs to write one document.

    Built once per shred call; collections are read-only views and are empty
    (never missing) when the document had nothing of that kind.
    """

    id: "DocumentId"
    tx_id: Optional[uuid.UUID]
    doc_json: str
    exist_keys: Tuple[JsonPath, ...]
    sub_doc_equals: Mapping[JsonPath, str]
    array_size: Mapping[JsonPath, int]
    array_equals: Mapping[JsonPath, str]
    array_contains: FrozenSet[ArrayContainsKey]
    query_bool_values: Mapping[JsonPath, bool]
    query_number_values: Mapping[JsonPath, Decimal]
    query_text_values: Mapping[JsonPath, str]
    query_null_values: FrozenSet[JsonPath]
    query_timestamp_values: Mapping[JsonPath, datetime]
    query_vector_values: Optional[np.ndarray] = field(default=None, compare=False)
    has_vectorize_text: bool = False

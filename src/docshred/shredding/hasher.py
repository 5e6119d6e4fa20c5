"""Content hashing of JSON values for sub-document and array equality."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from docshred.errors import ErrorCode
from docshred.utils.json_util import (
    ARRAY,
    BOOLEAN,
    NULL,
    NUMBER,
    OBJECT,
    STRING,
    describe_type,
    node_type,
    to_decimal,
)

# 128 bits, as lowercase hex
DIGEST_HEX_LENGTH = 32


@dataclass(frozen=True, slots=True)
class DocValueHash:
    """Digest of a single JSON value, along with the type of that value."""

    node_type: str
    digest: str

    def __str__(self) -> str:
        return self.digest


class DocValueHasher:
    """Computes order-sensitive digests of JSON values.

    Digests of containers are memoized by identity, so a single hasher should
    only be used while the hashed tree is alive and unchanged (one shred call).
    """

    def __init__(self) -> None:
        self._cache: Dict[int, Tuple[Any, DocValueHash]] = {}

    def hash(self, value: Any) -> DocValueHash:
        kind = node_type(value)
        if kind == OBJECT or kind == ARRAY:
            cached = self._cache.get(id(value))
            # keep a reference to the value so its id() cannot be reused
            if cached is not None and cached[0] is value:
                return cached[1]
            result = self._hash_object(value) if kind == OBJECT else self._hash_array(value)
            self._cache[id(value)] = (value, result)
            return result
        return self._hash_atomic(kind, value)

    def _hash_object(self, obj: dict) -> DocValueHash:
        sha = hashlib.sha256()
        sha.update(f"O{len(obj)}\n".encode("utf-8"))
        for key, child in obj.items():
            encoded_key = key.encode("utf-8")
            sha.update(f"{len(encoded_key)}:".encode("ascii"))
            sha.update(encoded_key)
            sha.update(self.hash(child).digest.encode("ascii"))
        return DocValueHash(OBJECT, sha.hexdigest()[:DIGEST_HEX_LENGTH])

    def _hash_array(self, arr: list) -> DocValueHash:
        sha = hashlib.sha256()
        sha.update(f"A{len(arr)}\n".encode("utf-8"))
        for element in arr:
            sha.update(self.hash(element).digest.encode("ascii"))
        return DocValueHash(ARRAY, sha.hexdigest()[:DIGEST_HEX_LENGTH])

    def _hash_atomic(self, kind: str | None, value: Any) -> DocValueHash:
        if kind == STRING:
            encoded = value.encode("utf-8")
            payload = f"S{len(encoded)}:".encode("ascii") + encoded
        elif kind == NUMBER:
            # normalized so that 1 and 1.0 produce the same digest
            payload = ("N" + _canonical_number(value)).encode("ascii")
        elif kind == BOOLEAN:
            payload = b"B1" if value else b"B0"
        elif kind == NULL:
            payload = b"Z"
        else:
            raise ErrorCode.SHRED_UNRECOGNIZED_NODE_TYPE.to_error(describe_type(value))
        return DocValueHash(kind, hashlib.sha256(payload).hexdigest()[:DIGEST_HEX_LENGTH])


def _canonical_number(value: int | float) -> str:
    number = to_decimal(value)
    if number == 0:
        return "0"
    normalized = number.normalize()
    return format(normalized, "f") if -30 < normalized.adjusted() < 30 else str(normalized)

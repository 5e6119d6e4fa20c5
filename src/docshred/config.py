"""Document limits and per-collection settings."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

from docshred.projection import IndexingProjector
from docshred.utils.files import read_json

DEFAULT_MAX_SIZE = 4_000_000
DEFAULT_MAX_DEPTH = 16
DEFAULT_MAX_PROPERTY_PATH_LENGTH = 1000
DEFAULT_MAX_OBJECT_PROPERTIES = 1000
DEFAULT_MAX_DOCUMENT_PROPERTIES = 2000
DEFAULT_MAX_ARRAY_LENGTH = 1000
DEFAULT_MAX_VECTOR_EMBEDDING_LENGTH = 4096
DEFAULT_MAX_STRING_LENGTH_IN_BYTES = 8000
DEFAULT_MAX_NUMBER_LENGTH = 100


@dataclass(frozen=True, slots=True)
class DocumentLimitsConfig:
    """Structural and value limits enforced on every shredded document.

    Instances are read-only so one config can be shared by concurrent callers.
    """

    max_size: int = DEFAULT_MAX_SIZE
    max_depth: int = DEFAULT_MAX_DEPTH
    max_property_path_length: int = DEFAULT_MAX_PROPERTY_PATH_LENGTH
    max_object_properties: int = DEFAULT_MAX_OBJECT_PROPERTIES
    max_document_properties: int = DEFAULT_MAX_DOCUMENT_PROPERTIES
    max_array_length: int = DEFAULT_MAX_ARRAY_LENGTH
    max_vector_embedding_length: int = DEFAULT_MAX_VECTOR_EMBEDDING_LENGTH
    max_string_length_in_bytes: int = DEFAULT_MAX_STRING_LENGTH_IN_BYTES
    max_number_length: int = DEFAULT_MAX_NUMBER_LENGTH

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{f.name} must be a positive integer, got {value!r}")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "DocumentLimitsConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown document limit(s): {', '.join(unknown)}")
        return cls(**values)

    @classmethod
    def load(cls, path: Path) -> "DocumentLimitsConfig":
        """Read limits from a JSON file; missing keys keep their defaults."""
        values = read_json(path)
        if not isinstance(values, dict):
            raise ValueError(f"Limits file {path} must contain a JSON object")
        return cls.from_dict(values)


class IdType(Enum):
    """Strategy used to generate ``_id`` for documents inserted without one."""

    UNDEFINED = ""
    OBJECT_ID = "objectId"
    UUID = "uuid"
    UUID_V6 = "uuidv6"
    UUID_V7 = "uuidv7"

    @classmethod
    def from_string(cls, name: str | None) -> "IdType":
        if not name:
            return cls.UNDEFINED
        for member in cls:
            if member.value.lower() == name.lower():
                return member
        raise ValueError(
            f"Unknown id type '{name}'; expected one of: "
            + ", ".join(m.value for m in cls if m.value)
        )


@dataclass(slots=True)
class CollectionSettings:
    id_type: IdType = IdType.UNDEFINED
    indexing: IndexingProjector = field(default_factory=IndexingProjector.identity)

    @classmethod
    def empty(cls) -> "CollectionSettings":
        return cls()

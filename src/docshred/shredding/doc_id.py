"""Document identity (``_id``): validation, generation and placement."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from bson import ObjectId
from uuid6 import uuid6, uuid7

from docshred.config import IdType
from docshred.constants import DOC_ID
from docshred.errors import DocumentError, ErrorCode
from docshred.shredding.extension import JsonExtensionType, match_extension
from docshred.utils.json_util import (
    BOOLEAN,
    NULL,
    NUMBER,
    OBJECT,
    STRING,
    describe_type,
    node_type,
    to_decimal,
)

LOGGER = logging.getLogger(__name__)


class IdKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    OBJECT_ID = "objectId"
    UUID = "uuid"
    DATE = "date"


_EXTENSION_KINDS = {
    JsonExtensionType.DATE: IdKind.DATE,
    JsonExtensionType.OBJECT_ID: IdKind.OBJECT_ID,
    JsonExtensionType.UUID: IdKind.UUID,
}


@dataclass(frozen=True, slots=True)
class DocumentId:
    """Typed value of a document's ``_id``.

    ``value`` holds the decoded Python value (``Decimal`` for numbers,
    ``ObjectId``, ``uuid.UUID`` or ``datetime`` for extension types) and is what
    identity comparisons use; ``json_value`` keeps the JSON form as given.
    """

    kind: IdKind
    value: Any
    json_value: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_json(cls, node: Any) -> "DocumentId":
        kind = node_type(node)
        if kind == NULL:
            return cls(IdKind.NULL, None, None)
        if kind == BOOLEAN:
            return cls(IdKind.BOOLEAN, node, node)
        if kind == NUMBER:
            return cls(IdKind.NUMBER, to_decimal(node), node)
        if kind == STRING:
            if not node:
                raise ErrorCode.SHRED_BAD_DOCID_TYPE.to_error(
                    "Document Id must not be empty String"
                )
            return cls(IdKind.STRING, node, node)
        if kind == OBJECT:
            extension = match_extension(node)
            if extension is not None:
                ext_type, inner = extension
                try:
                    decoded = ext_type.decode(inner)
                except DocumentError as exc:
                    raise ErrorCode.SHRED_BAD_DOCID_TYPE.to_error(exc.message) from exc
                return cls(_EXTENSION_KINDS[ext_type], decoded, dict(node))
            if len(node) == 1:
                key = next(iter(node))
                if key.startswith("$"):
                    raise ErrorCode.SHRED_BAD_DOCID_TYPE.to_error(
                        "unrecognized JSON extension type '%s'", key
                    )
        raise ErrorCode.SHRED_BAD_DOCID_TYPE.to_error(
            "Document Id must be a JSON String, Number, Boolean, EJSON-Encoded Date Object "
            "or NULL instead got %s",
            describe_type(node),
        )

    def to_json(self) -> Any:
        return self.json_value

    def as_text(self) -> str:
        if self.kind is IdKind.NULL:
            return "null"
        if self.kind is IdKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind is IdKind.DATE:
            return str(JsonExtensionType.DATE.encode(self.value))
        return str(self.value)


def generate_document_id(id_type: IdType) -> Any:
    """Create the JSON value of a new ``_id`` using the given strategy."""
    if id_type is IdType.OBJECT_ID:
        return JsonExtensionType.OBJECT_ID.wrap(ObjectId())
    if id_type is IdType.UUID:
        return JsonExtensionType.UUID.wrap(uuid.uuid4())
    if id_type is IdType.UUID_V6:
        return JsonExtensionType.UUID.wrap(uuid6())
    if id_type is IdType.UUID_V7:
        return JsonExtensionType.UUID.wrap(uuid7())
    # legacy default: unwrapped random UUID
    return str(uuid.uuid4())


def normalize_document_id(doc: Any, id_type: IdType = IdType.UNDEFINED) -> Dict[str, Any]:
    """Return a copy of ``doc`` whose first property is ``_id``.

    An existing ``_id`` is kept as is; a missing one is generated. The input
    document is never modified.
    """
    if not isinstance(doc, dict):
        raise ErrorCode.SHRED_BAD_DOCUMENT_TYPE.to_error(
            "document to shred must be a JSON Object, instead got %s", describe_type(doc)
        )

    if DOC_ID in doc:
        id_node = doc[DOC_ID]
    else:
        id_node = generate_document_id(id_type)
        LOGGER.debug("Generated document id %s (id type: %s)", id_node, id_type.name)

    doc_with_id: Dict[str, Any] = {DOC_ID: id_node}
    # re-adding _id does not move it
    doc_with_id.update(doc)
    return doc_with_id

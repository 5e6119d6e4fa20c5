"""Error codes and the exception raised for every shredding or update failure."""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Stable, machine-readable failure codes with their default messages."""

    SHRED_BAD_DOCUMENT_TYPE = "Bad document type to shred"
    SHRED_BAD_DOCID_TYPE = "Bad type for '_id' property"
    SHRED_BAD_EJSON_VALUE = "Bad JSON Extension value"
    SHRED_DOC_KEY_NAME_VIOLATION = "Document field name invalid"
    SHRED_DOC_LIMIT_VIOLATION = "Document size limitation violated"
    SHRED_UNRECOGNIZED_NODE_TYPE = "Unrecognized JSON node type in input document"
    SHRED_BAD_DOCUMENT_VECTOR_TYPE = "Bad $vector document type to shred"
    SHRED_BAD_VECTOR_SIZE = "$vector value can't be empty"
    SHRED_BAD_VECTOR_VALUE = "$vector value needs to be array of numbers"

    UNSUPPORTED_UPDATE_OPERATION = "Unsupported update operation"
    UNSUPPORTED_UPDATE_OPERATION_PARAM = "Unsupported update operation parameter"
    UNSUPPORTED_UPDATE_OPERATION_TARGET = "Unsupported target JSON value for update operation"
    UNSUPPORTED_UPDATE_OPERATION_MODIFIER = "Unsupported update operation modifier"
    UNSUPPORTED_UPDATE_OPERATION_PATH = "Invalid update operation path"
    UNSUPPORTED_UPDATE_FOR_DOC_ID = "Cannot use operator with '_id' property"

    INVALID_INDEXING_DEFINITION = "Invalid indexing definition"

    @property
    def message(self) -> str:
        return self.value

    def to_error(self, template: str | None = None, *args: object) -> "DocumentError":
        """Build an error whose message is the default one plus formatted detail."""
        if template is None:
            return DocumentError(self, self.message)
        detail = template % args if args else template
        return DocumentError(self, f"{self.message}: {detail}")


class DocumentError(Exception):
    """Failure raised while shredding or updating a document.

    All failures share this one class; callers branch on ``error_code``.
    """

    def __init__(self, error_code: ErrorCode, message: str | None = None) -> None:
        self.error_code = error_code
        self.message = message if message is not None else error_code.message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.error_code.name

    def __repr__(self) -> str:
        return f"DocumentError({self.code}, {self.message!r})"

"""Base class and shared parsing for update operations.

Every operation goes through the same two phases: ``construct()`` validates
the operator definition (``{path: argument, ...}``) into actions sorted by
path, and ``update_document()`` applies them to a document in place, returning
whether anything changed. Missing paths are never an error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterator, List, Mapping, Sequence, Tuple, TypeVar

from docshred.constants import PATH_SEPARATOR, VECTOR_EMBEDDING_FIELD, VECTOR_EMBEDDING_TEXT_FIELD
from docshred.errors import DocumentError, ErrorCode
from docshred.utils.json_util import describe_type

A = TypeVar("A")

# Reserved fields that may be updated even though they start with '$'
_RESERVED_PATHS = (VECTOR_EMBEDDING_FIELD, VECTOR_EMBEDDING_TEXT_FIELD)


class UpdateOperation(ABC):
    operator: ClassVar[str]
    # applied only when the update creates a new document (upsert)
    only_on_insert: ClassVar[bool] = False

    @classmethod
    @abstractmethod
    def construct(cls, args: Mapping[str, Any]) -> "UpdateOperation":
        """Validate operator arguments and build the operation."""

    @abstractmethod
    def update_document(self, doc: dict) -> bool:
        """Apply to ``doc`` in place; return True if the document changed."""

    @abstractmethod
    def paths(self) -> List[str]:
        """Every path this operation modifies."""

    @staticmethod
    def sort_by_path(actions: Sequence[A]) -> List[A]:
        return sorted(actions, key=lambda action: action.path)

    @classmethod
    def iter_arguments(cls, args: Any) -> Iterator[Tuple[str, Any]]:
        """Yield ``(path, argument)`` pairs, validating each path."""
        if not isinstance(args, Mapping):
            raise cls.param_error(
                "%s requires OBJECT argument, instead got: %s", cls.operator, describe_type(args)
            )
        for path, argument in args.items():
            yield validate_update_path(cls.operator, path), argument

    @staticmethod
    def param_error(template: str, *args: object) -> DocumentError:
        return ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PARAM.to_error(template, *args)

    @classmethod
    def target_error(cls, requirement: str, path: str, value: Any) -> DocumentError:
        return ErrorCode.UNSUPPORTED_UPDATE_OPERATION_TARGET.to_error(
            "%s requires target to be %s; value at '%s' of type %s",
            cls.operator,
            requirement,
            path,
            describe_type(value),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(self.paths())})"


def validate_update_path(operator: str, path: Any) -> str:
    """Check that ``path`` is a well-formed dotted update path."""
    if not isinstance(path, str) or not path:
        raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PARAM.to_error(
            "%s requires non-empty path, instead got: '%s'", operator, path
        )
    if path in _RESERVED_PATHS:
        return path
    for segment in path.split(PATH_SEPARATOR):
        if not segment:
            raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PARAM.to_error(
                "%s path ('%s') contains empty segment", operator, path
            )
        if segment.startswith("$"):
            raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PARAM.to_error(
                "%s path ('%s') cannot contain segment starting with '$'", operator, path
            )
    return path

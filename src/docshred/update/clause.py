"""Parsing of full update clauses and applying them to documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Any, List, Mapping, Tuple

from docshred.constants import DOC_ID, PATH_SEPARATOR
from docshred.errors import ErrorCode
from docshred.update.operation import UpdateOperation
from docshred.update.operator import UpdateOperator
from docshred.utils.json_util import describe_type

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UpdateClause:
    """Validated set of operations from one update definition."""

    operations: Tuple[UpdateOperation, ...]

    @classmethod
    def from_definition(cls, update: Any) -> "UpdateClause":
        """Parse ``{operator: {path: argument, ...}, ...}``.

        Raises:
            DocumentError: for unknown operators, malformed arguments, updates
                of ``_id`` and conflicting paths.
        """
        if not isinstance(update, Mapping):
            raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PARAM.to_error(
                "update clause must be OBJECT, instead got: %s", describe_type(update)
            )

        operations: List[UpdateOperation] = []
        for name, args in update.items():
            operator = UpdateOperator.from_name(name)
            if operator is None:
                raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION.to_error(
                    "unrecognized operator '%s'", name
                )
            operation = operator.resolve_operation(args)
            if not operation.only_on_insert:
                for path in operation.paths():
                    if path == DOC_ID or path.startswith(DOC_ID + PATH_SEPARATOR):
                        raise ErrorCode.UNSUPPORTED_UPDATE_FOR_DOC_ID.to_error(name)
            operations.append(operation)

        _check_path_conflicts(operations)
        return cls(tuple(operations))

    def paths(self) -> List[str]:
        return [path for operation in self.operations for path in operation.paths()]


@dataclass(slots=True)
class UpdateResult:
    document: dict
    modified: bool


class DocumentUpdater:
    """Applies an ``UpdateClause`` to documents, mutating them in place."""

    def __init__(self, clause: UpdateClause) -> None:
        self.clause = clause

    @classmethod
    def from_definition(cls, update: Any) -> "DocumentUpdater":
        return cls(UpdateClause.from_definition(update))

    def apply(self, doc: dict, is_insert: bool = False) -> UpdateResult:
        modified = False
        for operation in self.clause.operations:
            if operation.only_on_insert and not is_insert:
                continue
            if operation.update_document(doc):
                modified = True
        LOGGER.debug(
            "Applied %d update operation(s), modified=%s",
            len(self.clause.operations),
            modified,
        )
        return UpdateResult(doc, modified)


def _check_path_conflicts(operations: List[UpdateOperation]) -> None:
    """Reject the same path, or a path and one of its prefixes, used twice."""
    paths = [(path, operation.operator) for operation in operations for path in operation.paths()]
    for (first, first_op), (second, second_op) in combinations(paths, 2):
        if first == second or _overlaps(first, second):
            raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PATH.to_error(
                "update path ('%s') of '%s' conflicts with path ('%s') of '%s'",
                first,
                first_op,
                second,
                second_op,
            )


def _overlaps(first: str, second: str) -> bool:
    return second.startswith(first + PATH_SEPARATOR) or first.startswith(second + PATH_SEPARATOR)

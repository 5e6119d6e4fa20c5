"""Registry of supported update operators."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Type

from docshred.update.array_operations import (
    AddToSetOperation,
    PopOperation,
    PullAllOperation,
    PushOperation,
)
from docshred.update.field_operations import (
    CurrentDateOperation,
    RenameOperation,
    SetOnInsertOperation,
    SetOperation,
    UnsetOperation,
)
from docshred.update.numeric_operations import (
    IncOperation,
    MaxOperation,
    MinOperation,
    MulOperation,
)
from docshred.update.operation import UpdateOperation


class UpdateOperator(Enum):
    ADD_TO_SET = "$addToSet"
    CURRENT_DATE = "$currentDate"
    INC = "$inc"
    MAX = "$max"
    MIN = "$min"
    MUL = "$mul"
    POP = "$pop"
    PULL_ALL = "$pullAll"
    PUSH = "$push"
    RENAME = "$rename"
    SET = "$set"
    SET_ON_INSERT = "$setOnInsert"
    UNSET = "$unset"

    @property
    def operator_name(self) -> str:
        return self.value

    @property
    def operation_class(self) -> Type[UpdateOperation]:
        return _OPERATION_CLASSES[self]

    @classmethod
    def from_name(cls, name: str) -> Optional["UpdateOperator"]:
        try:
            return cls(name)
        except ValueError:
            return None

    def resolve_operation(self, args: Any) -> UpdateOperation:
        return self.operation_class.construct(args)


_OPERATION_CLASSES = {
    UpdateOperator.ADD_TO_SET: AddToSetOperation,
    UpdateOperator.CURRENT_DATE: CurrentDateOperation,
    UpdateOperator.INC: IncOperation,
    UpdateOperator.MAX: MaxOperation,
    UpdateOperator.MIN: MinOperation,
    UpdateOperator.MUL: MulOperation,
    UpdateOperator.POP: PopOperation,
    UpdateOperator.PULL_ALL: PullAllOperation,
    UpdateOperator.PUSH: PushOperation,
    UpdateOperator.RENAME: RenameOperation,
    UpdateOperator.SET: SetOperation,
    UpdateOperator.SET_ON_INSERT: SetOnInsertOperation,
    UpdateOperator.UNSET: UnsetOperation,
}

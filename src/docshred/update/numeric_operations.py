"""Arithmetic and comparison update operations: $inc, $mul, $min, $max."""

from __future__ import annotations

import copy
import math
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, List, Mapping

from docshred.errors import ErrorCode
from docshred.update.locator import UpdateTargetLocator
from docshred.update.operation import UpdateOperation
from docshred.utils.json_util import compare_nodes, describe_type, is_number, json_equals


@dataclass(frozen=True, slots=True)
class NumericAction:
    path: str
    value: Any


class _NumericOperation(UpdateOperation):
    def __init__(self, actions: List[NumericAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "_NumericOperation":
        actions = []
        for path, arg in cls.iter_arguments(args):
            if not is_number(arg):
                raise cls.param_error(
                    "%s requires numeric parameter, got: %s", cls.operator, describe_type(arg)
                )
            actions.append(NumericAction(path, arg))
        return cls(actions)

    def paths(self) -> List[str]:
        return [action.path for action in self.actions]

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            target = UpdateTargetLocator.find_or_create(doc, action.path)
            if not target.exists:
                target.replace_value(self.initial_value(action.value))
                changed = True
                continue
            current = target.value
            if not is_number(current):
                raise self.target_error("Number", action.path, current)
            updated = self.combine(current, action.value)
            if json_equals(current, updated):
                continue
            if isinstance(updated, float) and not math.isfinite(updated):
                raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_TARGET.to_error(
                    "%s overflows the value at '%s'", self.operator, action.path
                )
            target.replace_value(updated)
            changed = True
        return changed

    @abstractmethod
    def initial_value(self, arg: Any) -> Any:
        """Value stored when the path does not exist yet."""

    @abstractmethod
    def combine(self, current: Any, arg: Any) -> Any: ...


class IncOperation(_NumericOperation):
    operator = "$inc"

    def initial_value(self, arg: Any) -> Any:
        return arg

    def combine(self, current: Any, arg: Any) -> Any:
        return current + arg


class MulOperation(_NumericOperation):
    operator = "$mul"

    def initial_value(self, arg: Any) -> Any:
        # missing field becomes zero of the argument's kind
        return 0.0 if isinstance(arg, float) else 0

    def combine(self, current: Any, arg: Any) -> Any:
        return current * arg


@dataclass(frozen=True, slots=True)
class CompareAction:
    path: str
    value: Any


class _CompareOperation(UpdateOperation):
    # sign the comparison (argument vs. current) must have to replace the value
    replace_when: int = 0

    def __init__(self, actions: List[CompareAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "_CompareOperation":
        return cls([CompareAction(path, value) for path, value in cls.iter_arguments(args)])

    def paths(self) -> List[str]:
        return [action.path for action in self.actions]

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            target = UpdateTargetLocator.find_or_create(doc, action.path)
            if target.exists:
                diff = compare_nodes(action.value, target.value)
                if diff * self.replace_when <= 0:
                    continue
            target.replace_value(copy.deepcopy(action.value))
            changed = True
        return changed


class MinOperation(_CompareOperation):
    operator = "$min"
    replace_when = -1


class MaxOperation(_CompareOperation):
    operator = "$max"
    replace_when = 1

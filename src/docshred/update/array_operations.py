"""Update operations on array values: $pop, $push, $addToSet, $pullAll."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from docshred.errors import ErrorCode
from docshred.shredding.extension import match_extension
from docshred.update.locator import UpdateTargetLocator
from docshred.update.operation import UpdateOperation
from docshred.utils.json_util import (
    describe_type,
    is_integral_number,
    is_number,
    json_equals,
    number_text,
)


@dataclass(frozen=True, slots=True)
class PopAction:
    path: str
    remove_first: bool


class PopOperation(UpdateOperation):
    """Removes the first (argument -1) or last (argument 1) element of an array."""

    operator = "$pop"

    def __init__(self, actions: List[PopAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "PopOperation":
        actions = []
        for path, arg in cls.iter_arguments(args):
            if not is_number(arg):
                raise cls.param_error(
                    "$pop requires NUMBER argument (-1 or 1), instead got: %s", describe_type(arg)
                )
            if arg == -1:
                remove_first = True
            elif arg == 1:
                remove_first = False
            else:
                raise cls.param_error(
                    "$pop requires argument of -1 or 1, instead got: %s", number_text(arg)
                )
            actions.append(PopAction(path, remove_first))
        return cls(actions)

    def paths(self) -> List[str]:
        return [action.path for action in self.actions]

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            target = UpdateTargetLocator.find_if_exists(doc, action.path)
            if not target.exists:
                continue
            array = target.value
            if not isinstance(array, list):
                raise self.target_error("Array", action.path, array)
            if array:
                array.pop(0 if action.remove_first else -1)
                changed = True
        return changed


@dataclass(frozen=True, slots=True)
class PushAction:
    path: str
    values: Tuple[Any, ...]
    position: Optional[int] = None


class PushOperation(UpdateOperation):
    """Appends values to an array, creating the array if missing.

    Accepts a single value, or ``{"$each": [...], "$position": n}``.
    """

    operator = "$push"
    modifiers = ("$each", "$position")

    def __init__(self, actions: List[PushAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "PushOperation":
        actions = []
        for path, arg in cls.iter_arguments(args):
            modifiers = _extract_modifiers(cls.operator, arg, cls.modifiers)
            if modifiers is None:
                actions.append(PushAction(path, (arg,)))
                continue
            position = modifiers.get("$position")
            if "$position" in modifiers and not is_integral_number(position):
                raise cls.param_error(
                    "$position modifier requires Integer argument, instead got: %s",
                    describe_type(position),
                )
            actions.append(PushAction(path, tuple(modifiers["$each"]), position))
        return cls(actions)

    def paths(self) -> List[str]:
        return [action.path for action in self.actions]

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            target = UpdateTargetLocator.find_or_create(doc, action.path)
            if not target.exists:
                target.replace_value(copy.deepcopy(list(action.values)))
                changed = True
                continue
            array = target.value
            if not isinstance(array, list):
                raise self.target_error("Array", action.path, array)
            if not action.values:
                continue
            if action.position is None:
                array.extend(copy.deepcopy(action.values))
            else:
                index = action.position
                if index < 0:
                    index = max(len(array) + index, 0)
                array[index:index] = copy.deepcopy(action.values)
            changed = True
        return changed


@dataclass(frozen=True, slots=True)
class AddToSetAction:
    path: str
    values: Tuple[Any, ...]


class AddToSetOperation(UpdateOperation):
    """Adds values not yet present in an array; accepts ``{"$each": [...]}``."""

    operator = "$addToSet"
    modifiers = ("$each",)

    def __init__(self, actions: List[AddToSetAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "AddToSetOperation":
        actions = []
        for path, arg in cls.iter_arguments(args):
            modifiers = _extract_modifiers(cls.operator, arg, cls.modifiers)
            values = (arg,) if modifiers is None else tuple(modifiers["$each"])
            actions.append(AddToSetAction(path, values))
        return cls(actions)

    def paths(self) -> List[str]:
        return [action.path for action in self.actions]

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            target = UpdateTargetLocator.find_or_create(doc, action.path)
            if not target.exists:
                target.replace_value([])
                changed = True
            array = target.value
            if not isinstance(array, list):
                raise self.target_error("Array", action.path, array)
            for value in action.values:
                if not any(json_equals(value, existing) for existing in array):
                    array.append(copy.deepcopy(value))
                    changed = True
        return changed


@dataclass(frozen=True, slots=True)
class PullAllAction:
    path: str
    values: Tuple[Any, ...]


class PullAllOperation(UpdateOperation):
    """Removes every occurrence of the given values from an array."""

    operator = "$pullAll"

    def __init__(self, actions: List[PullAllAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "PullAllOperation":
        actions = []
        for path, arg in cls.iter_arguments(args):
            if not isinstance(arg, list):
                raise cls.param_error(
                    "$pullAll requires ARRAY argument, instead got: %s", describe_type(arg)
                )
            actions.append(PullAllAction(path, tuple(arg)))
        return cls(actions)

    def paths(self) -> List[str]:
        return [action.path for action in self.actions]

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            target = UpdateTargetLocator.find_if_exists(doc, action.path)
            if not target.exists:
                continue
            array = target.value
            if not isinstance(array, list):
                raise self.target_error("Array", action.path, array)
            kept = [
                element
                for element in array
                if not any(json_equals(element, value) for value in action.values)
            ]
            if len(kept) != len(array):
                array[:] = kept
                changed = True
        return changed


def _extract_modifiers(operator: str, arg: Any, allowed: Tuple[str, ...]) -> Optional[dict]:
    """Return the modifier object of ``arg``, or None if ``arg`` is a plain value."""
    if not isinstance(arg, dict) or not arg or match_extension(arg) is not None:
        return None
    first = next(iter(arg))
    if not first.startswith("$"):
        return None
    for name in arg:
        if name not in allowed:
            raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_MODIFIER.to_error(
                "%s only supports %s modifiers; trying to use '%s'",
                operator,
                " and ".join(allowed),
                name,
            )
    if "$each" not in arg:
        raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_MODIFIER.to_error(
            "%s modifiers can only be used with $each modifier; none included", operator
        )
    each = arg["$each"]
    if not isinstance(each, list):
        raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PARAM.to_error(
            "%s modifier $each requires ARRAY argument, found: %s", operator, describe_type(each)
        )
    return arg

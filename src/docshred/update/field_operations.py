"""Update operations that replace or move whole values."""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass
from typing import Any, List, Mapping

from docshred.constants import PATH_SEPARATOR
from docshred.shredding.extension import JsonExtensionType
from docshred.update.locator import UpdateTargetLocator
from docshred.update.operation import UpdateOperation, validate_update_path
from docshred.utils.json_util import describe_type, json_equals, to_json_text


@dataclass(frozen=True, slots=True)
class SetAction:
    path: str
    value: Any


class SetOperation(UpdateOperation):
    """Sets values at paths, creating intermediate objects as needed."""

    operator = "$set"

    def __init__(self, actions: List[SetAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "SetOperation":
        return cls([SetAction(path, value) for path, value in cls.iter_arguments(args)])

    def paths(self) -> List[str]:
        return [action.path for action in self.actions]

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            target = UpdateTargetLocator.find_or_create(doc, action.path)
            if target.exists and json_equals(target.value, action.value):
                continue
            target.replace_value(copy.deepcopy(action.value))
            changed = True
        return changed


class SetOnInsertOperation(SetOperation):
    operator = "$setOnInsert"
    only_on_insert = True


class UnsetOperation(UpdateOperation):
    """Removes properties; the argument value is ignored."""

    operator = "$unset"

    def __init__(self, paths: List[str]) -> None:
        self._paths = sorted(paths)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "UnsetOperation":
        return cls([path for path, _ in cls.iter_arguments(args)])

    def paths(self) -> List[str]:
        return list(self._paths)

    def update_document(self, doc: dict) -> bool:
        changed = False
        for path in self._paths:
            target = UpdateTargetLocator.find_if_exists(doc, path)
            if target.exists:
                target.remove_value()
                changed = True
        return changed


@dataclass(frozen=True, slots=True)
class RenameAction:
    path: str
    new_path: str


class RenameOperation(UpdateOperation):
    """Moves the value at one path to another."""

    operator = "$rename"

    def __init__(self, actions: List[RenameAction]) -> None:
        self.actions = self.sort_by_path(actions)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "RenameOperation":
        actions = []
        for path, new_path in cls.iter_arguments(args):
            if not isinstance(new_path, str) or not new_path:
                raise cls.param_error(
                    "$rename requires STRING parameter for new name, got: %s",
                    describe_type(new_path),
                )
            validate_update_path(cls.operator, new_path)
            if new_path == path:
                raise cls.param_error(
                    "$rename requires that 'source' and 'destination' differ ('%s')", path
                )
            if _is_prefix(path, new_path) or _is_prefix(new_path, path):
                raise cls.param_error(
                    "$rename cannot move '%s' into or out of itself ('%s')", path, new_path
                )
            actions.append(RenameAction(path, new_path))
        return cls(actions)

    def paths(self) -> List[str]:
        result = []
        for action in self.actions:
            result.append(action.path)
            result.append(action.new_path)
        return result

    def update_document(self, doc: dict) -> bool:
        changed = False
        for action in self.actions:
            source = UpdateTargetLocator.find_if_exists(doc, action.path)
            if not source.exists:
                continue
            if source.in_array:
                raise self.target_error("Object property", action.path, source.context)
            destination = UpdateTargetLocator.find_or_create(doc, action.new_path)
            if destination.in_array:
                raise self.target_error("Object property", action.new_path, destination.context)
            value = source.remove_value()
            destination.replace_value(value)
            changed = True
        return changed


class CurrentDateOperation(UpdateOperation):
    """Sets paths to the current time as ``{"$date": <epoch millis>}``."""

    operator = "$currentDate"

    def __init__(self, paths: List[str]) -> None:
        self._paths = sorted(paths)

    @classmethod
    def construct(cls, args: Mapping[str, Any]) -> "CurrentDateOperation":
        paths = []
        for path, arg in cls.iter_arguments(args):
            if arg is not True and arg != {"$type": "date"}:
                raise cls.param_error(
                    "$currentDate requires argument of either `true` or `{\"$type\":\"date\"}`,"
                    " got: %s",
                    _render(arg),
                )
            paths.append(path)
        return cls(paths)

    def paths(self) -> List[str]:
        return list(self._paths)

    def update_document(self, doc: dict) -> bool:
        now = {JsonExtensionType.DATE.encoded_name: time.time_ns() // 1_000_000}
        for path in self._paths:
            UpdateTargetLocator.find_or_create(doc, path).replace_value(dict(now))
        return bool(self._paths)


def _is_prefix(prefix: str, path: str) -> bool:
    return path.startswith(prefix + PATH_SEPARATOR)


def _render(value: Any) -> str:
    try:
        return to_json_text(value)
    except (TypeError, ValueError):
        return describe_type(value)

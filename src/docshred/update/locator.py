"""Locating (and optionally creating) the value an update path points to."""

from __future__ import annotations

from typing import Any, Union

from docshred.constants import PATH_SEPARATOR
from docshred.errors import ErrorCode
from docshred.utils.json_util import describe_type

Container = Union[dict, list]


class UpdateTarget:
    """Result of resolving a dotted path against a document.

    ``context`` is the object or array holding the value (``None`` when the
    path runs through an atomic value), ``key`` the property name or index.
    """

    __slots__ = ("path", "context", "key", "value", "exists")

    def __init__(self, path: str, context: Container | None, key: Any, value: Any, exists: bool):
        self.path = path
        self.context = context
        self.key = key
        self.value = value
        self.exists = exists

    @classmethod
    def missing(
        cls, path: str, context: Container | None = None, key: Any = None
    ) -> "UpdateTarget":
        return cls(path, context, key, None, False)

    @property
    def in_array(self) -> bool:
        return isinstance(self.context, list)

    def replace_value(self, value: Any) -> None:
        if self.context is None:
            raise ErrorCode.UNSUPPORTED_UPDATE_OPERATION_TARGET.to_error(
                "cannot set value at path '%s'", self.path
            )
        if isinstance(self.context, list):
            # writing past the end pads with nulls
            while len(self.context) <= self.key:
                self.context.append(None)
        self.context[self.key] = value
        self.value = value
        self.exists = True

    def remove_value(self) -> Any:
        """Remove the value; array elements are replaced by null to keep indices."""
        if not self.exists:
            return None
        previous = self.value
        if isinstance(self.context, list):
            self.context[self.key] = None
        else:
            del self.context[self.key]
        self.value = None
        self.exists = False
        return previous


class UpdateTargetLocator:
    @staticmethod
    def find_if_exists(doc: dict, path: str) -> UpdateTarget:
        """Resolve ``path`` without modifying ``doc``."""
        segments = path.split(PATH_SEPARATOR)
        context: Any = doc
        for position, segment in enumerate(segments):
            if isinstance(context, dict):
                if segment not in context:
                    return UpdateTarget.missing(path, context, segment)
                key: Any = segment
            elif isinstance(context, list):
                key = _parse_index(segment)
                if key is None or key >= len(context):
                    return UpdateTarget.missing(path, context, key)
            else:
                return UpdateTarget.missing(path)

            value = context[key]
            if position == len(segments) - 1:
                return UpdateTarget(path, context, key, value, True)
            context = value
        return UpdateTarget.missing(path)

    @staticmethod
    def find_or_create(doc: dict, path: str) -> UpdateTarget:
        """Resolve ``path``, creating missing intermediate objects.

        The final value itself is not created; the returned target reports
        whether it exists and can be written with ``replace_value()``.
        """
        segments = path.split(PATH_SEPARATOR)
        context: Any = doc
        for segment in segments[:-1]:
            if isinstance(context, dict):
                if segment not in context:
                    context[segment] = {}
                context = context[segment]
            elif isinstance(context, list):
                index = _require_index(context, segment, path)
                while len(context) < index:
                    context.append(None)
                if index == len(context):
                    context.append({})
                context = context[index]
            else:
                raise _cannot_create(segment, path, context)

        last = segments[-1]
        if isinstance(context, dict):
            if last in context:
                return UpdateTarget(path, context, last, context[last], True)
            return UpdateTarget.missing(path, context, last)
        if isinstance(context, list):
            index = _require_index(context, last, path)
            if index < len(context):
                return UpdateTarget(path, context, index, context[index], True)
            return UpdateTarget.missing(path, context, index)
        raise _cannot_create(last, path, context)


def _parse_index(segment: str) -> int | None:
    if segment.isdigit() and segment.isascii():
        return int(segment)
    return None


def _require_index(context: list, segment: str, path: str) -> int:
    index = _parse_index(segment)
    if index is None:
        raise _cannot_create(segment, path, context)
    return index


def _cannot_create(segment: str, path: str, context: Any):
    return ErrorCode.UNSUPPORTED_UPDATE_OPERATION_TARGET.to_error(
        "cannot create field ('%s') in path '%s'; only OBJECT nodes have properties (got %s)",
        segment,
        path,
        describe_type(context),
    )

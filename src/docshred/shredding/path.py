"""Addressing of properties and array elements within a document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from docshred.constants import PATH_SEPARATOR

Segment = Union[str, int]


@dataclass(frozen=True, slots=True)
class JsonPath:
    """Immutable path from the document root to a value.

    Segments are property names (``str``) or array indices (``int``); two paths
    are equal when their segment sequences are equal. ``str(path)`` is the
    canonical external form, with indices rendered as digits.
    """

    segments: Tuple[Segment, ...] = ()

    @classmethod
    def root(cls) -> "JsonPath":
        return _ROOT

    @classmethod
    def of(cls, *segments: Segment) -> "JsonPath":
        return cls(tuple(segments))

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def parent(self) -> "JsonPath":
        return JsonPath(self.segments[:-1])

    @property
    def last_segment(self) -> Segment | None:
        return self.segments[-1] if self.segments else None

    def child_property(self, name: str) -> "JsonPath":
        return JsonPath(self.segments + (name,))

    def child_index(self, index: int) -> "JsonPath":
        return JsonPath(self.segments + (index,))

    def __str__(self) -> str:
        return PATH_SEPARATOR.join(str(segment) for segment in self.segments)

    def __lt__(self, other: "JsonPath") -> bool:
        if not isinstance(other, JsonPath):
            return NotImplemented
        return str(self) < str(other)


_ROOT = JsonPath()


class PathBuilder:
    """Mutable builder used during traversal.

    One builder is shared by all siblings at a nesting level: ``property()`` and
    ``index()`` replace the current leaf segment instead of appending. Nested
    levels get their own builder so descending never disturbs the parent.
    Callers must ``build()`` a snapshot whenever a path is retained.
    """

    __slots__ = ("_parent", "_segment")

    def __init__(self, parent: JsonPath | None = None) -> None:
        self._parent = parent if parent is not None else JsonPath.root()
        self._segment: Segment | None = None

    @classmethod
    def root_builder(cls) -> "PathBuilder":
        return cls()

    def property(self, name: str) -> "PathBuilder":
        self._segment = name
        return self

    def index(self, index: int) -> "PathBuilder":
        self._segment = index
        return self

    def build(self) -> JsonPath:
        if self._segment is None:
            return self._parent
        return JsonPath(self._parent.segments + (self._segment,))

    def nested_object_builder(self) -> "PathBuilder":
        return PathBuilder(self.build())

    def nested_array_builder(self) -> "PathBuilder":
        return PathBuilder(self.build())

"""Indexing projection: which document branches are shredded into indexed facts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping

from docshred.constants import DOC_ID, PATH_SEPARATOR
from docshred.errors import ErrorCode
from docshred.utils.json_util import describe_type

LOGGER = logging.getLogger(__name__)

WILDCARD = "*"

_IN = "in"
_PARTIAL = "partial"
_NONE = "none"


@dataclass(frozen=True, slots=True)
class IndexingProjector:
    """Allow-list or deny-list of dotted paths.

    An allow-list (``inclusion=True``) indexes only the listed paths and their
    descendants; a deny-list indexes everything except them. Array indices are
    not part of projection paths: elements share the path of their array.
    ``_id`` is always indexed.
    """

    inclusion: bool = False
    paths: FrozenSet[str] = frozenset()
    _prefixes: FrozenSet[str] = field(default=frozenset(), init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        prefixes = set()
        for path in self.paths:
            segments = path.split(PATH_SEPARATOR)
            for end in range(1, len(segments)):
                prefixes.add(PATH_SEPARATOR.join(segments[:end]))
        object.__setattr__(self, "_prefixes", frozenset(prefixes))

    @classmethod
    def identity(cls) -> "IndexingProjector":
        return cls(inclusion=False, paths=frozenset())

    @classmethod
    def from_definition(cls, definition: Mapping[str, Any] | None) -> "IndexingProjector":
        """Create a projector from ``{"allow": [...]}`` or ``{"deny": [...]}``."""
        if definition is None:
            return cls.identity()
        if not isinstance(definition, Mapping):
            raise ErrorCode.INVALID_INDEXING_DEFINITION.to_error(
                "definition must be OBJECT, was %s", describe_type(definition)
            )
        if not definition:
            return cls.identity()

        unknown = sorted(set(definition) - {"allow", "deny"})
        if unknown:
            raise ErrorCode.INVALID_INDEXING_DEFINITION.to_error(
                "only 'allow' or 'deny' allowed, got '%s'", unknown[0]
            )
        if len(definition) != 1:
            raise ErrorCode.INVALID_INDEXING_DEFINITION.to_error(
                "'allow' and 'deny' cannot be used together"
            )

        name, paths = next(iter(definition.items()))
        if not isinstance(paths, list):
            raise ErrorCode.INVALID_INDEXING_DEFINITION.to_error(
                "'%s' value must be ARRAY of path Strings, was %s", name, describe_type(paths)
            )
        for path in paths:
            if not isinstance(path, str) or not path:
                raise ErrorCode.INVALID_INDEXING_DEFINITION.to_error(
                    "'%s' must contain only non-empty path Strings, got %s",
                    name,
                    describe_type(path) if not isinstance(path, str) else "empty String",
                )
        if WILDCARD in paths and len(paths) > 1:
            raise ErrorCode.INVALID_INDEXING_DEFINITION.to_error(
                "wildcard '%s' must be the only entry of '%s'", WILDCARD, name
            )

        if name == "allow":
            if paths == [WILDCARD]:
                return cls.identity()
            return cls(inclusion=True, paths=frozenset(paths))
        if paths == [WILDCARD]:
            # index nothing but _id
            return cls(inclusion=True, paths=frozenset())
        return cls(inclusion=False, paths=frozenset(paths))

    @property
    def is_identity(self) -> bool:
        return not self.inclusion and not self.paths

    def is_path_included(self, path: str) -> bool:
        if _is_doc_id_path(path):
            return True
        matched = self._match(path) == _IN
        return matched if self.inclusion else not matched

    def apply_projection(self, doc: dict) -> None:
        """Prune non-indexed branches of ``doc`` in place."""
        if self.is_identity:
            return
        self._prune_object(doc, "")

    def _match(self, path: str) -> str:
        if path in self.paths:
            return _IN
        segments = path.split(PATH_SEPARATOR)
        for end in range(1, len(segments)):
            if PATH_SEPARATOR.join(segments[:end]) in self.paths:
                return _IN
        if path in self._prefixes:
            return _PARTIAL
        return _NONE

    def _prune_object(self, obj: dict, prefix: str) -> None:
        for key in list(obj):
            path = prefix + key
            if not prefix and key == DOC_ID:
                continue
            keep, value = self._prune_value(obj[key], path)
            if keep:
                obj[key] = value
            else:
                del obj[key]

    def _prune_value(self, value: Any, path: str) -> "tuple[bool, Any]":
        match = self._match(path)
        if match == _IN:
            return self.inclusion, value
        if match == _NONE:
            return not self.inclusion, value
        # some descendant path is listed: only containers can be partially kept
        if isinstance(value, dict):
            self._prune_object(value, path + PATH_SEPARATOR)
            return True, value
        if isinstance(value, list):
            kept = []
            for element in value:
                keep, element = self._prune_value(element, path)
                if keep:
                    kept.append(element)
            value[:] = kept
            return True, value
        return not self.inclusion, value


def _is_doc_id_path(path: str) -> bool:
    return path == DOC_ID or path.startswith(DOC_ID + PATH_SEPARATOR)

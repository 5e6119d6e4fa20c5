"""Shred a JSON document into the indexed facts stored alongside it.

The traversal itself is separate from fact collection: ``traverse`` walks the
tree and reports every addressable value to a ``FactCollector``.
"""

from __future__ import annotations

import copy
import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Protocol

from docshred.config import CollectionSettings, DocumentLimitsConfig
from docshred.constants import DOC_ID, VECTOR_EMBEDDING_FIELD, VECTOR_EMBEDDING_TEXT_FIELD
from docshred.errors import ErrorCode
from docshred.models import ShreddedDocument
from docshred.projection import IndexingProjector
from docshred.shredding.accumulator import ShredAccumulator
from docshred.shredding.doc_id import DocumentId, normalize_document_id
from docshred.shredding.extension import JsonExtensionType, match_extension
from docshred.shredding.hasher import DocValueHasher
from docshred.shredding.path import JsonPath, PathBuilder
from docshred.shredding.validation import FullDocValidator, IndexableValueValidator
from docshred.utils.json_util import describe_type, is_number, to_decimal, to_json_text, utf8_length

LOGGER = logging.getLogger(__name__)


class FactCollector(Protocol):
    """Receiver of traversal callbacks, one per addressable value."""

    def shred_object(self, path: JsonPath, obj: dict) -> bool:
        """Record an object; return False to skip its properties."""
        ...

    def shred_array(self, path: JsonPath, arr: list) -> None: ...

    def shred_text(self, path: JsonPath, text: str) -> None: ...

    def shred_number(self, path: JsonPath, number: Decimal) -> None: ...

    def shred_boolean(self, path: JsonPath, value: bool) -> None: ...

    def shred_null(self, path: JsonPath) -> None: ...

    def shred_timestamp(self, path: JsonPath, value: datetime) -> None: ...

    def shred_vector(self, path: JsonPath, vector: list) -> None: ...

    def shred_vectorize(self, path: JsonPath) -> None: ...


class Shredder:
    """Turns documents into ``ShreddedDocument`` records.

    Holds only read-only configuration, so one instance can serve concurrent
    callers. Input documents are never modified.
    """

    def __init__(
        self,
        limits: DocumentLimitsConfig | None = None,
        settings: CollectionSettings | None = None,
    ) -> None:
        self.limits = limits if limits is not None else DocumentLimitsConfig()
        self.settings = settings if settings is not None else CollectionSettings.empty()

    def shred(
        self,
        doc: Any,
        tx_id: Optional[uuid.UUID] = None,
        projector: Optional[IndexingProjector] = None,
    ) -> ShreddedDocument:
        """Shred a single document.

        Args:
            doc: Parsed JSON document; must be an object.
            tx_id: Optional transaction id stored with the record.
            projector: Indexing projector to apply; defaults to the one from
                the collection settings.

        Returns:
            ShreddedDocument with ``_id`` as the first property of ``doc_json``.
        """
        doc_with_id = normalize_document_id(doc, self.settings.id_type)
        doc_id = DocumentId.from_json(doc_with_id[DOC_ID])

        # structural limits apply to the full document, before any pruning
        FullDocValidator(self.limits).validate(doc_with_id)

        doc_json = _serialize(doc_with_id)
        doc_size = utf8_length(doc_json)
        if doc_size > self.limits.max_size:
            raise ErrorCode.SHRED_DOC_LIMIT_VIOLATION.to_error(
                "document size (%d bytes) exceeds maximum allowed (%d)",
                doc_size,
                self.limits.max_size,
            )

        if projector is None:
            projector = self.settings.indexing
        if projector.is_identity:
            indexable_doc = doc_with_id
        else:
            # doc_with_id shares nested values with the caller's document
            indexable_doc = copy.deepcopy(doc_with_id)
            projector.apply_projection(indexable_doc)

        IndexableValueValidator(self.limits).validate(indexable_doc)

        accumulator = ShredAccumulator(DocValueHasher(), doc_id, tx_id, doc_json)
        traverse(indexable_doc, accumulator, PathBuilder.root_builder())
        result = accumulator.build()
        LOGGER.debug(
            "Shredded document %s: %d paths, %d bytes",
            doc_id.as_text(),
            len(result.exist_keys),
            doc_size,
        )
        return result


def traverse(doc: Any, collector: FactCollector, path_builder: PathBuilder) -> None:
    """Walk ``doc`` reporting every value to ``collector``.

    The root itself is only reported when it is an atomic value; for a root
    object or array only its contents are.
    """
    if isinstance(doc, dict):
        _traverse_object(doc, collector, path_builder)
    elif isinstance(doc, list):
        _traverse_array(doc, collector, path_builder)
    else:
        _traverse_value(doc, collector, path_builder)


def _traverse_object(obj: dict, collector: FactCollector, path_builder: PathBuilder) -> None:
    for key, value in obj.items():
        path_builder.property(key)
        _traverse_value(value, collector, path_builder)


def _traverse_array(arr: list, collector: FactCollector, path_builder: PathBuilder) -> None:
    for index, value in enumerate(arr):
        path_builder.index(index)
        _traverse_value(value, collector, path_builder)


def _traverse_value(value: Any, collector: FactCollector, path_builder: PathBuilder) -> None:
    path = path_builder.build()

    if len(path.segments) == 1:
        if path.segments[0] == VECTOR_EMBEDDING_FIELD:
            _traverse_vector(path, value, collector)
            return
        if path.segments[0] == VECTOR_EMBEDDING_TEXT_FIELD:
            if value is not None:
                collector.shred_vectorize(path)
            return

    if isinstance(value, dict):
        extension = match_extension(value)
        if extension is not None:
            _traverse_extension(path, extension[0], extension[1], collector)
        elif collector.shred_object(path, value):
            _traverse_object(value, collector, path_builder.nested_object_builder())
    elif isinstance(value, list):
        collector.shred_array(path, value)
        _traverse_array(value, collector, path_builder.nested_array_builder())
    elif isinstance(value, str):
        collector.shred_text(path, value)
    elif isinstance(value, bool):
        collector.shred_boolean(path, value)
    elif is_number(value):
        collector.shred_number(path, to_decimal(value))
    elif value is None:
        collector.shred_null(path)
    else:
        raise ErrorCode.SHRED_UNRECOGNIZED_NODE_TYPE.to_error(describe_type(value))


def _traverse_extension(
    path: JsonPath, ext_type: JsonExtensionType, inner: Any, collector: FactCollector
) -> None:
    decoded = ext_type.decode(inner)
    if ext_type is JsonExtensionType.DATE:
        collector.shred_timestamp(path, decoded)
    else:
        collector.shred_text(path, str(decoded))


def _traverse_vector(path: JsonPath, value: Any, collector: FactCollector) -> None:
    if value is None:
        return
    if not isinstance(value, list):
        raise ErrorCode.SHRED_BAD_DOCUMENT_VECTOR_TYPE.to_error(describe_type(value))
    if not value:
        raise ErrorCode.SHRED_BAD_VECTOR_SIZE.to_error()
    for element in value:
        if not is_number(element):
            raise ErrorCode.SHRED_BAD_VECTOR_VALUE.to_error(
                "found element of type %s", describe_type(element)
            )
    collector.shred_vector(path, value)


def _serialize(doc: dict) -> str:
    try:
        return to_json_text(doc)
    except (TypeError, ValueError) as exc:
        raise ErrorCode.SHRED_UNRECOGNIZED_NODE_TYPE.to_error(str(exc)) from exc

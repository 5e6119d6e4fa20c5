"""Tests for the document shredder."""

from __future__ import annotations

import copy
import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import numpy as np
import pytest

from docshred.config import CollectionSettings, DocumentLimitsConfig, IdType
from docshred.errors import DocumentError, ErrorCode
from docshred.models import ArrayContainsKey
from docshred.projection import IndexingProjector
from docshred.shredding.doc_id import IdKind
from docshred.shredding.hasher import DocValueHasher
from docshred.shredding.path import JsonPath
from docshred.shredding.shredder import Shredder


def _path(text: str) -> JsonPath:
    return JsonPath.of(*(int(s) if s.isdigit() else s for s in text.split(".")))


@pytest.fixture()
def shredder() -> Shredder:
    return Shredder()


class TestDocumentIdentity:
    """Test _id handling during shredding."""

    def test_generated_id_is_first(self, shredder: Shredder) -> None:
        """Should generate a missing _id and serialize it first."""
        record = shredder.shred({"a": 1})

        assert record.id.kind is IdKind.STRING
        assert record.doc_json.startswith('{"_id":"')
        assert list(json.loads(record.doc_json)) == ["_id", "a"]
        assert record.exist_keys[0] == _path("_id")

    def test_generated_id_uses_configured_type(self) -> None:
        """Should generate ids with the collection's id type."""
        shredder = Shredder(settings=CollectionSettings(id_type=IdType.OBJECT_ID))

        record = shredder.shred({"a": 1})

        assert record.id.kind is IdKind.OBJECT_ID
        assert record.doc_json.startswith('{"_id":{"$objectId":"')

    def test_existing_id_preserved(self, shredder: Shredder) -> None:
        """Should keep an existing _id, only moving it first."""
        record = shredder.shred({"a": 1, "_id": "doc-1"})

        assert record.id.value == "doc-1"
        assert record.doc_json == '{"_id":"doc-1","a":1}'

    def test_input_not_modified(self, shredder: Shredder) -> None:
        """Should leave the caller's document unchanged."""
        doc = {"a": {"b": [1, 2]}, "c": "x"}
        original = copy.deepcopy(doc)

        shredder.shred(doc, projector=IndexingProjector.from_definition({"deny": ["a.b"]}))

        assert doc == original
        assert "_id" not in doc

    @pytest.mark.parametrize("doc", [[1, 2], "text", 3, None])
    def test_rejects_non_object(self, shredder: Shredder, doc: object) -> None:
        """Should reject documents that are not objects."""
        with pytest.raises(DocumentError) as exc_info:
            shredder.shred(doc)

        assert exc_info.value.error_code is ErrorCode.SHRED_BAD_DOCUMENT_TYPE
        assert "document to shred must be a JSON Object" in exc_info.value.message

    def test_rejects_bad_id(self, shredder: Shredder) -> None:
        """Should reject ids of unsupported types."""
        with pytest.raises(DocumentError) as exc_info:
            shredder.shred({"_id": [1]})

        assert exc_info.value.error_code is ErrorCode.SHRED_BAD_DOCID_TYPE


class TestIndexedFacts:
    """Test the facts recorded for each value."""

    def test_atomic_values(self, shredder: Shredder) -> None:
        """Should record text, number, boolean and null facts."""
        record = shredder.shred({"_id": "k", "s": "hi", "n": 1.5, "i": 7, "b": False, "z": None})

        assert record.query_text_values == {_path("_id"): "k", _path("s"): "hi"}
        assert record.query_number_values == {_path("n"): Decimal("1.5"), _path("i"): Decimal(7)}
        assert record.query_bool_values == {_path("b"): False}
        assert record.query_null_values == frozenset({_path("z")})

    def test_exist_keys_in_document_order(self, shredder: Shredder) -> None:
        """Should record every path in traversal order."""
        record = shredder.shred({"_id": "k", "a": {"b": [1, "t"]}, "c": None})

        assert [str(p) for p in record.exist_keys] == ["_id", "a", "a.b", "a.b.0", "a.b.1", "c"]

    def test_sub_documents(self, shredder: Shredder) -> None:
        """Should record digests of nested objects, including those in arrays."""
        doc = {"_id": "k", "a": {"b": {"c": 1}}, "arr": [{"x": 1}]}

        record = shredder.shred(doc)

        hasher = DocValueHasher()
        assert record.sub_doc_equals == {
            _path("a"): hasher.hash({"b": {"c": 1}}).digest,
            _path("a.b"): hasher.hash({"c": 1}).digest,
            _path("arr.0"): hasher.hash({"x": 1}).digest,
        }

    def test_arrays(self, shredder: Shredder) -> None:
        """Should record size, digest and element containment of arrays."""
        record = shredder.shred({"_id": "k", "arr": [1, "a", 1]})

        hasher = DocValueHasher()
        assert record.array_size == {_path("arr"): 3}
        assert record.array_equals == {_path("arr"): hasher.hash([1, "a", 1]).digest}
        assert record.array_contains == frozenset(
            {
                ArrayContainsKey(_path("arr"), hasher.hash(1).digest),
                ArrayContainsKey(_path("arr"), hasher.hash("a").digest),
            }
        )
        assert record.query_number_values[_path("arr.0")] == Decimal(1)

    def test_array_contains_key_encoding(self, shredder: Shredder) -> None:
        """Should encode containment keys as digest followed by path."""
        record = shredder.shred({"_id": "k", "arr": [True]})

        (key,) = record.array_contains
        encoded = key.encode()
        assert encoded == f"{DocValueHasher().hash(True).digest} arr"

    def test_empty_collections(self, shredder: Shredder) -> None:
        """Should expose empty collections when nothing of a kind was found."""
        record = shredder.shred({"_id": "k"})

        assert record.sub_doc_equals == {}
        assert record.array_size == {}
        assert record.array_contains == frozenset()
        assert record.query_timestamp_values == {}
        assert record.query_vector_values is None
        assert not record.has_vectorize_text

    def test_extension_values(self, shredder: Shredder) -> None:
        """Should record dates as timestamps and other extensions as text."""
        doc = {
            "_id": "k",
            "created": {"$date": 1672531200000},
            "ref": {"$objectId": "5f1b2c3d4e5f6a7b8c9d0e1f"},
            "token": {"$uuid": "3f8c2a4e-1b6d-4c7e-9a0b-2d3e4f5a6b7c"},
        }

        record = shredder.shred(doc)

        assert record.query_timestamp_values == {
            _path("created"): datetime(2023, 1, 1, tzinfo=timezone.utc)
        }
        assert record.query_text_values[_path("ref")] == "5f1b2c3d4e5f6a7b8c9d0e1f"
        assert record.query_text_values[_path("token")] == "3f8c2a4e-1b6d-4c7e-9a0b-2d3e4f5a6b7c"
        assert record.sub_doc_equals == {}

    def test_bad_extension_value(self, shredder: Shredder) -> None:
        """Should reject extension wrappers with invalid values."""
        with pytest.raises(DocumentError) as exc_info:
            shredder.shred({"d": {"$date": "yesterday"}})

        assert exc_info.value.error_code is ErrorCode.SHRED_BAD_EJSON_VALUE

    def test_tx_id_recorded(self, shredder: Shredder) -> None:
        """Should store the transaction id."""
        tx_id = uuid.uuid4()

        assert shredder.shred({"a": 1}, tx_id=tx_id).tx_id == tx_id

    def test_record_is_read_only(self, shredder: Shredder) -> None:
        """Should not allow modifying the record."""
        record = shredder.shred({"_id": "k", "a": "x"})

        with pytest.raises(TypeError):
            record.query_text_values[_path("b")] = "y"  # type: ignore[index]
        with pytest.raises(AttributeError):
            record.doc_json = "{}"  # type: ignore[misc]


class TestVectorFields:
    """Test $vector and $vectorize handling."""

    def test_vector(self, shredder: Shredder) -> None:
        """Should store $vector as a float32 array and not as number facts."""
        record = shredder.shred({"_id": "k", "$vector": [0.25, 0.5, 1]})

        assert record.query_vector_values is not None
        assert record.query_vector_values.dtype == np.float32
        np.testing.assert_array_equal(record.query_vector_values, [0.25, 0.5, 1.0])
        assert _path("$vector") in record.exist_keys
        assert record.query_number_values == {}
        assert record.array_size == {}

    def test_null_vector_ignored(self, shredder: Shredder) -> None:
        """Should skip a null $vector entirely."""
        record = shredder.shred({"_id": "k", "$vector": None})

        assert record.query_vector_values is None
        assert record.exist_keys == (_path("_id"),)

    def test_null_vectorize_ignored(self, shredder: Shredder) -> None:
        """Should skip a null $vectorize entirely."""
        record = shredder.shred({"_id": "k", "$vectorize": None})

        assert record.has_vectorize_text is False
        assert record.exist_keys == (_path("_id"),)

    @pytest.mark.parametrize(
        ("vector", "code"),
        [
            ("text", ErrorCode.SHRED_BAD_DOCUMENT_VECTOR_TYPE),
            ([], ErrorCode.SHRED_BAD_VECTOR_SIZE),
            ([0.1, "x"], ErrorCode.SHRED_BAD_VECTOR_VALUE),
        ],
    )
    def test_invalid_vector(self, shredder: Shredder, vector: object, code: ErrorCode) -> None:
        """Should reject malformed $vector values."""
        with pytest.raises(DocumentError) as exc_info:
            shredder.shred({"_id": "k", "$vector": vector})

        assert exc_info.value.error_code is code

    def test_vectorize(self, shredder: Shredder) -> None:
        """Should mark $vectorize text without indexing it as text."""
        record = shredder.shred({"_id": "k", "$vectorize": "some text"})

        assert record.has_vectorize_text
        assert _path("$vectorize") in record.exist_keys
        assert _path("$vectorize") not in record.query_text_values


class TestDeterminism:
    """Test idempotence and digest sensitivity."""

    def test_idempotent(self, shredder: Shredder) -> None:
        """Should produce identical facts when shredding the same document twice."""
        doc = {"_id": 5, "a": {"b": [1, {"c": "x"}]}, "d": [True, None]}

        first = shredder.shred(doc)
        second = shredder.shred(doc)

        assert first == second
        assert first.sub_doc_equals == second.sub_doc_equals
        assert first.array_contains == second.array_contains

    def test_object_order_changes_digest(self, shredder: Shredder) -> None:
        """Should give reordered objects different sub-document digests."""
        record = shredder.shred({"_id": "k", "o1": {"a": 1, "b": 2}, "o2": {"b": 2, "a": 1}})

        assert record.sub_doc_equals[_path("o1")] != record.sub_doc_equals[_path("o2")]

    def test_array_order_changes_digest(self, shredder: Shredder) -> None:
        """Should give reordered arrays different digests and containment entries."""
        record = shredder.shred({"_id": "k", "x": [[1, 2]], "y": [[2, 1]]})

        assert record.array_equals[_path("x.0")] != record.array_equals[_path("y.0")]
        contained_x = {key.digest for key in record.array_contains if key.path == _path("x")}
        contained_y = {key.digest for key in record.array_contains if key.path == _path("y")}
        assert contained_x != contained_y


class TestLimits:
    """Test limit enforcement during shredding."""

    def test_array_at_max_length(self, shredder: Shredder) -> None:
        """Should accept an array of exactly the maximum length."""
        record = shredder.shred({"_id": "k", "arr": list(range(1000))})

        assert record.array_size[_path("arr")] == 1000

    def test_array_over_max_length(self, shredder: Shredder) -> None:
        """Should reject an array one element over the maximum, citing both numbers."""
        with pytest.raises(DocumentError) as exc_info:
            shredder.shred({"_id": "k", "arr": list(range(1001))})

        assert exc_info.value.error_code is ErrorCode.SHRED_DOC_LIMIT_VIOLATION
        assert "(property 'arr') has (1001) exceeds maximum allowed (1000)" in exc_info.value.message

    def test_document_size(self) -> None:
        """Should reject documents whose serialized form is too large."""
        shredder = Shredder(DocumentLimitsConfig(max_size=20))

        with pytest.raises(DocumentError) as exc_info:
            shredder.shred({"_id": "k", "text": "x" * 20})

        assert exc_info.value.message.endswith("document size (41 bytes) exceeds maximum allowed (20)")

    def test_path_length(self) -> None:
        """Should accept a path at the maximum length and reject a longer one."""
        shredder = Shredder(DocumentLimitsConfig(max_property_path_length=5))
        shredder.shred({"_id": "k", "ab": {"cd": 1}})

        with pytest.raises(DocumentError, match="property path length \\(6\\)"):
            shredder.shred({"_id": "k", "ab": {"cde": 1}})

    def test_unrecognized_value(self, shredder: Shredder) -> None:
        """Should reject values that are not JSON."""
        with pytest.raises(DocumentError) as exc_info:
            shredder.shred({"_id": "k", "n": float("nan")})

        assert exc_info.value.error_code is ErrorCode.SHRED_UNRECOGNIZED_NODE_TYPE

    def test_limits_apply_to_indexed_values_only(self) -> None:
        """Should not apply array limits to branches excluded from indexing."""
        shredder = Shredder(DocumentLimitsConfig(max_array_length=2))
        projector = IndexingProjector.from_definition({"deny": ["big"]})

        record = shredder.shred({"_id": "k", "big": [1, 2, 3], "a": 1}, projector=projector)

        assert '"big":[1,2,3]' in record.doc_json
        assert _path("big") not in record.exist_keys


class TestProjection:
    """Test shredding with indexing projection."""

    def test_settings_projector_used_by_default(self) -> None:
        """Should use the collection's projector when none is given."""
        settings = CollectionSettings(indexing=IndexingProjector.from_definition({"allow": ["a"]}))
        shredder = Shredder(settings=settings)

        record = shredder.shred({"_id": "k", "a": {"x": 1}, "b": 2})

        assert [str(p) for p in record.exist_keys] == ["_id", "a", "a.x"]
        assert record.doc_json == '{"_id":"k","a":{"x":1},"b":2}'

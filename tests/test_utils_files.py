"""Tests for file utility functions."""

from __future__ import annotations

from pathlib import Path

import pytest

from docshred.utils.files import iter_documents, iter_json_paths, read_json


class TestIterJsonPaths:
    """Test iter_json_paths function."""

    def test_single_json_file(self, tmp_path: Path) -> None:
        """Should yield single JSON file."""
        doc = tmp_path / "doc.json"
        doc.write_text("{}")

        paths = list(iter_json_paths([doc]))

        assert paths == [doc]

    def test_directory_with_json_files(self, tmp_path: Path) -> None:
        """Should find only JSON files in directory."""
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "notes.txt").write_text("text")

        paths = list(iter_json_paths([tmp_path]))

        assert {p.name for p in paths} == {"a.json"}

    def test_nested_directories(self, tmp_path: Path) -> None:
        """Should descend into nested directories."""
        subdir = tmp_path / "subdir"
        subdir.mkdir()
        (tmp_path / "root.json").write_text("{}")
        (subdir / "nested.json").write_text("{}")

        paths = list(iter_json_paths([tmp_path]))

        assert {p.name for p in paths} == {"root.json", "nested.json"}

    def test_missing_path(self, tmp_path: Path) -> None:
        """Should skip paths that do not exist."""
        assert list(iter_json_paths([tmp_path / "missing.json"])) == []


class TestReadJson:
    """Test read_json function."""

    def test_reads_utf8(self, tmp_path: Path) -> None:
        """Should parse UTF-8 encoded JSON."""
        doc = tmp_path / "doc.json"
        doc.write_text('{"name": "Zoë"}', encoding="utf-8")

        assert read_json(doc) == {"name": "Zoë"}

    def test_rejects_nan(self, tmp_path: Path) -> None:
        """Should reject non-standard number literals."""
        doc = tmp_path / "doc.json"
        doc.write_text('{"value": NaN}')

        with pytest.raises(ValueError, match="NaN"):
            read_json(doc)


class TestIterDocuments:
    """Test iter_documents function."""

    def test_single_document(self) -> None:
        """Should yield a single object as one document."""
        assert list(iter_documents({"a": 1})) == [{"a": 1}]

    def test_array_of_documents(self) -> None:
        """Should yield each element of an array."""
        assert list(iter_documents([{"a": 1}, {"b": 2}])) == [{"a": 1}, {"b": 2}]

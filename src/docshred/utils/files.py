"""Utility helpers for reading JSON documents from files."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Iterator

from docshred.utils.json_util import parse_json


def iter_json_paths(inputs: Iterable[Path]) -> Iterator[Path]:
    """Yield JSON paths from input paths, descending into directories."""
    for item in inputs:
        if item.is_dir():
            yield from iter_json_paths(sorted(child for child in item.rglob("*.json")))
        elif item.is_file() and item.suffix.lower() == ".json":
            yield item


def read_json(path: Path) -> Any:
    """Parse a UTF-8 JSON file."""
    with Path(path).open("r", encoding="utf-8") as handle:
        return parse_json(handle.read())


def iter_documents(value: Any) -> Iterator[Any]:
    """A file holds either one document or an array of documents."""
    if isinstance(value, list):
        yield from value
    else:
        yield value

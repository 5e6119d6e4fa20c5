"""Command line interface for docshred."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Iterator, List, NoReturn, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docshred.config import CollectionSettings, DocumentLimitsConfig, IdType
from docshred.errors import DocumentError, ErrorCode
from docshred.models import ShreddedDocument
from docshred.projection import IndexingProjector
from docshred.shredding.shredder import Shredder
from docshred.update.clause import DocumentUpdater
from docshred.utils.files import iter_documents, iter_json_paths, read_json
from docshred.utils.json_util import parse_json, to_json_text


console = Console()
app = typer.Typer(help="docshred - shred JSON documents into indexed facts")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _fail(error: DocumentError) -> NoReturn:
    console.print(f"[red]{escape(f'[{error.code}]')}[/red] {escape(error.message)}")
    raise typer.Exit(code=1)


def _build_projector(allow: List[str], deny: List[str]) -> IndexingProjector:
    definition = {}
    if allow:
        definition["allow"] = allow
    if deny:
        definition["deny"] = deny
    return IndexingProjector.from_definition(definition)


def _fact_rows(record: ShreddedDocument) -> Iterator[Tuple[str, str, str]]:
    for path, digest in record.sub_doc_equals.items():
        yield str(path), "object", digest
    for path, size in record.array_size.items():
        yield str(path), "array", f"size={size} hash={record.array_equals[path]}"
    for key in sorted(record.array_contains):
        yield str(key.path), "contains", key.digest
    for path, text in record.query_text_values.items():
        yield str(path), "text", text
    for path, number in record.query_number_values.items():
        yield str(path), "number", str(number)
    for path, flag in record.query_bool_values.items():
        yield str(path), "boolean", str(flag).lower()
    for path in sorted(record.query_null_values):
        yield str(path), "null", "null"
    for path, timestamp in record.query_timestamp_values.items():
        yield str(path), "timestamp", timestamp.isoformat()
    if record.query_vector_values is not None:
        yield "$vector", "vector", f"dimension={len(record.query_vector_values)}"
    if record.has_vectorize_text:
        yield "$vectorize", "vectorize", "true"


@app.command()
def shred(
    inputs: List[Path] = typer.Argument(
        ..., help="JSON files (or directories of them) with documents to shred.", resolve_path=True
    ),
    tx_id: Optional[str] = typer.Option(None, "--tx-id", help="Transaction id (UUID) to record"),
    id_type: str = typer.Option("", "--id-type", help="Id type for generated '_id' values"),
    limits: Optional[Path] = typer.Option(None, "--limits", help="JSON file with document limits"),
    allow: List[str] = typer.Option([], "--allow", help="Index only these paths"),
    deny: List[str] = typer.Option([], "--deny", help="Do not index these paths"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Shred documents and print the indexed facts of each."""
    _setup_logging(verbose)
    try:
        transaction = uuid.UUID(tx_id) if tx_id else None
        settings = CollectionSettings(id_type=IdType.from_string(id_type))
        limits_config = DocumentLimitsConfig.load(limits) if limits else DocumentLimitsConfig()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    json_paths = list(iter_json_paths(inputs))
    if not json_paths:
        console.print("[yellow]No JSON files found.[/yellow]")
        return

    try:
        settings.indexing = _build_projector(allow, deny)
        shredder = Shredder(limits_config, settings)
        for json_path in json_paths:
            for doc in iter_documents(_read(json_path)):
                record = shredder.shred(doc, tx_id=transaction)
                _print_record(record)
    except DocumentError as exc:
        _fail(exc)


def _read(path: Path):
    try:
        return read_json(path)
    except ValueError as exc:
        raise ErrorCode.SHRED_BAD_DOCUMENT_TYPE.to_error(
            "cannot parse '%s' as JSON: %s", path.name, exc
        ) from exc


def _print_record(record: ShreddedDocument) -> None:
    console.print(f"Document [bold]{escape(record.id.as_text())}[/bold] ({record.id.kind.value})")
    if record.tx_id is not None:
        console.print(f"Transaction: {record.tx_id}")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Path")
    table.add_column("Kind")
    table.add_column("Value")
    for path, kind, value in _fact_rows(record):
        table.add_row(escape(path), kind, escape(value[:180]))
    console.print(table)
    size = len(record.doc_json.encode("utf-8"))
    console.print(f"Paths: {len(record.exist_keys)}, size: {size} bytes")


@app.command()
def update(
    document: Path = typer.Argument(
        ..., help="JSON file with the document to update", resolve_path=True
    ),
    update_json: str = typer.Argument(..., help="Update clause as JSON text"),
    insert: bool = typer.Option(False, "--insert", help="Treat the update as an insert (upsert)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Apply an update clause to a document and print the result."""
    _setup_logging(verbose)
    if not document.is_file():
        raise typer.BadParameter(f"Document file not found: {document}")
    try:
        definition = parse_json(update_json)
    except ValueError as exc:
        raise typer.BadParameter(f"Update is not valid JSON: {exc}") from exc

    try:
        doc = _read(document)
        if not isinstance(doc, dict):
            raise ErrorCode.SHRED_BAD_DOCUMENT_TYPE.to_error(
                "document to update must be a JSON Object"
            )
        result = DocumentUpdater.from_definition(definition).apply(doc, is_insert=insert)
    except DocumentError as exc:
        _fail(exc)

    console.print(escape(to_json_text(result.document)))
    console.print(f"modified: {str(result.modified).lower()}")

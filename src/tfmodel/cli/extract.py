"""Extraction commands: one table (or JSON document) per command over any number of files."""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tfmodel.core.ast import parse_document_from_file
from tfmodel.core.languages import is_configuration_file
from tfmodel.core.locals import get_locals
from tfmodel.core.module_calls import get_module_calls
from tfmodel.core.provider_refs import get_provider_refs
from tfmodel.models import Diagnostic, Document, Range, has_errors

console = Console()
err_console = Console(stderr=True)

FilesArgument = Annotated[
    list[str], typer.Argument(help="Configuration files, or directories holding *.tf / *.tf.json files.")
]
SyntaxOption = Annotated[str | None, typer.Option("--syntax", help="Force the syntax (hcl or json).")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print JSON instead of a table.")]


def _expand(paths: Sequence[str]) -> list[str]:
    files: list[str] = []
    for path in paths:
        candidate = Path(path)
        if candidate.is_dir():
            files.extend(str(p) for p in sorted(candidate.iterdir()) if p.is_file() and is_configuration_file(p))
        else:
            files.append(path)
    return files


def _load(paths: Sequence[str], syntax: str | None) -> list[Document]:
    documents: list[Document] = []
    for path in _expand(paths):
        try:
            documents.append(parse_document_from_file(path, syntax))
        except (FileNotFoundError, ValueError) as e:
            err_console.print(f"[red]{escape(str(e))}[/red]", soft_wrap=True)
            raise typer.Exit(1) from None
    return documents


def _location(range_: Range) -> str:
    return f"{range_.filename}:{range_.start.line},{range_.start.column}"


def _render_table(headers: Sequence[str], rows: Sequence[tuple[Any, ...]]) -> None:
    table = Table(show_lines=False)
    for h in headers:
        table.add_column(h)
    for row in rows:
        table.add_row(*(escape(str(v)) for v in row))
    console.print(table)
    console.print(f"({len(rows)} rows)")


def _finish(diags: list[Diagnostic]) -> None:
    for diag in diags:
        color = "red" if diag.severity == "error" else "yellow"
        err_console.print(f"[{color}]{diag.severity}[/{color}]: {escape(str(diag))}", highlight=False, soft_wrap=True)
    if has_errors(diags):
        raise typer.Exit(1)


def modules(files: FilesArgument, syntax: SyntaxOption = None, as_json: JsonOption = False) -> None:
    """List module calls with their source and version constraints."""
    rows: list[tuple[Any, ...]] = []
    records: list[dict[str, Any]] = []
    diags: list[Diagnostic] = []
    for document in _load(files, syntax):
        diags.extend(document.diagnostics)
        calls, call_diags = get_module_calls(document)
        diags.extend(call_diags)
        for call in calls:
            version = ", ".join(str(c) for c in call.version) if call.version else ""
            rows.append((call.name, call.source, version, _location(call.def_range)))
            records.append(call.model_dump(mode="json"))

    if as_json:
        typer.echo(json.dumps(records, indent=2))
    else:
        _render_table(["name", "source", "version", "location"], rows)
    _finish(diags)


def locals_(files: FilesArgument, syntax: SyntaxOption = None, as_json: JsonOption = False) -> None:
    """List local values."""
    rows: list[tuple[Any, ...]] = []
    records: list[dict[str, Any]] = []
    diags: list[Diagnostic] = []
    for document in _load(files, syntax):
        diags.extend(document.diagnostics)
        values, local_diags = get_locals(document)
        diags.extend(local_diags)
        for local in values.values():
            rows.append((local.name, local.attribute.expr.text, _location(local.def_range)))
            records.append(local.model_dump(mode="json"))

    if as_json:
        typer.echo(json.dumps(records, indent=2))
    else:
        _render_table(["name", "expression", "location"], rows)
    _finish(diags)


def providers(files: FilesArgument, syntax: SyntaxOption = None, as_json: JsonOption = False) -> None:
    """List referenced providers, one entry per provider and file."""
    rows: list[tuple[Any, ...]] = []
    records: list[dict[str, Any]] = []
    diags: list[Diagnostic] = []
    for document in _load(files, syntax):
        diags.extend(document.diagnostics)
        refs, ref_diags = get_provider_refs(document)
        diags.extend(ref_diags)
        for ref in refs.values():
            rows.append((ref.name, _location(ref.def_range)))
            records.append(ref.model_dump(mode="json"))

    if as_json:
        typer.echo(json.dumps(records, indent=2))
    else:
        _render_table(["name", "location"], rows)
    _finish(diags)

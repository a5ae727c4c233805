# src/blockschema/cli.py
"""
blockschema Command Line Interface (CLI).

This module implements the terminal interface using `typer` and `rich`. It is
thin glue: it loads a registry from disk, runs the compiler, and renders the
result. All schema logic lives in :mod:`blockschema.schema`.

Commands
--------
- **generate**: Compile a registry into the schema document (stdout or file).
- **audit**: Check an existing schema against the structured-output limits.
- **validate**: Check a model reply (content JSON) against a registry's schema.

Usage
-----
    $ blockschema generate samples/core_blocks.json -o ui-schema.json
    $ blockschema audit ui-schema.json --max-properties 100
    $ blockschema validate samples/core_blocks.json reply.json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from blockschema.core.errors import SchemaGenerationError
from blockschema.registry.loader import load_registry
from blockschema.schema.compiler import CompiledSchema, SchemaCompiler
from blockschema.schema.limits import SchemaAudit, audit_schema
from blockschema.schema.output import validate_content

# Ensure env vars (like BLOCKSCHEMA_ALLOWED_BLOCKS) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="blockschema: Compile block type registries into structured-output JSON Schemas.",
    rich_markup_mode="markdown",
)
# Status and reports go to stderr so `generate` can pipe clean JSON on stdout.
console = Console(stderr=True)


# --------------------------------------------------------------------------- #
# Helpers: Loading
# --------------------------------------------------------------------------- #


def _compile(registry_path: Path) -> CompiledSchema:
    """Helper: Load the registry and compile it with the configured tables."""
    registry = load_registry(registry_path)
    return SchemaCompiler(registry).compile()


def _read_json(path: Path) -> Any:
    """Helper: Read a JSON file or exit with a readable error."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]❌ Cannot read {path}:[/bold red] {e}")
        raise typer.Exit(code=1) from e


# --------------------------------------------------------------------------- #
# Helpers: Rendering
# --------------------------------------------------------------------------- #


def _render_summary(compiled: CompiledSchema) -> None:
    """Helper: One row per top-level block with its attribute and child names."""
    table = Table(title="Compiled Blocks", show_lines=False)
    table.add_column("Block", style="cyan")
    table.add_column("Attributes")
    table.add_column("Inner Blocks", style="magenta")

    for name in compiled.block_names:
        fragment = compiled.fragments[name]
        attrs = fragment["properties"]["attributes"]["required"]
        inner = fragment["properties"].get("innerBlocks")
        children = [c["title"] for c in inner["items"]["anyOf"]] if inner else []
        table.add_row(name, ", ".join(attrs) or "-", ", ".join(children) or "-")

    console.print(table)


def _render_omissions(compiled: CompiledSchema) -> None:
    """Helper: List attributes that were dropped and why."""
    if not compiled.omissions:
        console.print("[dim]No attributes were omitted.[/dim]")
        return
    console.print("[bold dim]Omitted attributes:[/bold dim]")
    for omission in compiled.omissions:
        console.print(f" [dim]- {escape(omission.describe())}[/dim]")


def _render_audit(audit: SchemaAudit) -> None:
    """Helper: Show the property budget and any violated constraint."""
    budget = f"{audit.total_properties}/{audit.max_properties} properties"
    if audit.ok:
        console.print(f"[bold green]✅ Audit passed[/bold green] ({budget})")
        return

    count = len(audit.violations)
    console.print(f"[bold yellow]⚠️ Audit found {count} issue(s)[/bold yellow] ({budget})")
    for v in audit.violations:
        console.print(f" [yellow]{v.rule}[/yellow] {escape(v.path)}: {escape(v.message)}")


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def generate(
    registry: Annotated[
        Path,
        typer.Argument(
            exists=True,
            readable=True,
            help="Registry JSON file, or a directory of block.json manifests.",
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the schema here instead of stdout."),
    ] = None,
    indent: Annotated[
        int,
        typer.Option("--indent", min=0, help="JSON indentation width."),
    ] = 2,
    strict: Annotated[
        bool,
        typer.Option("--strict/--no-strict", help="Fail when the audit finds violations."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="List attributes that were omitted."),
    ] = False,
) -> None:
    """
    Compile the allow-listed blocks of a registry into one JSON Schema.

    The audit against the model's schema limits always runs; with `--strict`
    a failing audit exits with code 1 and nothing is written.

    A registry with no allow-listed block yields an empty block union. That is
    a valid result, so `--strict` reports it as a warning instead of failing.
    """
    try:
        compiled = _compile(registry)
    except SchemaGenerationError as e:
        console.print(f"[bold red]❌ Generation Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    report = audit_schema(compiled.document)
    if not compiled.block_names:
        console.print(
            "[bold yellow]⚠️ No allow-listed block is registered; "
            "the schema accepts no blocks.[/bold yellow]"
        )
    elif strict and not report.ok:
        _render_audit(report)
        raise typer.Exit(code=1)

    payload = json.dumps(compiled.document, indent=indent, ensure_ascii=False)
    if output:
        output.write_text(payload + "\n", encoding="utf-8")
        _render_summary(compiled)
        console.print(Panel(f"Saved to: {output}", title="Schema", border_style="green"))
    else:
        typer.echo(payload)

    if verbose:
        _render_omissions(compiled)
    _render_audit(report)


@app.command()  # type: ignore[misc]
def audit(
    schema: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Schema JSON file."),
    ],
    max_properties: Annotated[
        int | None,
        typer.Option("--max-properties", min=1, help="Override the configured property ceiling."),
    ] = None,
) -> None:
    """Audit an existing schema document against the structured-output limits."""
    document = _read_json(schema)
    if not isinstance(document, dict):
        console.print("[bold red]❌ Schema must be a JSON object.[/bold red]")
        raise typer.Exit(code=1)

    report = audit_schema(document, max_properties)
    _render_audit(report)
    if not report.ok:
        raise typer.Exit(code=1)


@app.command()  # type: ignore[misc]
def validate(
    registry: Annotated[
        Path,
        typer.Argument(exists=True, readable=True, help="Registry file or manifest directory."),
    ],
    content: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="Content JSON to check."),
    ],
) -> None:
    """Validate generated content against the schema compiled from a registry."""
    try:
        compiled = _compile(registry)
    except SchemaGenerationError as e:
        console.print(f"[bold red]❌ Generation Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    errors = validate_content(compiled.document, _read_json(content))
    if errors:
        console.print(f"[bold red]❌ Content has {len(errors)} error(s):[/bold red]")
        for line in errors:
            console.print(f" • {line}", markup=False)
        raise typer.Exit(code=1)

    console.print("[bold green]✅ Content is valid.[/bold green]")


if __name__ == "__main__":
    app()

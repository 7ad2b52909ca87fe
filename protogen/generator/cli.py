"""Command-line interface for inspecting generated field fragments."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from protogen.generator.descriptors import (
    DescriptorError,
    FileDescriptor,
    build_descriptors,
    load_schema,
)
from protogen.generator.fields import FieldGenerator
from protogen.generator.options import GeneratorOptions
from protogen.generator.sizes import VARIABLE_SIZE


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log descriptor resolution")
def cli(verbose: bool) -> None:
    """Protogen field code generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file (JSON)")
@click.option("--options", "options_file", default=None, help="Generator options file (JSON)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def fields(input_file: str, options_file: str | None, output_json: bool) -> None:
    """Display the generated fragments for every field of a schema."""
    options = GeneratorOptions()
    if options_file is not None:
        with open(options_file, encoding="utf-8") as f:
            options = GeneratorOptions.from_json(f.read())

    try:
        file = build_descriptors(load_schema(input_file))
    except DescriptorError as exc:
        print(f"Invalid schema: {exc}")
        sys.exit(1)

    generators = [FieldGenerator(field, options=options) for field in file.all_fields()]

    if output_json:
        _output_json(generators)
    else:
        _output_plain(file, generators)


def _fragments(gen: FieldGenerator) -> dict[str, Any]:
    return {
        "property_name": gen.property_name,
        "name": gen.name,
        "number": gen.number,
        "type": gen.capitalized_type_name,
        "type_name": gen.type_name,
        "default": gen.default_value,
        "fixed_size": gen.fixed_size,
        "nullable": gen.is_nullable_type,
        "null_check": gen.null_check(),
        "cls_compliance": gen.cls_compliance_check(),
    }


def _output_json(generators: list[FieldGenerator]) -> None:
    """Output field fragments as JSON."""
    data = {gen.descriptor.full_name: _fragments(gen) for gen in generators}
    print(json.dumps(data, indent=2))


def _format_size(size: int) -> str:
    return "variable" if size == VARIABLE_SIZE else f"{size} bytes"


def _output_plain(file: FileDescriptor, generators: list[FieldGenerator]) -> None:
    """Output field fragments using rich text formatting."""
    console = Console()

    console.print(f"[bold cyan]Package[/bold cyan] {file.package or '(none)'}")
    console.print()

    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Field", style="white")
    table.add_column("#", style="green", justify="right")
    table.add_column("Type", style="dim")
    table.add_column("C# Type", style="white")
    table.add_column("Default", style="yellow")
    table.add_column("Size", style="yellow", justify="right")
    table.add_column("Nullable", style="dim")
    table.add_column("CLS", style="dim")

    for gen in generators:
        table.add_row(
            gen.descriptor.full_name,
            str(gen.number),
            gen.capitalized_type_name,
            escape(gen.type_name),
            escape(gen.default_value),
            _format_size(gen.fixed_size),
            "yes" if gen.is_nullable_type else "",
            "" if gen.descriptor.is_cls_compliant else "non-compliant",
        )

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

"""main.py - ``flags-gen`` command-line entry point.

Parses one Go file, renders ``AddFlags`` methods for every ``+flags-gen``
struct in it and writes them next to the input (``types.go`` ->
``types_flags.go``) or to ``--output``.

Usage:
    flags-gen -i types.go                       Write types_flags.go
    flags-gen -i types.go -o flags.go           Custom output path
    flags-gen -i types.go --stdout              Print instead of writing
    flags-gen -i types.go --json                Machine-readable summary
"""

from __future__ import annotations

from pathlib import Path

import typer

from flagsgen import __version__
from flagsgen.cli import (
    default_output_path,
    error_exit,
    json_print,
    read_source,
    validate_file_path,
    warn,
    write_if_changed,
)
from flagsgen.config import GenConfig, load_config
from flagsgen.errors import FlagsGenError, GenerateError, ParseError
from flagsgen.generator import render_file
from flagsgen.models import StructDescriptor
from flagsgen.parser import ANNOTATION_MARKER, parse

_EPILOG = """\
[bold]Examples:[/bold]

flags-gen -i types.go                          Write types_flags.go beside the input

flags-gen --input=./pkg/config/config.go --output=./pkg/config/flags.go

flags-gen -i types.go --stdout                 Print the generated code

[bold]What it reads:[/bold]

Struct types whose doc comment contains [cyan]+flags-gen[/cyan].  Exported fields
become flags: the name comes from the json tag (kebab-cased), the default from
a [cyan]default:"..."[/cyan] tag, the help text from the field's doc comment.

[dim]Settings are read from flags-gen.toml in the input directory or a parent.[/dim]"""

app = typer.Typer(
    help="Generate pflag AddFlags methods from Go structs marked with +flags-gen.",
    rich_markup_mode="rich",
    epilog=_EPILOG,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"flags-gen version {__version__}")
        raise typer.Exit()


def collect_warnings(structs: list[StructDescriptor], source_name: str) -> list[str]:
    """Non-fatal problems worth telling the user about, in source order."""
    warnings: list[str] = []
    for struct in structs:
        for f in struct.fields:
            where = f"{source_name}:{f.line}: {struct.name}.{f.name}"
            if not f.supported:
                warnings.append(f"{where}: type {f.type} has no flag binding; field skipped")
            elif f.default_error:
                warnings.append(
                    f"{where}: {f.default_error}; using {f.default_value_literal} instead"
                )
    return warnings


def _resolve_output(output_file: str | None, input_path: Path, cfg: GenConfig) -> Path:
    if output_file:
        return validate_file_path(output_file)
    return default_output_path(input_path, cfg.output_suffix)


@app.callback(invoke_without_command=True)
def main(
    input_file: str | None = typer.Option(
        None,
        "--input",
        "-i",
        help="Input Go file containing structs with +flags-gen annotations (required)",
    ),
    output_file: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for generated flags code (default: <input>_flags.go)",
    ),
    config: str | None = typer.Option(
        None, "--config", help="Path to flags-gen.toml (default: search upward from input)"
    ),
    to_stdout: bool = typer.Option(
        False, "--stdout", help="Print generated code to stdout instead of writing a file"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print the version number and exit",
    ),
) -> None:
    """Generate pflag registration code for one Go source file."""
    if not input_file:
        error_exit("input file is required (--input/-i)", json_mode=json_output)

    try:
        input_path = validate_file_path(input_file)
        cfg = load_config(Path(config) if config else None, start=input_path.parent)
        output_path = _resolve_output(output_file, input_path, cfg)
        if output_path == input_path:
            error_exit("output file must differ from the input file", json_mode=json_output)
        source = read_source(input_path, cfg.max_input_bytes)
        structs = parse(source)
    except ParseError as exc:
        error_exit(
            f"failed to parse input file: {exc}", json_mode=json_output, kind=type(exc).__name__
        )
    except FlagsGenError as exc:
        error_exit(str(exc), json_mode=json_output, kind=type(exc).__name__)

    if not structs:
        error_exit(
            f"no structs with {ANNOTATION_MARKER} annotation found in {input_path}",
            json_mode=json_output,
        )

    try:
        text = render_file(
            structs, method_name=cfg.method_name, flagset_import=cfg.flagset_import
        )
    except GenerateError as exc:
        error_exit(
            f"failed to generate flags: {exc}", json_mode=json_output, kind=type(exc).__name__
        )

    warnings = collect_warnings(structs, input_path.name)
    if not json_output:
        for msg in warnings:
            warn(msg)

    written = changed = False
    if not to_stdout:
        try:
            changed = write_if_changed(output_path, text)
        except OSError as exc:
            error_exit(
                f"failed to write output file: {exc}",
                json_mode=json_output,
                kind=type(exc).__name__,
            )
        written = True

    if json_output:
        result: dict[str, object] = {
            "input": str(input_path),
            "output": str(output_path) if written else None,
            "changed": changed,
            "structs": [s.to_dict() for s in structs],
            "warnings": warnings,
        }
        if to_stdout:
            result["code"] = text
        json_print(result)
        return

    if to_stdout:
        typer.echo(text, nl=False)
        return

    if not changed:
        typer.echo(f"{output_path} is up to date", err=True)
        return
    typer.echo(f"Generated flags code for {len(structs)} struct(s) in {output_path}", err=True)


def main_entry() -> None:
    """Package entry point for ``flags-gen``."""
    app()


if __name__ == "__main__":
    main_entry()

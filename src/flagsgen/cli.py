"""Shared CLI utilities for flags-gen.

Everything the core leaves to its caller lives here: path validation, the
input size cap, output naming, atomic writes that skip unchanged files, and
standardised error / warning / JSON output.
"""

from __future__ import annotations

import contextlib
import json
import os
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from flagsgen.config import DEFAULT_MAX_INPUT_BYTES, DEFAULT_OUTPUT_SUFFIX
from flagsgen.errors import InputError

# ---------------------------------------------------------------------------
# Standardised output helpers
# ---------------------------------------------------------------------------

_err_console = Console(stderr=True, soft_wrap=True)


def error_exit(
    msg: str, *, json_mode: bool = False, code: int = 1, kind: str | None = None
) -> NoReturn:
    """Print *msg* as an error and ``raise typer.Exit(code)``.

    In JSON mode stdout gets ``{"error": msg, "type": kind}``; *kind* is the
    exception class name when the failure came from one, else ``null``.
    """
    if json_mode:
        json_print({"error": msg, "type": kind})
    else:
        _err_console.print(f"[red bold]error:[/red bold] {escape(msg)}")
    raise typer.Exit(code=code)


def warn(msg: str) -> None:
    """Print a non-fatal warning to stderr."""
    _err_console.print(f"[yellow bold]warning:[/yellow bold] {escape(msg)}")


def json_print(data: dict[str, Any] | list[Any]) -> None:
    """Print *data* as pretty-printed JSON to stdout."""
    print(json.dumps(data, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Paths and files
# ---------------------------------------------------------------------------


def validate_file_path(path: str) -> Path:
    """Clean *path*, reject directory traversal, and return it absolute."""
    if not path:
        raise InputError("file path cannot be empty")
    cleaned = os.path.normpath(path)
    if ".." in Path(cleaned).parts:
        raise InputError(f"path contains directory traversal patterns: {path}")
    return Path(os.path.abspath(cleaned))


def default_output_path(input_path: Path, suffix: str = DEFAULT_OUTPUT_SUFFIX) -> Path:
    """``dir/types.go`` -> ``dir/types_flags.go``."""
    return input_path.with_name(input_path.stem + suffix)


def read_source(path: Path, max_bytes: int = DEFAULT_MAX_INPUT_BYTES) -> bytes:
    """Read a Go source file, enforcing existence, extension and size limits."""
    if not path.exists():
        raise InputError(
            f"input file {path} does not exist\n\n"
            "Tip: Make sure the file path is correct and the file has a .go extension"
        )
    if not path.is_file():
        raise InputError(f"input path {path} is not a regular file")
    if path.suffix.lower() != ".go":
        raise InputError("input file must be a Go source file (.go extension)")
    size = path.stat().st_size
    if size > max_bytes:
        raise InputError(
            f"input file {path} is too large ({size} bytes), "
            f"maximum allowed size is {max_bytes} bytes"
        )
    try:
        return path.read_bytes()
    except OSError as exc:
        raise InputError(f"cannot read input file {path}: {exc}") from exc


def atomic_write_text(filepath: Path, text: str, encoding: str = "utf-8") -> None:
    """Write *text* through a temporary sibling file so readers never see a partial file."""
    tmp_path = filepath.with_suffix(filepath.suffix + ".tmp")
    try:
        tmp_path.write_text(text, encoding=encoding)
        os.replace(tmp_path, filepath)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise


def write_if_changed(filepath: Path, text: str, encoding: str = "utf-8") -> bool:
    """Atomically write *text* unless *filepath* already holds exactly that.

    Returns ``True`` when the file was written; an identical file keeps its mtime.
    """
    with contextlib.suppress(OSError):
        if filepath.read_bytes() == text.encode(encoding):
            return False
    atomic_write_text(filepath, text, encoding)
    return True

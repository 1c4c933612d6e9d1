"""Optional project configuration for flags-gen.

Reads ``flags-gen.toml`` from the directory of the input file or any parent
directory (the same way ``git`` finds ``.git/``).  Every setting has a default,
so a project without the file gets the stock pflag output.

Example ``flags-gen.toml``::

    [generate]
    method_name = "AddFlags"
    flagset_import = "github.com/spf13/pflag"

    [output]
    suffix = "_flags.go"

    [input]
    max_bytes = 10485760

Usage::

    from flagsgen.config import load_config
    cfg = load_config(start=Path("pkg/config"))
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from flagsgen.errors import ConfigError
from flagsgen.generator import DEFAULT_FLAGSET_IMPORT, DEFAULT_METHOD_NAME

CONFIG_FILENAME = "flags-gen.toml"

DEFAULT_OUTPUT_SUFFIX = "_flags.go"
DEFAULT_MAX_INPUT_BYTES = 10 * 1024 * 1024  # 10MB


@dataclass
class GenConfig:
    """Resolved flags-gen settings."""

    # File the settings were read from (None when running on defaults)
    path: Path | None = None

    # --- [generate] ---
    method_name: str = DEFAULT_METHOD_NAME
    flagset_import: str = DEFAULT_FLAGSET_IMPORT

    # --- [output] ---
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX

    # --- [input] ---
    max_input_bytes: int = DEFAULT_MAX_INPUT_BYTES


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (or cwd) and return the first ``flags-gen.toml``."""
    candidate = (start or Path.cwd()).resolve()
    if candidate.is_file():
        candidate = candidate.parent
    while True:
        path = candidate / CONFIG_FILENAME
        if path.is_file():
            return path
        if candidate == candidate.parent:
            return None
        candidate = candidate.parent


def _get(section: dict, key: str, expected: type, default: object, path: Path) -> object:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, expected):
        raise ConfigError(
            f"{path}: '{key}' must be of type {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _section(raw: dict, name: str, path: Path) -> dict:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"{path}: [{name}] must be a table")
    return section


def load_config(path: Path | None = None, start: Path | None = None) -> GenConfig:
    """Load flags-gen settings.

    Args:
        path: Explicit config file.  Must exist if given.
        start: Directory (or file) to search upward from when *path* is None.

    Returns defaults when no config file is found.
    """
    if path is None:
        path = find_config(start)
        if path is None:
            return GenConfig()
    elif not path.is_file():
        raise ConfigError(f"Config not found: {path}")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"failed to read {path}: {exc}") from exc

    generate = _section(raw, "generate", path)
    output = _section(raw, "output", path)
    inp = _section(raw, "input", path)

    cfg = GenConfig(
        path=path,
        method_name=_get(generate, "method_name", str, DEFAULT_METHOD_NAME, path),
        flagset_import=_get(generate, "flagset_import", str, DEFAULT_FLAGSET_IMPORT, path),
        output_suffix=_get(output, "suffix", str, DEFAULT_OUTPUT_SUFFIX, path),
        max_input_bytes=_get(inp, "max_bytes", int, DEFAULT_MAX_INPUT_BYTES, path),
    )

    if not cfg.method_name.isidentifier():
        raise ConfigError(f"{path}: method_name {cfg.method_name!r} is not a valid identifier")
    if not cfg.output_suffix.endswith(".go"):
        raise ConfigError(f"{path}: output suffix {cfg.output_suffix!r} must end in .go")
    if cfg.max_input_bytes <= 0:
        raise ConfigError(f"{path}: max_bytes must be positive")
    return cfg

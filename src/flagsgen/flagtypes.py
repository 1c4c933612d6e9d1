"""flagtypes.py - Supported Go field types and their pflag bindings.

Every Go type flags-gen can register is one :class:`FlagType` row in
:data:`SUPPORTED_TYPES`.  A row bundles everything type-specific:

* the ``pflag.FlagSet`` method that binds a field (``IntVar``, ...),
* the Go zero-value literal used when no default is given,
* how the raw ``default:"..."`` string is converted,
* how the converted default is written back as a Go literal,
* auxiliary imports the literal needs (``time`` for durations).

Types missing from the table may still be parsed (they are kept in the
descriptor) but the generator emits nothing for them.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from flagsgen.naming import go_quote

# ---------------------------------------------------------------------------
# Normalized type names
# ---------------------------------------------------------------------------

TYPE_STRING = "string"
TYPE_BOOL = "bool"
TYPE_INT = "int"
TYPE_INT32 = "int32"
TYPE_INT64 = "int64"
TYPE_UINT = "uint"
TYPE_UINT32 = "uint32"
TYPE_UINT64 = "uint64"
TYPE_FLOAT32 = "float32"
TYPE_FLOAT64 = "float64"
TYPE_STRING_SLICE = "[]string"
TYPE_INT_SLICE = "[]int"
TYPE_DURATION = "time.Duration"

# ---------------------------------------------------------------------------
# Default conversion (raw tag string -> Python value)
# ---------------------------------------------------------------------------

_SIGNED_RE = re.compile(r"[+-]?\d+")
_UNSIGNED_RE = re.compile(r"\+?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# strconv.ParseBool spellings
_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}

# (min, max) per integer kind
_INT_RANGES: dict[str, tuple[int, int]] = {
    TYPE_INT: (-(2**63), 2**63 - 1),
    TYPE_INT32: (-(2**31), 2**31 - 1),
    TYPE_INT64: (-(2**63), 2**63 - 1),
    TYPE_UINT: (0, 2**64 - 1),
    TYPE_UINT32: (0, 2**32 - 1),
    TYPE_UINT64: (0, 2**64 - 1),
}


def _keep_raw(raw: str) -> object:
    return raw


def _parse_bool(raw: str) -> object:
    if raw in _TRUE_WORDS:
        return True
    if raw in _FALSE_WORDS:
        return False
    raise ValueError(f"invalid bool default {raw!r}")


def _int_parser(go_type: str) -> Callable[[str], object]:
    low, high = _INT_RANGES[go_type]
    pattern = _UNSIGNED_RE if low == 0 else _SIGNED_RE

    def parse(raw: str) -> object:
        if not pattern.fullmatch(raw):
            raise ValueError(f"invalid {go_type} default {raw!r}")
        value = int(raw, 10)
        if not low <= value <= high:
            raise ValueError(f"{go_type} default {raw!r} out of range")
        return value

    return parse


def _parse_string_slice(raw: str) -> object:
    # "" is an empty list, not [""]
    if raw == "":
        return []
    return raw.split(",")


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

_DURATION_UNITS: dict[str, int] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC greek mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

# Longest unit first so "ms" is not read as "m" + garbage.
_DURATION_PART_RE = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

# Largest exact unit wins when rendering.
_RENDER_UNITS: list[tuple[int, str]] = [
    (HOUR, "Hour"),
    (MINUTE, "Minute"),
    (SECOND, "Second"),
    (MILLISECOND, "Millisecond"),
    (MICROSECOND, "Microsecond"),
    (NANOSECOND, "Nanosecond"),
]

# time.Duration is an int64 nanosecond count.
MAX_DURATION = 2**63 - 1
MIN_DURATION = -(2**63)


def _check_duration_range(nanoseconds: int, text: object) -> int:
    if not MIN_DURATION <= nanoseconds <= MAX_DURATION:
        raise ValueError(f"duration {text!r} overflows time.Duration")
    return nanoseconds


def parse_go_duration(text: str) -> int:
    """Parse a Go ``time.ParseDuration`` string into nanoseconds.

    Accepts signed sequences of decimal numbers with unit suffixes, e.g.
    ``"300ms"``, ``"-1.5h"``, ``"2h45m"``.  Raises ``ValueError`` otherwise.
    """
    s = text
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(s):
        m = _DURATION_PART_RE.match(s, pos)
        if not m:
            raise ValueError(f"invalid duration {text!r}")
        total += Decimal(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()
    return _check_duration_range(sign * int(total), text)


def format_duration_literal(nanoseconds: int) -> str:
    """Render a nanosecond count as ``N*time.<Unit>`` with the largest exact unit."""
    if nanoseconds == 0:
        return "0"
    for unit, name in _RENDER_UNITS:
        if nanoseconds % unit == 0:
            return f"{nanoseconds // unit}*time.{name}"
    raise AssertionError("unreachable: every duration is a whole number of nanoseconds")


# ---------------------------------------------------------------------------
# Literal rendering (Python value -> Go source literal)
# ---------------------------------------------------------------------------


def _render_string(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return go_quote(value)


def _render_bool(value: object) -> str:
    if not isinstance(value, bool):
        raise TypeError(f"expected bool, got {type(value).__name__}")
    return "true" if value else "false"


def _render_int(value: object) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    return str(value)


def _render_float(value: object) -> str:
    if isinstance(value, bool):
        raise TypeError("expected a number, got bool")
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str) and _FLOAT_RE.fullmatch(value):
        return value
    raise ValueError(f"invalid float default {value!r}")


def _render_string_slice(value: object) -> str:
    if not isinstance(value, list):
        raise TypeError(f"expected list, got {type(value).__name__}")
    return "[]string{" + ", ".join(go_quote(str(item)) for item in value) + "}"


def _render_int_slice(value: object) -> str:
    if isinstance(value, str):
        items: list[object] = [p.strip() for p in value.split(",")] if value.strip() else []
    elif isinstance(value, list):
        items = list(value)
    else:
        raise TypeError(f"expected list or str, got {type(value).__name__}")
    rendered: list[str] = []
    for item in items:
        text = str(item)
        if isinstance(item, bool) or not _SIGNED_RE.fullmatch(text):
            raise ValueError(f"invalid []int element {item!r}")
        rendered.append(str(int(text)))
    return "[]int{" + ", ".join(rendered) + "}"


def _render_duration(value: object) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TypeError(f"expected str or int, got {type(value).__name__}")
    if isinstance(value, int):
        return format_duration_literal(_check_duration_range(value, value))
    try:
        return format_duration_literal(parse_go_duration(value))
    except ValueError:
        # Bare number without a unit: historically read as seconds.
        if _SIGNED_RE.fullmatch(value):
            _check_duration_range(int(value) * SECOND, value)
            return f"{int(value)}*time.Second"
        raise


# ---------------------------------------------------------------------------
# Type table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FlagType:
    """Capabilities of one supported Go field type."""

    go_type: str
    method: str
    zero_literal: str
    parse_default: Callable[[str], object]
    render_default: Callable[[object], str]
    imports: tuple[str, ...] = ()


def _int_type(go_type: str, method: str) -> FlagType:
    return FlagType(go_type, method, "0", _int_parser(go_type), _render_int)


SUPPORTED_TYPES: dict[str, FlagType] = {
    ft.go_type: ft
    for ft in (
        FlagType(TYPE_STRING, "StringVar", '""', _keep_raw, _render_string),
        FlagType(TYPE_BOOL, "BoolVar", "false", _parse_bool, _render_bool),
        _int_type(TYPE_INT, "IntVar"),
        _int_type(TYPE_INT32, "Int32Var"),
        _int_type(TYPE_INT64, "Int64Var"),
        _int_type(TYPE_UINT, "UintVar"),
        _int_type(TYPE_UINT32, "Uint32Var"),
        _int_type(TYPE_UINT64, "Uint64Var"),
        FlagType(TYPE_FLOAT32, "Float32Var", "0", _keep_raw, _render_float),
        FlagType(TYPE_FLOAT64, "Float64Var", "0", _keep_raw, _render_float),
        FlagType(
            TYPE_STRING_SLICE, "StringSliceVar", "[]string{}", _parse_string_slice, _render_string_slice
        ),
        FlagType(TYPE_INT_SLICE, "IntSliceVar", "[]int{}", _keep_raw, _render_int_slice),
        FlagType(
            TYPE_DURATION, "DurationVar", "0", _keep_raw, _render_duration, imports=("time",)
        ),
    )
}


def lookup(go_type: str) -> FlagType | None:
    """Return the :class:`FlagType` for *go_type*, or ``None`` if unsupported."""
    return SUPPORTED_TYPES.get(go_type)


def get_flag_method(go_type: str) -> str | None:
    """Return the pflag registration method for *go_type*, or ``None``."""
    ft = lookup(go_type)
    return ft.method if ft else None


def type_imports(go_type: str) -> tuple[str, ...]:
    """Auxiliary Go imports a field of *go_type* brings in."""
    ft = lookup(go_type)
    return ft.imports if ft else ()


def convert_default(raw: str, go_type: str) -> object:
    """Strictly convert a raw default string; raises ``ValueError`` on bad input.

    Unsupported types pass the raw string through unchanged.
    """
    ft = lookup(go_type)
    if ft is None:
        return raw
    return ft.parse_default(raw)


def render_default_literal(value: object | None, go_type: str) -> str:
    """Strictly render *value* as a Go literal for *go_type*.

    ``None`` renders the zero value.  Raises ``TypeError`` / ``ValueError``
    when *value* does not fit the type, and ``KeyError`` for unsupported types.
    """
    ft = SUPPORTED_TYPES[go_type]
    if value is None:
        return ft.zero_literal
    return ft.render_default(value)


"""naming.py - Flag-name and identifier conventions.

Converts Go identifiers and ``json`` tag names to kebab-case flag names,
picks method receiver names, and quotes text as Go string literals.
"""

import json
import re

# HTTPPort -> HTTP-Port: keep acronyms together, split before the next word.
_ACRONYM_BOUNDARY_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
# camelCase -> camel-Case
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")


def to_kebab_case(name: str) -> str:
    """Convert a CamelCase / camelCase identifier to kebab-case.

    >>> to_kebab_case("HTTPPort")
    'http-port'
    >>> to_kebab_case("EnableLeaderElection")
    'enable-leader-election'
    """
    result = _ACRONYM_BOUNDARY_RE.sub(r"\1-\2", name)
    result = _CAMEL_BOUNDARY_RE.sub(r"\1-\2", result)
    return result.lower()


def derive_flag_name(field_name: str, json_name: str = "") -> str:
    """Return the flag name for a field, preferring its ``json`` tag name."""
    if json_name:
        return to_kebab_case(json_name)
    return to_kebab_case(field_name)


def receiver_name(struct_name: str) -> str:
    """Go-style method receiver: the lower-cased first letter of the type."""
    if not struct_name:
        return "c"
    return struct_name[0].lower()


def go_quote(text: str) -> str:
    """Quote *text* as a double-quoted Go string literal.

    JSON string escapes (``\\"``, ``\\\\``, ``\\n``, ``\\t``, ``\\uXXXX``) are
    all valid Go escapes, so the JSON encoder does the work.
    """
    return json.dumps(text, ensure_ascii=False)

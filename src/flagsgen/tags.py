"""tags.py - Go struct tag extraction.

Only two keys matter to flags-gen:

* ``json:"name,omitempty"``: the first comma segment is the field's external
  name, used to derive the flag name.
* ``default:"value"``: the verbatim default value string.

Both extractions are independent and lenient: a missing or malformed entry
yields ``""`` / ``None`` rather than an error.
"""

import re

# Named groups:
#   value: everything between the quotes (no escaped quotes, like reflect)
JSON_TAG_RE = re.compile(r'(?:^|\s)json:"(?P<value>[^"]*)"')
DEFAULT_TAG_RE = re.compile(r'(?:^|\s)default:"(?P<value>[^"]*)"')


def unquote_tag(literal: str) -> str:
    """Strip the delimiters from a Go tag string literal.

    Raw literals (backquoted) are returned verbatim; interpreted literals
    (double-quoted) also get ``\\"`` and ``\\\\`` unescaped, which is all a
    struct tag realistically contains.
    """
    if len(literal) >= 2 and literal[0] == literal[-1] == "`":
        return literal[1:-1]
    if len(literal) >= 2 and literal[0] == literal[-1] == '"':
        return literal[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return literal


def extract_json_name(tag: str) -> str:
    """Return the ``json`` tag name, or ``""`` when absent, empty or ``-``."""
    m = JSON_TAG_RE.search(tag)
    if not m:
        return ""
    name = m.group("value").split(",")[0]
    # json:"-" means "not serialized"; it is not a usable flag name.
    if name == "-":
        return ""
    return name


def extract_default(tag: str) -> str | None:
    """Return the raw ``default`` tag value, or ``None`` when absent."""
    m = DEFAULT_TAG_RE.search(tag)
    if not m:
        return None
    return m.group("value")

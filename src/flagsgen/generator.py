"""generator.py - Render pflag registration methods from struct descriptors.

:func:`generate` turns one :class:`~flagsgen.models.StructDescriptor` into an
``AddFlags`` method; :func:`render_file` wraps the methods of a whole input
file with the generated-code header, package clause and import block::

    // Code generated by flags-gen. DO NOT EDIT.

    package config

    import (
    	"time"

    	"github.com/spf13/pflag"
    )

    // AddFlags registers the fields of ServerConfig as flags on fs.
    func (s *ServerConfig) AddFlags(fs *pflag.FlagSet) {
    	fs.StringVar(&s.Host, "host", "localhost", "Host is the server hostname")
    	fs.DurationVar(&s.Timeout, "timeout", 30*time.Second, "Request timeout")
    }

The generator works only on descriptors.  Default literals were precomputed by
the parser; fields without a registration method are left out silently.
"""

from __future__ import annotations

import re

import jinja2

from flagsgen.errors import GenerateError
from flagsgen.flagtypes import type_imports
from flagsgen.models import StructDescriptor
from flagsgen.naming import go_quote, receiver_name

DEFAULT_METHOD_NAME = "AddFlags"
DEFAULT_FLAGSET_IMPORT = "github.com/spf13/pflag"

GENERATED_HEADER = "// Code generated by flags-gen. DO NOT EDIT."

_MAJOR_VERSION_RE = re.compile(r"v(?:[2-9]|[1-9][0-9]+)")

_ENV = jinja2.Environment(
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=jinja2.StrictUndefined,
    autoescape=False,
)
_ENV.filters["go_quote"] = go_quote

_METHOD_TEMPLATE = _ENV.from_string(
    """\
// {{ method }} registers the fields of {{ name }} as flags on fs.
func ({{ recv }} *{{ name }}) {{ method }}(fs *{{ flagset_package }}.FlagSet) {
{% for field in fields %}
\tfs.{{ field.registration_method }}(&{{ recv }}.{{ field.name }}, {{ field.flag_name|go_quote }}, \
{{ field.default_value_literal }}, {{ field.description|go_quote }})
{% endfor %}
}
"""
)

_FILE_TEMPLATE = _ENV.from_string(
    """\
{{ header }}

package {{ package }}

import (
{% for imp in imports %}
\t"{{ imp }}"
{% endfor %}
{% if imports %}

{% endif %}
\t"{{ flagset_import }}"
)

{{ body }}
"""
)


def flagset_package(flagset_import: str) -> str:
    """Go package name of an import path.

    The last path element, except that a major-version suffix (``/v2``) is
    skipped: ``github.com/spf13/pflag/v2`` is package ``pflag``.
    """
    parts = flagset_import.rstrip("/").split("/")
    if len(parts) > 1 and _MAJOR_VERSION_RE.fullmatch(parts[-1]):
        return parts[-2]
    return parts[-1]


def generate(
    struct: StructDescriptor,
    *,
    method_name: str = DEFAULT_METHOD_NAME,
    flagset_package: str = "pflag",
) -> str:
    """Render the flag-registration method for one struct.

    One registration statement is emitted per supported field, in declaration
    order.  The result has no trailing newline.
    """
    try:
        return _METHOD_TEMPLATE.render(
            method=method_name,
            name=struct.name,
            recv=receiver_name(struct.name),
            flagset_package=flagset_package,
            fields=struct.registered_fields,
        )
    except jinja2.TemplateError as exc:
        raise GenerateError(f"failed to render {struct.name}: {exc}") from exc


def imports_in_use(structs: list[StructDescriptor]) -> list[str]:
    """Auxiliary imports referenced by emitted default literals, sorted.

    A struct may list ``time`` because it has a duration field, but when that
    field's default is the zero literal ``0`` the package is not referenced and
    Go would reject the unused import.
    """
    used: set[str] = set()
    for struct in structs:
        for f in struct.registered_fields:
            for imp in type_imports(f.type):
                if imp in struct.imports and f"{imp}." in f.default_value_literal:
                    used.add(imp)
    return sorted(used)


def render_file(
    structs: list[StructDescriptor],
    *,
    method_name: str = DEFAULT_METHOD_NAME,
    flagset_import: str = DEFAULT_FLAGSET_IMPORT,
) -> str:
    """Render a complete Go source file for *structs* (in the given order).

    The package clause comes from the first struct's namespace; methods are
    separated by one blank line.
    """
    if not structs:
        raise GenerateError("no structs to generate")
    package = flagset_package(flagset_import)
    methods = [
        generate(s, method_name=method_name, flagset_package=package) for s in structs
    ]
    try:
        text = _FILE_TEMPLATE.render(
            header=GENERATED_HEADER,
            package=structs[0].namespace,
            imports=imports_in_use(structs),
            flagset_import=flagset_import,
            body="\n\n".join(methods),
        )
    except jinja2.TemplateError as exc:
        raise GenerateError(f"failed to render output file: {exc}") from exc
    return text + "\n"

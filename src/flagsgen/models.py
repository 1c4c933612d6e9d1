"""models.py - Descriptor value objects shared by the parser and generator.

A :class:`StructDescriptor` is built once per annotated struct by
:func:`flagsgen.parser.parse` and consumed by :mod:`flagsgen.generator`.
The generator never looks at source text, only at these objects, so tests can
hand-build them.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FieldDescriptor:
    """One exported struct field selected for flag generation."""

    name: str
    type: str
    json_name: str = ""
    flag_name: str = ""
    description: str = ""
    default_value: object | None = None
    default_value_literal: str = ""
    registration_method: str | None = None
    # Set when a default was present but could not be converted to the
    # field's type; the raw string is kept in default_value.
    default_error: str | None = None
    line: int = 0

    @property
    def supported(self) -> bool:
        return self.registration_method is not None

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dict (for ``--json`` output)."""
        return {
            "name": self.name,
            "type": self.type,
            "json_name": self.json_name,
            "flag_name": self.flag_name,
            "description": self.description,
            "default_value": self.default_value,
            "default_value_literal": self.default_value_literal,
            "registration_method": self.registration_method,
            "default_error": self.default_error,
            "line": self.line,
        }


@dataclass
class StructDescriptor:
    """One ``+flags-gen`` annotated struct type, fields in declaration order."""

    name: str
    namespace: str
    fields: list[FieldDescriptor] = field(default_factory=list)
    # Auxiliary Go imports implied by field types (e.g. "time").
    imports: list[str] = field(default_factory=list)
    line: int = 0

    @property
    def registered_fields(self) -> list[FieldDescriptor]:
        """Fields the generator will emit a registration statement for."""
        return [f for f in self.fields if f.supported]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "imports": list(self.imports),
            "line": self.line,
            "fields": [f.to_dict() for f in self.fields],
        }

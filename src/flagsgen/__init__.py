"""flags-gen - pflag registration code generator for annotated Go structs.

Scans a Go source file for struct types whose doc comment carries the
``+flags-gen`` marker, extracts field metadata (type, ``json`` name,
``default`` tag, doc comment) and renders ``AddFlags`` methods that bind every
supported field to a ``pflag.FlagSet``.
"""

from flagsgen.errors import ConfigError, FlagsGenError, GenerateError, InputError, ParseError
from flagsgen.generator import generate, render_file
from flagsgen.models import FieldDescriptor, StructDescriptor
from flagsgen.parser import parse

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "FieldDescriptor",
    "FlagsGenError",
    "GenerateError",
    "InputError",
    "ParseError",
    "StructDescriptor",
    "generate",
    "parse",
    "render_file",
]

"""errors.py - Exception types raised by the flags-gen core.

The parser and generator never print or exit; they raise one of these and the
CLI layer (``flagsgen.main``) turns it into a stderr message and exit code 1.
"""


class FlagsGenError(Exception):
    """Base class for every error flags-gen reports to the user."""


class ParseError(FlagsGenError):
    """The input is not valid Go, or a selected field has an unsupported type."""


class GenerateError(FlagsGenError):
    """Rendering a struct descriptor into Go source failed."""


class ConfigError(FlagsGenError):
    """``flags-gen.toml`` exists but cannot be read or has invalid values."""


class InputError(FlagsGenError):
    """The input or output path given on the command line is unusable."""

"""Round-trip parser and editor for HAProxy configuration files."""
from .config import ParserOptions
from .errors import (
    ConfigError,
    Diagnostic,
    InvalidDataError,
    NotEnoughParamsError,
    ParseError,
    SectionAlreadyExistsError,
    SectionMissingError,
    StrictModeError,
)
from .parser import ConfigParser
from .state import SectionKind

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ConfigParser",
    "Diagnostic",
    "InvalidDataError",
    "NotEnoughParamsError",
    "ParseError",
    "ParserOptions",
    "SectionAlreadyExistsError",
    "SectionKind",
    "SectionMissingError",
    "StrictModeError",
    "__version__",
]

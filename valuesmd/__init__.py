"""VALUES.md: ethical dilemma responses in, a markdown values profile out."""

from .errors import (
    ValuesError,
    DataIntegrityError,
    ConfigurationError,
    EmptyInputError,
    SessionClosedError,
)

__all__ = [
    "ValuesError",
    "DataIntegrityError",
    "ConfigurationError",
    "EmptyInputError",
    "SessionClosedError",
]

__version__ = "0.1.0"

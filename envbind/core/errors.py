"""Exceptions raised while binding configuration onto a record.

- BindError: base for everything below
- SchemaError: the target is not a dataclass instance
- CoercionError: a raw string cannot be converted to the declared type
- RequiredValueMissing: a required field is still empty after all sources
- FileLoadError: a configuration file cannot be read or decoded
- FlagError: the command line cannot be parsed
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "BindError",
    "CoercionError",
    "FileLoadError",
    "FlagError",
    "RequiredValueMissing",
    "SchemaError",
]


class BindError(Exception):
    """Base exception for all binding errors."""

    pass


class SchemaError(BindError):
    """Raised when a value handed to the introspector is not a record."""

    pass


class CoercionError(BindError):
    """Raised when a raw string cannot be converted to its target type.

    Attributes:
        raw: The offending raw (sub)string.
        target: Name of the type the string was converted to.
        reason: Optional detail from the underlying parser.
    """

    def __init__(self, raw: str, target: str, reason: Optional[str] = None):
        message = f"cannot parse {raw!r} as {target}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.raw = raw
        self.target = target
        self.reason = reason


class RequiredValueMissing(BindError):
    """Raised when a required field holds its zero value after binding."""

    def __init__(self, field: str):
        super().__init__(f"field {field!r} is required but the value is not provided")
        self.field = field


class FileLoadError(BindError):
    """Raised when a configuration file cannot be loaded."""

    pass


class FlagError(BindError):
    """Raised when command-line flags cannot be parsed."""

    pass

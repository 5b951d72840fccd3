"""Field annotations understood by the binder."""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

# Default list and map separator
DEFAULT_SEPARATOR = ","

# Metadata keys
TAG_ENV = "env"
TAG_ENV_LAYOUT = "env-layout"
TAG_ENV_DEFAULT = "env-default"
TAG_ENV_SEPARATOR = "env-separator"
TAG_ENV_DESCRIPTION = "env-description"
TAG_ENV_REQUIRED = "env-required"
TAG_ENV_PREFIX = "env-prefix"
TAG_FILE_KEY = "file-key"


@runtime_checkable
class Setter(Protocol):
    """Protocol for types that parse themselves from a raw string.

    A type implementing ``set_value`` takes over its own conversion; the
    built-in rules are skipped for it. Failure is reported by raising.

    Example::

        class Secret:
            def __init__(self):
                self.value = ""

            def set_value(self, raw: str) -> None:
                if not raw:
                    raise ValueError("secret can't be empty")
                self.value = raw
    """

    def set_value(self, raw: str) -> None:
        ...


def setting(
    env: Union[str, Sequence[str], None] = None,
    *,
    default: Optional[str] = None,
    required: bool = False,
    separator: Optional[str] = None,
    layout: Optional[str] = None,
    description: str = "",
    file_key: Optional[str] = None,
    value: Any = None,
    factory: Optional[Callable[[], Any]] = None,
) -> Any:
    """Declare a bindable dataclass field.

    Args:
        env: Candidate key or keys, first match wins. A string may hold
            several comma-separated names.
        default: Default literal, coerced like any other raw value when the
            field is still empty after all sources.
        required: Fail binding if the field stays empty and has no default.
        separator: List and map separator (defaults to ``","``).
        layout: ``strptime`` layout for ``datetime`` fields.
        description: Human-readable description used in help output.
        file_key: Key of this field in configuration files.
        value: Initial attribute value (``None`` unless given).
        factory: Zero-argument callable producing the initial value.

    Returns:
        A ``dataclasses.field`` carrying the binding metadata.
    """
    metadata: Dict[str, Any] = {}
    if env is not None:
        metadata[TAG_ENV] = env if isinstance(env, str) else DEFAULT_SEPARATOR.join(env)
    if default is not None:
        metadata[TAG_ENV_DEFAULT] = default
    if required:
        metadata[TAG_ENV_REQUIRED] = True
    if separator is not None:
        metadata[TAG_ENV_SEPARATOR] = separator
    if layout is not None:
        metadata[TAG_ENV_LAYOUT] = layout
    if description:
        metadata[TAG_ENV_DESCRIPTION] = description
    if file_key is not None:
        metadata[TAG_FILE_KEY] = file_key
    if factory is not None:
        return dataclasses.field(default_factory=factory, metadata=metadata)
    return dataclasses.field(default=value, metadata=metadata)


def group(
    factory: Callable[[], Any],
    *,
    prefix: str = "",
    file_key: Optional[str] = None,
) -> Any:
    """Declare a nested dataclass whose keys share ``prefix``."""
    metadata: Dict[str, Any] = {TAG_ENV_PREFIX: prefix}
    if file_key is not None:
        metadata[TAG_FILE_KEY] = file_key
    return dataclasses.field(default_factory=factory, metadata=metadata)


def is_required(metadata: Mapping[str, Any]) -> bool:
    """Presence of the required key marks a field, unless set to a false value."""
    if TAG_ENV_REQUIRED not in metadata:
        return False
    flag = metadata[TAG_ENV_REQUIRED]
    if isinstance(flag, str):
        return flag.strip().lower() not in {"false", "0", "no"}
    return flag is None or bool(flag)

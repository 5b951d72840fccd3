"""envbind - Bind environment variables, flags and config files onto dataclasses.

Fields declare where their values come from with ``setting()`` metadata;
raw strings are converted to the declared field types, required fields
are enforced and defaults applied once every source has been read.
"""

from .core.binder import bind_config, bind_env, describe_bindings, usage
from .core.errors import (
    BindError,
    CoercionError,
    FileLoadError,
    FlagError,
    RequiredValueMissing,
    SchemaError,
)
from .core.fields import Setter, group, setting
from .core.types import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    UInt,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__all__ = [
    "bind_config",
    "bind_env",
    "describe_bindings",
    "usage",
    "BindError",
    "CoercionError",
    "FileLoadError",
    "FlagError",
    "RequiredValueMissing",
    "SchemaError",
    "Setter",
    "group",
    "setting",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
]

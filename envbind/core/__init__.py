from .binder import bind_config, bind_env, describe_bindings, usage
from .errors import (
    BindError,
    CoercionError,
    FileLoadError,
    FlagError,
    RequiredValueMissing,
    SchemaError,
)
from .fields import Setter, group, setting
from .metadata import FieldDescriptor, read_struct_metadata

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
    "FieldDescriptor",
    "read_struct_metadata",
]

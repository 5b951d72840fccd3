"""Type definitions and shape classification for bindable fields."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union, get_args, get_origin, get_type_hints

from .errors import SchemaError

__all__ = [
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Kind",
    "TypeShape",
    "UInt",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "classify",
    "is_record_type",
    "is_zero",
    "resolve_hints",
    "type_name",
]


class _SizedInt(int):
    bits = 64
    signed = True


class Int8(_SizedInt):
    bits = 8


class Int16(_SizedInt):
    bits = 16


class Int32(_SizedInt):
    bits = 32


class Int64(_SizedInt):
    bits = 64


class UInt(_SizedInt):
    bits = 64
    signed = False


class UInt8(UInt):
    bits = 8


class UInt16(UInt):
    bits = 16


class UInt32(UInt):
    bits = 32


class UInt64(UInt):
    bits = 64


class Float32(float):
    bits = 32


class Float64(float):
    bits = 64


class Kind(str, enum.Enum):
    """Closed set of shapes the coercer knows how to handle."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DURATION = "duration"
    TIMESTAMP = "timestamp"
    BYTES = "bytes"
    SEQUENCE = "list"
    MAPPING = "map"
    SETTER = "custom"
    RECORD = "struct"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class TypeShape:
    """A declared type resolved to a coercion strategy.

    Attributes:
        kind: Which coercion rule applies.
        type: Concrete Python type used to build values.
        bits: Bit width for numeric kinds.
        elem: Element shape for sequences and value shape for mappings.
        key: Key shape for mappings.
    """

    kind: Kind
    type: Any
    bits: int = 0
    elem: Optional["TypeShape"] = None
    key: Optional["TypeShape"] = None

    @property
    def name(self) -> str:
        return type_name(self.type)


def type_name(tp: Any) -> str:
    if isinstance(tp, type):
        return tp.__name__
    return str(tp).replace("typing.", "")


def _unwrap_optional(tp: Any) -> Any:
    if get_origin(tp) is Union:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _is_setter_type(tp: Any) -> bool:
    return isinstance(tp, type) and callable(getattr(tp, "set_value", None))


def is_record_type(tp: Any) -> bool:
    """Nested groups are dataclasses; ``datetime`` is always a leaf."""
    tp = _unwrap_optional(tp)
    return isinstance(tp, type) and dataclasses.is_dataclass(tp) and not issubclass(tp, datetime)


def classify(tp: Any) -> TypeShape:
    """Resolve a declared type into its :class:`TypeShape`.

    The setter capability is checked before any built-in rule, and
    ``bool`` before ``int`` since the former subclasses the latter.
    """
    tp = _unwrap_optional(tp)

    if _is_setter_type(tp):
        return TypeShape(Kind.SETTER, tp)

    origin = get_origin(tp)
    if origin is list or tp is list:
        args = get_args(tp)
        elem = classify(args[0]) if args else TypeShape(Kind.STRING, str)
        if elem.kind is Kind.UINT and elem.bits == 8:
            return TypeShape(Kind.BYTES, list)
        return TypeShape(Kind.SEQUENCE, list, elem=elem)
    if origin is dict or tp is dict:
        args = get_args(tp)
        key = classify(args[0]) if args else TypeShape(Kind.STRING, str)
        value = classify(args[1]) if len(args) > 1 else TypeShape(Kind.STRING, str)
        return TypeShape(Kind.MAPPING, dict, key=key, elem=value)

    if not isinstance(tp, type):
        return TypeShape(Kind.UNSUPPORTED, tp)

    if issubclass(tp, bool):
        return TypeShape(Kind.BOOL, bool)
    if issubclass(tp, int):
        bits = getattr(tp, "bits", 64)
        return TypeShape(Kind.INT if _signed(tp) else Kind.UINT, tp, bits=bits)
    if issubclass(tp, float):
        return TypeShape(Kind.FLOAT, tp, bits=getattr(tp, "bits", 64))
    if issubclass(tp, str):
        return TypeShape(Kind.STRING, tp)
    if issubclass(tp, (bytes, bytearray)):
        return TypeShape(Kind.BYTES, tp)
    if issubclass(tp, timedelta):
        return TypeShape(Kind.DURATION, tp)
    if issubclass(tp, datetime):
        return TypeShape(Kind.TIMESTAMP, tp)
    if dataclasses.is_dataclass(tp):
        return TypeShape(Kind.RECORD, tp)
    return TypeShape(Kind.UNSUPPORTED, tp)


def _signed(tp: Any) -> bool:
    return getattr(tp, "signed", True)


def is_zero(value: Any) -> bool:
    """Report whether ``value`` is its type's zero value.

    ``None``, ``False``, numeric zero, empty strings and containers and
    ``timedelta(0)`` are zero. Records and plain objects are zero when all
    of their attributes are; other objects fall back to their truthiness.
    """
    if value is None:
        return True
    if isinstance(value, (bool, int, float, complex, str, bytes, bytearray, list, dict, tuple, set, timedelta)):
        return not value
    if isinstance(value, datetime):
        return False
    if dataclasses.is_dataclass(value):
        return all(is_zero(getattr(value, f.name)) for f in dataclasses.fields(value))
    cls = type(value)
    if hasattr(cls, "__bool__") or hasattr(cls, "__len__"):
        return not value
    if hasattr(value, "__dict__"):
        return all(is_zero(v) for v in vars(value).values())
    return False


def resolve_hints(record: Any) -> Dict[str, Any]:
    """Resolve the field annotations of a dataclass instance.

    String annotations naming classes local to a function cannot be found
    in the module namespace. They are looked up among the classes of the
    record's current nested values and group factories instead.

    Raises:
        SchemaError: If an annotation still cannot be resolved.
    """
    cls = type(record)
    try:
        return get_type_hints(cls)
    except NameError:
        pass

    local: Dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        value = getattr(record, f.name, None)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            local[type(value).__name__] = type(value)
        factory = f.default_factory
        if isinstance(factory, type) and dataclasses.is_dataclass(factory):
            local.setdefault(factory.__name__, factory)
    try:
        return get_type_hints(cls, localns=local)
    except NameError as e:
        raise SchemaError(f"cannot resolve the annotations of {cls.__name__}: {e}") from e

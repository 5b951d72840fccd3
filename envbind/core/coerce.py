"""Conversion of raw strings into typed field values."""

from __future__ import annotations

import math
import re
import struct
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional

from .errors import CoercionError
from .fields import DEFAULT_SEPARATOR
from .types import Kind, TypeShape

# RFC 3339, the layout used for datetime fields without an explicit one
DEFAULT_TIME_LAYOUT = "rfc3339"

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

_RFC3339 = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})[Tt]([0-9]{2}):([0-9]{2}):([0-9]{2})(?:\.([0-9]+))?([Zz]|[+-][0-9]{2}:[0-9]{2})"
)

_DURATION_PART = re.compile(r"([0-9]*\.?[0-9]*)(ns|us|µs|μs|ms|s|m|h)")

# Nanoseconds per unit
_DURATION_UNITS: Dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}


def parse_value(
    shape: TypeShape,
    raw: str,
    separator: str = DEFAULT_SEPARATOR,
    layout: Optional[str] = None,
    current: Any = None,
) -> Any:
    """Convert ``raw`` into a value of the type described by ``shape``.

    Sequences and mappings split ``raw`` on ``separator`` and convert each
    piece with this same function, so nested containers and custom setter
    types work at any depth.

    Args:
        shape: Resolved target type.
        raw: Raw string value.
        separator: List and map separator.
        layout: ``strptime`` layout for timestamps, RFC 3339 when None.
        current: The value the target holds now; setter instances are
            updated in place.

    Returns:
        The converted value.

    Raises:
        CoercionError: If ``raw`` does not fit the target type.
    """
    if current is not None and callable(getattr(current, "set_value", None)):
        return _call_setter(current, raw, shape.name)
    if shape.kind is Kind.SETTER:
        try:
            instance = shape.type()
        except TypeError as e:
            raise CoercionError(raw, shape.name, f"cannot instantiate: {e}") from e
        return _call_setter(instance, raw, shape.name)

    if shape.kind is Kind.SEQUENCE:
        return _parse_sequence(shape, raw, separator, layout)
    if shape.kind is Kind.MAPPING:
        return _parse_mapping(shape, raw, separator, layout)

    parser = _SCALAR_PARSERS.get(shape.kind)
    if parser is None:
        raise CoercionError(raw, shape.name, "unsupported type")
    try:
        return parser(shape, raw, layout)
    except (ValueError, OverflowError) as e:
        raise CoercionError(raw, shape.name, str(e)) from e


def _call_setter(instance: Any, raw: str, target: str) -> Any:
    try:
        instance.set_value(raw)
    except CoercionError:
        raise
    except (ValueError, TypeError) as e:
        raise CoercionError(raw, target, str(e)) from e
    return instance


def _parse_string(shape: TypeShape, raw: str, layout: Optional[str]) -> Any:
    return raw if shape.type is str else shape.type(raw)


def _parse_bool(shape: TypeShape, raw: str, layout: Optional[str]) -> bool:
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError("invalid syntax")


def _parse_int(shape: TypeShape, raw: str, layout: Optional[str]) -> int:
    signed = shape.kind is Kind.INT
    body = raw
    negative = False
    if body[:1] in ("+", "-"):
        if not signed:
            raise ValueError("invalid syntax")
        negative = body[0] == "-"
        body = body[1:]
    if not body or not body.isascii() or not body[0].isdigit() or body != body.strip():
        raise ValueError("invalid syntax")

    prefix = body[:2].lower()
    if prefix in ("0x", "0o", "0b"):
        number = int(body, 0)
    elif len(body) > 1 and body[0] == "0":
        number = int(body, 8)
    else:
        number = int(body, 10)
    if negative:
        number = -number

    bits = shape.bits
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= number <= high:
        raise ValueError("value out of range")
    return number if shape.type is int else shape.type(number)


def _parse_float(shape: TypeShape, raw: str, layout: Optional[str]) -> float:
    if not raw or not raw.isascii() or raw != raw.strip():
        raise ValueError("invalid syntax")
    if raw.lstrip("+-")[:2].lower() == "0x":
        number = float.fromhex(raw)
    else:
        number = float(raw)
    if shape.bits == 32:
        try:
            single = struct.unpack("f", struct.pack("f", number))[0]
        except OverflowError as e:
            raise ValueError("value out of range") from e
        # pack rounds out-of-range values to infinity on some builds
        if math.isinf(single) and not math.isinf(number):
            raise ValueError("value out of range")
        number = single
    return number if shape.type is float else shape.type(number)


def _parse_duration(shape: TypeShape, raw: str, layout: Optional[str]) -> timedelta:
    return parse_duration(raw)


def _parse_bytes(shape: TypeShape, raw: str, layout: Optional[str]) -> Any:
    return shape.type(raw.encode("utf-8"))


def _parse_timestamp(shape: TypeShape, raw: str, layout: Optional[str]) -> datetime:
    return parse_timestamp(raw, layout)


def parse_duration(raw: str) -> timedelta:
    """Parse a duration such as ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and
    ``h``. Values are kept at microsecond resolution.
    """
    s = raw
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if s == "0":
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration {raw!r}")

    total = Decimal(0)
    pos = 0
    while pos < len(s):
        match = _DURATION_PART.match(s, pos)
        if match is None:
            raise ValueError(f"invalid duration {raw!r}")
        number, unit = match.groups()
        if number in ("", "."):
            raise ValueError(f"invalid duration {raw!r}")
        try:
            total += Decimal(number) * _DURATION_UNITS[unit]
        except InvalidOperation as e:
            raise ValueError(f"invalid duration {raw!r}") from e
        pos = match.end()

    return timedelta(microseconds=sign * int(total / 1000))


def parse_timestamp(raw: str, layout: Optional[str] = None) -> datetime:
    """Parse ``raw`` with a ``strptime`` layout, or as RFC 3339.

    Values without zone information are taken to be UTC.
    """
    if layout is None or layout == DEFAULT_TIME_LAYOUT:
        return _parse_rfc3339(raw)
    value = datetime.strptime(raw, layout)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _parse_rfc3339(raw: str) -> datetime:
    match = _RFC3339.fullmatch(raw)
    if match is None:
        raise ValueError(f"{raw!r} is not an RFC 3339 timestamp")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(-offset if zone[0] == "-" else offset)
    micros = int((fraction or "0")[:6].ljust(6, "0"))
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
    )


def _split(raw: str, separator: str) -> list:
    if separator == "":
        return list(raw)
    return raw.split(separator)


def _parse_sequence(shape: TypeShape, raw: str, separator: str, layout: Optional[str]) -> list:
    result: list = []
    if not raw.strip():
        return result
    assert shape.elem is not None
    for item in _split(raw, separator):
        result.append(parse_value(shape.elem, item, separator, layout))
    return result


def _parse_mapping(shape: TypeShape, raw: str, separator: str, layout: Optional[str]) -> dict:
    result: dict = {}
    if not raw.strip():
        return result
    assert shape.key is not None and shape.elem is not None
    for pair in _split(raw, separator):
        key, sep, value = pair.partition(":")
        if not sep:
            raise CoercionError(pair, shape.name, "invalid map item")
        result[parse_value(shape.key, key, separator, layout)] = parse_value(
            shape.elem, value, separator, layout
        )
    return result


_SCALAR_PARSERS: Dict[Kind, Callable[[TypeShape, str, Optional[str]], Any]] = {
    Kind.STRING: _parse_string,
    Kind.BOOL: _parse_bool,
    Kind.INT: _parse_int,
    Kind.UINT: _parse_int,
    Kind.FLOAT: _parse_float,
    Kind.DURATION: _parse_duration,
    Kind.TIMESTAMP: _parse_timestamp,
    Kind.BYTES: _parse_bytes,
}

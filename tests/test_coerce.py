"""Unit tests for raw string coercion."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest

from envbind.core.coerce import parse_duration, parse_timestamp, parse_value
from envbind.core.errors import CoercionError
from envbind.core.types import Float32, Int8, UInt, UInt8, UInt16, UInt32, UInt64, classify


def parse(tp: Any, raw: str, **kwargs: Any) -> Any:
    return parse_value(classify(tp), raw, **kwargs)


class Upper:
    def __init__(self):
        self.value = ""

    def set_value(self, raw: str) -> None:
        if not raw:
            raise ValueError("value can't be empty")
        self.value = raw.upper()


class NeedsArgument:
    def __init__(self, seed: int):
        self.seed = seed

    def set_value(self, raw: str) -> None:
        pass


@dataclass
class Nested:
    value: int = 0


class TestScalars:
    """Test suite for scalar targets."""

    def test_string_verbatim(self):
        """Test strings are kept as given, whitespace included."""
        assert parse(str, "  hello, world ") == "  hello, world "

    @pytest.mark.parametrize("raw", ["1", "t", "T", "TRUE", "true", "True"])
    def test_bool_true(self, raw):
        """Test true literals."""
        assert parse(bool, raw) is True

    @pytest.mark.parametrize("raw", ["0", "f", "F", "FALSE", "false", "False"])
    def test_bool_false(self, raw):
        """Test false literals."""
        assert parse(bool, raw) is False

    def test_bool_invalid(self):
        """Test unknown literals fail."""
        with pytest.raises(CoercionError):
            parse(bool, "yes")

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("42", 42),
            ("-42", -42),
            ("+7", 7),
            ("0", 0),
            ("0x1F", 31),
            ("0o17", 15),
            ("017", 15),
            ("0b101", 5),
            ("1_000", 1000),
        ],
    )
    def test_int_literals(self, raw, expected):
        """Test base-prefixed integer literals."""
        assert parse(int, raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", " 5", "5 ", "08", "1.5", "0x", "\u0661\u0662"])
    def test_int_invalid(self, raw):
        """Test malformed integers fail."""
        with pytest.raises(CoercionError):
            parse(int, raw)

    def test_int_range(self):
        """Test values are checked against the target width."""
        assert parse(int, str(2**63 - 1)) == 2**63 - 1
        with pytest.raises(CoercionError):
            parse(int, str(2**63))

        value = parse(Int8, "-128")
        assert value == -128
        assert isinstance(value, Int8)
        with pytest.raises(CoercionError):
            parse(Int8, "128")

    def test_unsigned(self):
        """Test unsigned targets reject signs and negative values."""
        assert parse(UInt8, "255") == 255
        assert parse(UInt, "0xFFFFFFFFFFFFFFFF") == 2**64 - 1
        for raw in ("256", "-1", "+1"):
            with pytest.raises(CoercionError):
                parse(UInt8, raw)

    def test_float(self):
        """Test decimal, scientific, special and hex float literals."""
        assert parse(float, "3.25") == 3.25
        assert parse(float, "1e3") == 1000.0
        assert parse(float, "-inf") == -math.inf
        assert math.isnan(parse(float, "NaN"))
        assert parse(float, "0x1p-2") == 0.25
        assert parse(float, "-0X1.8p1") == -3.0

    @pytest.mark.parametrize("raw", ["", "abc", "cafe", "e", "ff", "1p4", " 1.0", "1.0 ", "\u0661.5"])
    def test_float_invalid(self, raw):
        """Test malformed floats fail."""
        with pytest.raises(CoercionError):
            parse(float, raw)

    def test_float32(self):
        """Test single precision rounding and overflow."""
        value = parse(Float32, "0.1")
        assert isinstance(value, Float32)
        assert value == struct.unpack("f", struct.pack("f", 0.1))[0]
        assert value != 0.1
        for raw in ("1e39", "-1e39", "3.5e38"):
            with pytest.raises(CoercionError, match="out of range"):
                parse(Float32, raw)
        assert parse(Float32, "inf") == math.inf

    def test_unsupported(self):
        """Test unknown types and records fail with the type name."""
        with pytest.raises(CoercionError, match="complex"):
            parse(complex, "1")
        with pytest.raises(CoercionError, match="Nested"):
            parse(Nested, "1")

    def test_error_details(self):
        """Test errors carry the raw input and the target."""
        with pytest.raises(CoercionError) as exc_info:
            parse(int, "ten")
        assert exc_info.value.raw == "ten"
        assert exc_info.value.target == "int"


class TestRoundTrip:
    """Test suite for printing a value and parsing it back."""

    @pytest.mark.parametrize("value", [0, 1, -1, 42, 2**63 - 1, -(2**63)])
    def test_int(self, value):
        """Test signed integers."""
        assert parse(int, str(value)) == value

    @pytest.mark.parametrize(
        "tp,value",
        [(UInt8, 0), (UInt8, 255), (UInt16, 65535), (UInt32, 2**32 - 1), (UInt64, 2**64 - 1), (UInt, 7)],
    )
    def test_unsigned(self, tp, value):
        """Test the sized unsigned types keep their type."""
        parsed = parse(tp, str(tp(value)))
        assert parsed == value
        assert type(parsed) is tp

    @pytest.mark.parametrize(
        "value",
        [0.0, -0.0, 0.1, 1 / 3, 1e-300, 5e-324, 1.7976931348623157e308, 123456789.125, math.inf, -math.inf],
    )
    def test_float(self, value):
        """Test repr of awkward floats parses back exactly."""
        assert parse(float, repr(value)) == value
        assert parse(float, str(value)) == value

    def test_float32(self):
        """Test single precision values survive printing."""
        value = parse(Float32, "0.1")
        assert parse(Float32, repr(value)) == value

    @pytest.mark.parametrize("value", [True, False])
    def test_bool(self, value):
        """Test str of a bool."""
        assert parse(bool, str(value)) is value

    @pytest.mark.parametrize(
        "text,value",
        [
            ("1h30m0s", timedelta(hours=1, minutes=30)),
            ("1.5s", timedelta(seconds=1.5)),
            ("-2m3.000004s", -timedelta(minutes=2, seconds=3, microseconds=4)),
            ("720h0m0s", timedelta(days=30)),
            ("0s", timedelta(0)),
        ],
    )
    def test_duration(self, text, value):
        """Test durations in their canonical printed form."""
        assert parse(timedelta, text) == value


class TestDurations:
    """Test suite for duration parsing."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("0", timedelta(0)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("300ms", timedelta(milliseconds=300)),
            ("-1.5h", -timedelta(hours=1, minutes=30)),
            ("2h45m30.5s", timedelta(hours=2, minutes=45, seconds=30.5)),
            ("1µs", timedelta(microseconds=1)),
            ("1500us", timedelta(microseconds=1500)),
            ("2000ns", timedelta(microseconds=2)),
            ("+10s", timedelta(seconds=10)),
        ],
    )
    def test_valid(self, raw, expected):
        """Test duration literals."""
        assert parse_duration(raw) == expected
        assert parse(timedelta, raw) == expected

    @pytest.mark.parametrize("raw", ["", "10", "1x", "h", ".s", "1h 30m", "-", "\u0661s"])
    def test_invalid(self, raw):
        """Test malformed durations fail."""
        with pytest.raises(CoercionError):
            parse(timedelta, raw)


class TestTimestamps:
    """Test suite for timestamp parsing."""

    def test_rfc3339_utc(self):
        """Test RFC 3339 with a Z suffix."""
        assert parse(datetime, "2024-01-02T03:04:05Z") == datetime(
            2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc
        )

    def test_rfc3339_offset_and_fraction(self):
        """Test RFC 3339 with an offset and fractional seconds."""
        value = parse(datetime, "2024-01-02T03:04:05.123+02:00")
        assert value.microsecond == 123000
        assert value.utcoffset() == timedelta(hours=2)

    def test_round_trip(self):
        """Test isoformat output parses back to the same value."""
        original = datetime(2023, 7, 8, 9, 10, 11, 123456, tzinfo=timezone(timedelta(hours=-5)))
        assert parse(datetime, original.isoformat()) == original

    def test_custom_layout(self):
        """Test strptime layouts; values without a zone are UTC."""
        assert parse(datetime, "2024-01-02", layout="%Y-%m-%d") == datetime(
            2024, 1, 2, tzinfo=timezone.utc
        )
        assert parse_timestamp("02/01/2024 10:00", "%d/%m/%Y %H:%M") == datetime(
            2024, 1, 2, 10, 0, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("raw", ["2024-01-02", "yesterday", "2024-13-01T00:00:00Z"])
    def test_invalid(self, raw):
        """Test strings that are not RFC 3339 fail."""
        with pytest.raises(CoercionError):
            parse(datetime, raw)

    def test_layout_mismatch(self):
        """Test a string not matching the layout fails."""
        with pytest.raises(CoercionError):
            parse(datetime, "2024-01-02T03:04:05Z", layout="%Y-%m-%d")


class TestBytes:
    """Test suite for byte sequence targets."""

    def test_bytes_are_not_split(self):
        """Test the raw string's bytes are taken as-is."""
        assert parse(bytes, "a,b") == b"a,b"
        assert parse(bytearray, "hi") == bytearray(b"hi")

    def test_list_of_uint8(self):
        """Test a list of UInt8 receives the byte values."""
        assert parse(List[UInt8], "hello") == [104, 101, 108, 108, 111]


class TestSequences:
    """Test suite for list targets."""

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_blank_is_empty(self, raw):
        """Test blank input gives an empty list."""
        assert parse(List[int], raw) == []

    def test_split_matches_elementwise(self):
        """Test splitting equals converting each piece on its own."""
        assert parse(List[str], "a,b,c") == [parse(str, "a"), parse(str, "b"), parse(str, "c")]
        assert parse(List[int], "1,2,3") == [1, 2, 3]

    def test_custom_separator(self):
        """Test a custom separator."""
        assert parse(List[int], "1;2;3", separator=";") == [1, 2, 3]
        assert parse(List[str], "a,b;c", separator=";") == ["a,b", "c"]

    def test_element_failure_aborts(self):
        """Test one bad element fails the whole list."""
        with pytest.raises(CoercionError) as exc_info:
            parse(List[int], "1,x,3")
        assert exc_info.value.raw == "x"

    def test_nested_lists(self):
        """Test lists of lists reuse the same separator."""
        assert parse(List[List[int]], "1,2") == [[1], [2]]

    def test_durations(self):
        """Test element types go through their own rules."""
        assert parse(List[timedelta], "1s,2m") == [timedelta(seconds=1), timedelta(minutes=2)]


class TestMappings:
    """Test suite for dict targets."""

    def test_blank_is_empty(self):
        """Test blank input gives an empty dict."""
        assert parse(Dict[str, str], "") == {}
        assert parse(Dict[str, str], "  ") == {}

    def test_pairs(self):
        """Test key:value entries."""
        assert parse(Dict[str, str], "k1:v1,k2:v2") == {"k1": "v1", "k2": "v2"}
        assert parse(Dict[str, int], "a:1,b:2") == {"a": 1, "b": 2}
        assert parse(Dict[int, bool], "1:true,2:f") == {1: True, 2: False}

    def test_split_on_first_colon(self):
        """Test values may contain colons."""
        assert parse(Dict[str, str], "url:http://host:80") == {"url": "http://host:80"}

    def test_last_write_wins(self):
        """Test duplicate keys keep the last value."""
        assert parse(Dict[str, int], "a:1,a:2") == {"a": 2}

    def test_missing_colon(self):
        """Test an entry without a colon fails."""
        with pytest.raises(CoercionError) as exc_info:
            parse(Dict[str, str], "k1:v1,broken")
        assert exc_info.value.raw == "broken"

    def test_value_failure(self):
        """Test a bad value fails the whole mapping."""
        with pytest.raises(CoercionError):
            parse(Dict[str, int], "a:one")

    def test_map_of_lists(self):
        """Test list values inside a mapping."""
        assert parse(Dict[str, List[int]], "a:1,b:2") == {"a": [1], "b": [2]}


class TestSetters:
    """Test suite for types implementing set_value."""

    def test_fresh_instance(self):
        """Test a new instance is built and filled."""
        value = parse(Upper, "abc")
        assert isinstance(value, Upper)
        assert value.value == "ABC"

    def test_in_place(self):
        """Test an existing instance is updated in place."""
        current = Upper()
        value = parse(Upper, "xyz", current=current)
        assert value is current
        assert current.value == "XYZ"

    def test_current_value_capability(self):
        """Test the capability of the held value is used even for other declared types."""
        current = Upper()
        assert parse(str, "abc", current=current) is current
        assert current.value == "ABC"

    def test_failure_is_wrapped(self):
        """Test setter errors become coercion errors."""
        with pytest.raises(CoercionError, match="can't be empty"):
            parse(Upper, "")

    def test_elements(self):
        """Test the capability applies to list and map elements."""
        values = parse(List[Upper], "a,b")
        assert [v.value for v in values] == ["A", "B"]
        mapping = parse(Dict[str, Upper], "k:v")
        assert mapping["k"].value == "V"

    def test_not_constructible(self):
        """Test types without a no-argument constructor fail."""
        with pytest.raises(CoercionError):
            parse(NeedsArgument, "x")

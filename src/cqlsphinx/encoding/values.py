"""
Scalar and collection value encoding.

encode_value() turns one column value into the text placed inside its
document element. It is total over every column kind and never raises:

    Kind                     Example value                 Text
    ----------------------   ---------------------------   -------------------------
    Int32/Int64/VarInt/      -42                           "-42"
      Counter
    Ascii/Text               "hello"                       "hello"
    Boolean                  True                          "true"
    Double                   0.1                           "0.1"
    Float                    1.100000023841858 (float32)   "1.1"
    Blob                     b"\\x01\\xff"                   "01ff"
    Decimal                  Decimal("1.50")               "1.50"
    Inet                     "10.0.0.1"                    "10.0.0.1"
    TimestampLike            datetime(2024, 1, 15, 12)     "2024-01-15T12:00:00.000Z"
    ListOf(Int32)            [1, 2, 3]                     "1 2 3"
    SetOf(Text)              {"a", "b"}                    "a b" (any order)
    Unknown                  {"k": 1}                      ""

A CQL null (None) renders as the empty string for every kind. A value that
cannot be coerced to its declared kind also renders empty and is logged at
DEBUG level only.
"""

import decimal
import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Any

import numpy as np

from cqlsphinx.schema.types import (
    Ascii,
    Blob,
    Boolean,
    ColumnKind,
    Counter,
    Decimal,
    Double,
    Float,
    Inet,
    Int32,
    Int64,
    ListOf,
    SetOf,
    Text,
    TimestampLike,
    VarInt,
)

logger = logging.getLogger(__name__)

# 100ns intervals between the UUID epoch (1582-10-15) and the Unix epoch
_UUID_EPOCH_OFFSET = 0x01B21DD213814000

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _encode_integer(value: Any) -> str:
    return str(int(value))


def _encode_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _encode_boolean(value: Any) -> str:
    if not isinstance(value, (bool, np.bool_)):
        raise TypeError(f"Expected a boolean, got {type(value).__name__}")
    return "true" if value else "false"


def _encode_double(value: Any) -> str:
    return repr(float(value))


def _encode_float(value: Any) -> str:
    # Shortest text that round-trips the 32-bit value
    return str(np.float32(value))


def _encode_blob(value: Any) -> str:
    return bytes(value).hex()


def _encode_decimal(value: Any) -> str:
    if not isinstance(value, decimal.Decimal):
        value = decimal.Decimal(str(value))
    return format(value, "f")


def _encode_inet(value: Any) -> str:
    return str(value).lstrip("/")


def _to_utc_datetime(value: Any) -> datetime:
    if isinstance(value, uuid.UUID):
        if value.version != 1:
            raise ValueError(f"UUID {value} is not time-based")
        micros = (value.time - _UUID_EPOCH_OFFSET) // 10
        return _UNIX_EPOCH + timedelta(microseconds=micros)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, int) and not isinstance(value, bool):
        # Epoch milliseconds, as stored by CQL timestamps
        return _UNIX_EPOCH + timedelta(milliseconds=value)
    raise TypeError(f"Cannot read {type(value).__name__} as a timestamp")


def _encode_timestamp(value: Any) -> str:
    moment = _to_utc_datetime(value)
    # isoformat pads years below 1000 to four digits
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


_SCALAR_ENCODERS = {
    Int32: _encode_integer,
    Int64: _encode_integer,
    VarInt: _encode_integer,
    Counter: _encode_integer,
    Ascii: _encode_text,
    Text: _encode_text,
    Boolean: _encode_boolean,
    Double: _encode_double,
    Float: _encode_float,
    Blob: _encode_blob,
    Decimal: _encode_decimal,
    Inet: _encode_inet,
    TimestampLike: _encode_timestamp,
}


def _encode_collection(values: Any, element: ColumnKind) -> str:
    if isinstance(values, (str, bytes, bytearray)):
        raise TypeError(f"Expected a collection, got {type(values).__name__}")
    encoder = _SCALAR_ENCODERS.get(type(element))
    if encoder is None:
        return ""
    return " ".join(encoder(item) for item in values if item is not None)


def encode_value(value: Any, kind: ColumnKind) -> str:
    """
    Render a single column value as text.

    Args:
        value: Value read from the row (None for a CQL null)
        kind: The column's declared kind

    Returns:
        Text rendering, empty for nulls, unknown kinds and collections whose
        element kind is not primitive
    """
    if value is None:
        return ""

    try:
        if isinstance(kind, (SetOf, ListOf)):
            return _encode_collection(value, kind.element)

        encoder = _SCALAR_ENCODERS.get(type(kind))
        if encoder is None:
            return ""
        return encoder(value)
    except (TypeError, ValueError, ArithmeticError) as e:
        logger.debug("Cannot encode %r as %r: %s", value, kind, e)
        return ""

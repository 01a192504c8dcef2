"""
Schema system for cqlsphinx.

Provides column kinds and result set schemas for CQL query results.
"""

from .types import (
    ColumnKind,
    Int32,
    Int64,
    VarInt,
    Counter,
    Ascii,
    Text,
    Boolean,
    Double,
    Float,
    Blob,
    Decimal,
    Inet,
    TimestampLike,
    SetOf,
    ListOf,
    Unknown,
    parse_cql_type,
)
from .columns import ColumnSchema

# Import types module for Kinds.X syntax
from . import types as Kinds

__all__ = [
    # Types module for Kinds.X syntax
    "Kinds",
    "ColumnSchema",
    "parse_cql_type",
    # Individual kind classes
    "ColumnKind",
    "Int32",
    "Int64",
    "VarInt",
    "Counter",
    "Ascii",
    "Text",
    "Boolean",
    "Double",
    "Float",
    "Blob",
    "Decimal",
    "Inet",
    "TimestampLike",
    "SetOf",
    "ListOf",
    "Unknown",
]

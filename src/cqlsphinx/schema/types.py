"""
Column kinds for cqlsphinx's schema system.

This module provides the type classes that describe what a CQL result column
holds. The encoders dispatch on these kinds to decide how a single value is
rendered as text inside an xmlpipe2 document.

Supported Kinds:
- Integral: Int32 (int), Int64 (bigint), VarInt (varint), Counter (counter)
- Text: Ascii (ascii), Text (text / varchar)
- Scalars: Boolean, Double, Float, Blob, Decimal, Inet
- Temporal: TimestampLike (timestamp or timeuuid)
- Collections: SetOf(kind), ListOf(kind) over a primitive element kind
- Unknown: anything else (maps, tuples, UDTs, ...), rendered as empty text

Kinds are frozen value objects: two kinds compare equal when they describe
the same CQL type, and they can be used as dict keys or set members.
"""

from dataclasses import dataclass
import re


class ColumnKind:
    """Base class for all column kinds."""

    #: CQL names that parse to this kind
    cql_names: tuple = ()

    @property
    def is_primitive(self) -> bool:
        """Whether the kind may appear as the element of a collection."""
        return True

    @property
    def is_integral(self) -> bool:
        return False

    @property
    def is_textual(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"

    def __eq__(self, other) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(self.__class__.__name__)


class _Integral(ColumnKind):
    @property
    def is_integral(self) -> bool:
        return True


class Int32(_Integral):
    """32-bit signed integer (CQL ``int``)."""

    cql_names = ("int",)


class Int64(_Integral):
    """64-bit signed integer (CQL ``bigint``)."""

    cql_names = ("bigint",)


class VarInt(_Integral):
    """Arbitrary-precision integer (CQL ``varint``)."""

    cql_names = ("varint",)


class Counter(ColumnKind):
    """Distributed counter. Rendered like an integer but never a fast-path key."""

    cql_names = ("counter",)


class Ascii(ColumnKind):
    cql_names = ("ascii",)

    @property
    def is_textual(self) -> bool:
        return True


class Text(ColumnKind):
    cql_names = ("text", "varchar")

    @property
    def is_textual(self) -> bool:
        return True


class Boolean(ColumnKind):
    cql_names = ("boolean",)


class Double(ColumnKind):
    cql_names = ("double",)


class Float(ColumnKind):
    cql_names = ("float",)


class Blob(ColumnKind):
    cql_names = ("blob",)


class Decimal(ColumnKind):
    cql_names = ("decimal",)


class Inet(ColumnKind):
    cql_names = ("inet",)


@dataclass(frozen=True, eq=False)
class TimestampLike(ColumnKind):
    """Timestamp or time-ordered UUID column."""

    source: str = "timestamp"

    cql_names = ("timestamp", "timeuuid")

    def __post_init__(self):
        if self.source not in ("timestamp", "timeuuid"):
            raise ValueError("TimestampLike source must be 'timestamp' or 'timeuuid'")

    def __repr__(self) -> str:
        return f"TimestampLike({self.source!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, TimestampLike) and other.source == self.source

    def __hash__(self) -> int:
        return hash(("TimestampLike", self.source))


@dataclass(frozen=True, eq=False)
class SetOf(ColumnKind):
    """Set collection of a primitive element kind."""

    element: ColumnKind

    @property
    def is_primitive(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"SetOf({self.element!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, SetOf) and other.element == self.element

    def __hash__(self) -> int:
        return hash(("SetOf", self.element))


@dataclass(frozen=True, eq=False)
class ListOf(ColumnKind):
    """List collection of a primitive element kind."""

    element: ColumnKind

    @property
    def is_primitive(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"ListOf({self.element!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, ListOf) and other.element == self.element

    def __hash__(self) -> int:
        return hash(("ListOf", self.element))


@dataclass(frozen=True, eq=False)
class Unknown(ColumnKind):
    """Any CQL type the encoders do not understand."""

    name: str = ""

    @property
    def is_primitive(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Unknown({self.name!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Unknown) and other.name == self.name

    def __hash__(self) -> int:
        return hash(("Unknown", self.name))


PRIMITIVE_KINDS = (
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
)

_SCALARS_BY_NAME = {
    name: kind_cls() for kind_cls in PRIMITIVE_KINDS for name in kind_cls.cql_names
}
_SCALARS_BY_NAME["timestamp"] = TimestampLike("timestamp")
_SCALARS_BY_NAME["timeuuid"] = TimestampLike("timeuuid")

_PARAMETERIZED = re.compile(r"^(\w+)\s*<\s*(.+)\s*>$")


def parse_cql_type(text: str) -> ColumnKind:
    """
    Parse a CQL type name into a column kind.

    Args:
        text: CQL type as reported by the driver, e.g. ``int``,
            ``set<text>``, ``frozen<list<bigint>>``

    Returns:
        The matching kind, or ``Unknown(text)`` for unsupported types

    Example:
        >>> parse_cql_type("list<int>")
        ListOf(Int32())
    """
    normalized = text.strip().lower()
    if normalized in _SCALARS_BY_NAME:
        return _SCALARS_BY_NAME[normalized]

    match = _PARAMETERIZED.match(normalized)
    if match:
        outer, inner = match.group(1), match.group(2)
        if outer == "frozen":
            return parse_cql_type(inner)
        if outer == "set":
            return SetOf(parse_cql_type(inner))
        if outer == "list":
            return ListOf(parse_cql_type(inner))

    return Unknown(text.strip())

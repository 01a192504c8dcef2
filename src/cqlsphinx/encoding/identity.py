"""
Document id generation.

Every exported row needs a stable, unique, non-negative integer id. The id is
derived from the key columns named by the caller:

1. Fast path: a single Int32/Int64/VarInt key column is its own id.

2. Otherwise, a 64-bit rolling hash is computed:
   - the first Int32/Int64 key column seeds the hash (``hash_base``), read as
     a signed 32-bit integer for compatibility with existing indexes;
   - every other key column is encoded as text and joined with single spaces
     (``"x"``, ``"x y"``, no trailing separator);
   - the joined text is folded into the seed one UTF-16 code unit at a time:
     ``h = c + (h << 6) + (h << 16) - h`` with signed 64-bit wraparound;
   - a negative result is negated (``~h + 1``).

   Negating -2**63 overflows back to -2**63, so that single input yields a
   negative id. This matches existing indexes and is kept as is.

Key column kinds are resolved once per query into an ExportContext. The schema
of one query never changes, so the context is reused for every row.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple

from cqlsphinx.encoding.values import encode_value
from cqlsphinx.schema.columns import ColumnSchema
from cqlsphinx.schema.types import ColumnKind, Int32, Int64, VarInt

_MASK_64 = (1 << 64) - 1
_SIGN_64 = 1 << 63

_FAST_PATH_KINDS = (Int32, Int64, VarInt)
_HASH_BASE_KINDS = (Int32, Int64)


def _wrap_64(value: int) -> int:
    """Wrap an unbounded int to a signed 64-bit value."""
    value &= _MASK_64
    return value - (1 << 64) if value & _SIGN_64 else value


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _utf16_units(text: str):
    data = text.encode("utf-16-be", "surrogatepass")
    for i in range(0, len(data), 2):
        yield (data[i] << 8) | data[i + 1]


def string_key(hash_base: int, text: Optional[str]) -> int:
    """
    Fold text into a 64-bit hash seeded with hash_base.

    Args:
        hash_base: Seed value
        text: Joined key text. None means no text at all and always hashes
            to 0, whatever the seed; an empty string leaves the seed unchanged.

    Returns:
        Non-negative hash, except for the -2**63 overflow case
    """
    if text is None:
        return 0

    h = _wrap_64(hash_base)
    for unit in _utf16_units(text):
        h = _wrap_64(unit + (h << 6) + (h << 16) - h)

    if h > 0:
        return h
    return _wrap_64(~h + 1)


def _read_int(value: Any) -> int:
    # A null integral key reads as 0
    return 0 if value is None else int(value)


@dataclass(frozen=True)
class ExportContext:
    """Key column resolution for one query execution."""

    schema: ColumnSchema
    key_columns: Tuple[str, ...]
    key_kinds: Tuple[ColumnKind, ...]

    @classmethod
    def resolve(cls, keys: Iterable[str], schema: ColumnSchema) -> "ExportContext":
        """
        Resolve the kinds of the key columns against a schema.

        Blank names are dropped.

        Raises:
            ValueError: If no key column is given or one is not in the schema
        """
        key_columns = tuple(name.strip() for name in keys if name and name.strip())
        if not key_columns:
            raise ValueError("At least one key column is required")

        missing = [name for name in key_columns if not schema.has_column(name)]
        if missing:
            raise ValueError(
                f"Key column(s) {missing} not found in query result. "
                f"Available columns: {list(schema.names)}"
            )

        return cls(
            schema=schema,
            key_columns=key_columns,
            key_kinds=tuple(schema.kind_of(name) for name in key_columns),
        )

    @property
    def is_fast_path(self) -> bool:
        return len(self.key_columns) == 1 and isinstance(self.key_kinds[0], _FAST_PATH_KINDS)


def identify(row: Mapping[str, Any], context: ExportContext) -> str:
    """
    Derive the document id of a row.

    Args:
        row: Column name to value mapping
        context: Resolved key columns for the current query

    Returns:
        Decimal text of the id
    """
    if context.is_fast_path:
        return str(_read_int(row.get(context.key_columns[0])))

    hash_base = 0
    parts = []
    for name, kind in zip(context.key_columns, context.key_kinds):
        value = row.get(name)
        if isinstance(kind, _HASH_BASE_KINDS) and hash_base == 0:
            hash_base = _to_int32(_read_int(value))
        else:
            parts.append(encode_value(value, kind))

    return str(string_key(hash_base, " ".join(parts)))


class IdentityGenerator:
    """
    Memoizing id generator for one query.

    Resolves the key column kinds from the schema passed with the first row
    and reuses them for every following row.

    Example:
        >>> generator = IdentityGenerator(["id"])
        >>> generator.identify({"id": 42}, schema)
        '42'
    """

    def __init__(self, keys: Iterable[str]):
        self.keys = tuple(keys)
        self.context: Optional[ExportContext] = None

    def identify(self, row: Mapping[str, Any], schema: ColumnSchema) -> str:
        if self.context is None:
            self.context = ExportContext.resolve(self.keys, schema)
        return identify(row, self.context)

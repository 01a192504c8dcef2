"""
Result set schemas.

A ColumnSchema describes the shape of one query's result: the ordered column
names and their kinds. The order is the positional order returned by the query
engine and is the order in which column elements appear in every document.
"""

from typing import Iterable, Iterator, Tuple

from cqlsphinx.schema.types import ColumnKind, parse_cql_type


class ColumnSchema:
    """Ordered, name-unique sequence of ``(name, kind)`` columns."""

    def __init__(self, columns: Iterable[Tuple[str, ColumnKind]]):
        """
        Args:
            columns: ``(name, kind)`` pairs in result order

        Raises:
            ValueError: If a column name appears twice
        """
        self.columns = tuple((name, kind) for name, kind in columns)
        self._kinds = {}
        for name, kind in self.columns:
            if name in self._kinds:
                raise ValueError(f"Duplicate column name in schema: '{name}'")
            self._kinds[name] = kind

    @classmethod
    def from_cql(cls, names: Iterable[str], cql_types: Iterable[str]) -> "ColumnSchema":
        """Build a schema from parallel lists of names and CQL type names."""
        return cls(
            (name, parse_cql_type(cql_type)) for name, cql_type in zip(names, cql_types)
        )

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.columns)

    def has_column(self, name: str) -> bool:
        return name in self._kinds

    def kind_of(self, name: str) -> ColumnKind:
        """
        Look up a column's kind.

        Raises:
            KeyError: If the column is not part of the schema
        """
        try:
            return self._kinds[name]
        except KeyError:
            raise KeyError(f"Column '{name}' not found in schema") from None

    def __iter__(self) -> Iterator[Tuple[str, ColumnKind]]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __eq__(self, other) -> bool:
        return isinstance(other, ColumnSchema) and self.columns == other.columns

    def __hash__(self) -> int:
        return hash(self.columns)

    def __repr__(self) -> str:
        column_str = ", ".join(f"{name}: {kind}" for name, kind in self.columns)
        return f"ColumnSchema({column_str})"

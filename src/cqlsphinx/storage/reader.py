"""
Arrow-backed result sources.

Besides a live CQL session, query results can be exported from data that was
already fetched and stored:

    Parquet file / directory  --->  pyarrow.Table  --->  pages of row dicts
    pandas / polars DataFrame --->  pyarrow.Table  --->  pages of row dicts

STEP 1: LOAD
------------
Parquet files are discovered once (``*.parquet`` sorted by name when a
directory is given) and read lazily on the first page request. DataFrames are
converted with ``pa.Table.from_pandas`` / ``DataFrame.to_arrow``.

STEP 2: INFER THE SCHEMA
------------------------
Arrow types map onto column kinds:

    int8/int16/int32 -> Int32        float64        -> Double
    int64/uint*      -> Int64        float16/32     -> Float
    string           -> Text         binary         -> Blob
    bool             -> Boolean      decimal        -> Decimal
    timestamp/date   -> TimestampLike
    list<T>          -> ListOf(T)    anything else  -> Unknown

Arrow cannot express ascii, inet, varint, counter, timeuuid or set columns, so
callers may pass an explicit ColumnSchema instead.

STEP 3: PAGE
------------
Pages are zero-copy slices of the table converted with ``to_pylist()``. The
paging state is the offset of the next row.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq

from cqlsphinx.constants import DEFAULT_BATCH_SIZE
from cqlsphinx.schema.columns import ColumnSchema
from cqlsphinx.schema.types import (
    Blob,
    Boolean,
    ColumnKind,
    Decimal,
    Double,
    Float,
    Int32,
    Int64,
    ListOf,
    Text,
    TimestampLike,
    Unknown,
)
from cqlsphinx.storage.pages import ResultPage

logger = logging.getLogger(__name__)


def kind_from_arrow(arrow_type: pa.DataType) -> ColumnKind:
    """Map an Arrow data type to the closest column kind."""
    if pa.types.is_int8(arrow_type) or pa.types.is_int16(arrow_type) or pa.types.is_int32(arrow_type):
        return Int32()
    if pa.types.is_int64(arrow_type) or pa.types.is_unsigned_integer(arrow_type):
        return Int64()
    if (
        pa.types.is_string(arrow_type)
        or pa.types.is_large_string(arrow_type)
        or pa.types.is_string_view(arrow_type)
    ):
        return Text()
    if pa.types.is_boolean(arrow_type):
        return Boolean()
    if pa.types.is_float64(arrow_type):
        return Double()
    if pa.types.is_float32(arrow_type) or pa.types.is_float16(arrow_type):
        return Float()
    if (
        pa.types.is_binary(arrow_type)
        or pa.types.is_large_binary(arrow_type)
        or pa.types.is_binary_view(arrow_type)
    ):
        return Blob()
    if pa.types.is_decimal(arrow_type):
        return Decimal()
    if pa.types.is_timestamp(arrow_type) or pa.types.is_date(arrow_type):
        return TimestampLike("timestamp")
    if pa.types.is_list(arrow_type) or pa.types.is_large_list(arrow_type):
        return ListOf(kind_from_arrow(arrow_type.value_type))
    return Unknown(str(arrow_type))


def schema_from_arrow(arrow_schema: pa.Schema) -> ColumnSchema:
    return ColumnSchema((field.name, kind_from_arrow(field.type)) for field in arrow_schema)


class ArrowResultSource:
    """
    Pages through an in-memory Arrow table.

    Example:
        >>> source = ArrowResultSource.from_pandas(df)
        >>> page = source.fetch_page()
        >>> page.rows[0]
        {'id': 1, 'name': 'first'}
    """

    def __init__(
        self,
        table: pa.Table,
        schema: Optional[ColumnSchema] = None,
        page_size: int = DEFAULT_BATCH_SIZE,
    ):
        """
        Args:
            table: Rows to export
            schema: Explicit column kinds, inferred from Arrow types when None
            page_size: Rows per page
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._table = table
        self._schema = schema
        self.page_size = page_size

    @classmethod
    def from_pandas(cls, df: pd.DataFrame, **kwargs: Any) -> "ArrowResultSource":
        return cls(pa.Table.from_pandas(df, preserve_index=False), **kwargs)

    @classmethod
    def from_polars(cls, df: pl.DataFrame, **kwargs: Any) -> "ArrowResultSource":
        return cls(df.to_arrow(), **kwargs)

    @property
    def table(self) -> pa.Table:
        return self._table

    @property
    def schema(self) -> ColumnSchema:
        if self._schema is None:
            self._schema = schema_from_arrow(self.table.schema)
        return self._schema

    def fetch_page(self, paging_state: Optional[int] = None) -> ResultPage:
        """
        Read one page of rows.

        Args:
            paging_state: Offset returned with the previous page, None for the first

        Returns:
            ResultPage whose paging_state is None once the table is drained
        """
        offset = paging_state or 0
        table = self.table
        rows = table.slice(offset, self.page_size).to_pylist()
        next_offset = offset + len(rows)
        return ResultPage(
            rows=rows,
            paging_state=next_offset if next_offset < table.num_rows else None,
        )

    def __len__(self) -> int:
        return self.table.num_rows


class ParquetResultSource(ArrowResultSource):
    """
    Reads query results previously stored as Parquet.

    Example:
        >>> source = ParquetResultSource(".cache/export")
        >>> len(source.parquet_files)
        3
    """

    def __init__(
        self,
        path: Union[str, Path],
        schema: Optional[ColumnSchema] = None,
        page_size: int = DEFAULT_BATCH_SIZE,
    ):
        """
        Args:
            path: A Parquet file or a directory of ``*.parquet`` files

        Raises:
            FileNotFoundError: If the path does not exist
        """
        self.path = Path(path)

        if not self.path.exists():
            raise FileNotFoundError(f"Parquet input not found: {path}")

        if self.path.is_dir():
            # May be empty if the query returned no results
            self.parquet_files = sorted(self.path.glob("*.parquet"))
        else:
            self.parquet_files = [self.path]

        super().__init__(table=None, schema=schema, page_size=page_size)

    @property
    def table(self) -> pa.Table:
        if self._table is None:
            self._table = self._read_files()
        return self._table

    def _read_files(self) -> pa.Table:
        if not self.parquet_files:
            logger.info("No parquet files in %s, exporting an empty result", self.path)
            return pa.table({})

        # Writer metadata (e.g. pandas index info) may differ between files
        tables = [
            pq.read_table(f, memory_map=True).replace_schema_metadata(None)
            for f in self.parquet_files
        ]
        table = pa.concat_tables(tables) if len(tables) > 1 else tables[0]
        logger.debug(
            "Loaded %d rows from %d parquet file(s) in %s",
            table.num_rows,
            len(self.parquet_files),
            self.path,
        )
        return table

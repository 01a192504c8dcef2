"""
Tests for cqlsphinx.storage.reader module.

Covers:
- Arrow type to column kind mapping
- ArrowResultSource paging
- ParquetResultSource initialization and reading
- pandas / polars DataFrame sources
"""

import decimal
from datetime import datetime, timezone

import pandas as pd
import pyarrow as pa
import pytest

from cqlsphinx.schema import ColumnSchema
from cqlsphinx.schema.types import (
    Blob,
    Boolean,
    Decimal,
    Double,
    Float,
    Int32,
    Int64,
    Inet,
    ListOf,
    Text,
    TimestampLike,
    Unknown,
)
from cqlsphinx.storage.reader import (
    ArrowResultSource,
    ParquetResultSource,
    kind_from_arrow,
    schema_from_arrow,
)


@pytest.fixture
def sample_frame():
    return pd.DataFrame(
        {
            "id": pd.Series([1, 2, 3], dtype="int32"),
            "name": ["first", "second", "third"],
            "score": [42.5, 43.1, 44.2],
        }
    )


@pytest.fixture
def sample_parquet_cache(tmp_path, sample_frame):
    """Create sample parquet files for testing."""
    cache_dir = tmp_path / "test_cache"
    cache_dir.mkdir()

    sample_frame.iloc[:2].to_parquet(cache_dir / "part_0000.parquet", index=False)
    sample_frame.iloc[2:].to_parquet(cache_dir / "part_0001.parquet", index=False)

    return cache_dir


class TestKindFromArrow:
    """Test Arrow type mapping."""

    @pytest.mark.parametrize(
        "arrow_type, expected",
        [
            (pa.int8(), Int32()),
            (pa.int32(), Int32()),
            (pa.int64(), Int64()),
            (pa.uint32(), Int64()),
            (pa.string(), Text()),
            (pa.large_string(), Text()),
            (pa.bool_(), Boolean()),
            (pa.float64(), Double()),
            (pa.float32(), Float()),
            (pa.binary(), Blob()),
            (pa.decimal128(10, 2), Decimal()),
            (pa.timestamp("ms", tz="UTC"), TimestampLike()),
            (pa.date32(), TimestampLike()),
            (pa.list_(pa.int32()), ListOf(Int32())),
        ],
    )
    def test_mapping(self, arrow_type, expected):
        assert kind_from_arrow(arrow_type) == expected

    def test_unsupported_type_is_unknown(self):
        kind = kind_from_arrow(pa.struct([("a", pa.int32())]))

        assert isinstance(kind, Unknown)

    def test_schema_keeps_field_order(self):
        schema = schema_from_arrow(pa.schema([("b", pa.string()), ("a", pa.int64())]))

        assert schema.names == ("b", "a")


class TestArrowResultSource:
    """Test paging over an Arrow table."""

    @pytest.fixture
    def table(self):
        return pa.table({"id": pa.array(range(5), type=pa.int32()), "name": list("abcde")})

    def test_pages_until_drained(self, table):
        source = ArrowResultSource(table, page_size=2)

        pages = []
        state = None
        while True:
            page = source.fetch_page(state)
            pages.append(page)
            if page.is_last:
                break
            state = page.paging_state

        assert [len(p.rows) for p in pages] == [2, 2, 1]
        assert [row["id"] for p in pages for row in p.rows] == [0, 1, 2, 3, 4]

    def test_exact_multiple_ends_on_full_page(self, table):
        source = ArrowResultSource(table.slice(0, 4), page_size=2)

        second = source.fetch_page(source.fetch_page().paging_state)

        assert len(second.rows) == 2
        assert second.is_last

    def test_same_state_returns_same_page(self, table):
        """Retrying a page with its paging state re-reads the same rows."""
        source = ArrowResultSource(table, page_size=2)
        state = source.fetch_page().paging_state

        assert source.fetch_page(state).rows == source.fetch_page(state).rows

    def test_rows_are_dicts(self, table):
        rows = ArrowResultSource(table).fetch_page().rows

        assert rows[0] == {"id": 0, "name": "a"}

    def test_explicit_schema_overrides_inference(self, table):
        schema = ColumnSchema([("id", Int32()), ("name", Inet())])

        assert ArrowResultSource(table, schema=schema).schema.kind_of("name") == Inet()

    def test_rejects_non_positive_page_size(self, table):
        with pytest.raises(ValueError):
            ArrowResultSource(table, page_size=0)

    def test_decimal_and_timestamp_values(self):
        table = pa.table(
            {
                "price": pa.array([decimal.Decimal("1.50")], type=pa.decimal128(5, 2)),
                "at": pa.array(
                    [datetime(2024, 1, 15, tzinfo=timezone.utc)], type=pa.timestamp("ms", tz="UTC")
                ),
            }
        )

        row = ArrowResultSource(table).fetch_page().rows[0]

        assert row["price"] == decimal.Decimal("1.50")
        assert row["at"] == datetime(2024, 1, 15, tzinfo=timezone.utc)


class TestDataFrameSources:
    """Test pandas and polars constructors."""

    def test_from_pandas(self, sample_frame):
        source = ArrowResultSource.from_pandas(sample_frame)

        assert source.schema == ColumnSchema(
            [("id", Int32()), ("name", Text()), ("score", Double())]
        )
        assert len(source) == 3
        assert source.fetch_page().rows[1]["name"] == "second"

    def test_from_polars(self):
        pl = pytest.importorskip("polars")
        df = pl.DataFrame({"id": [1, 2], "tags": [[1, 2], [3]]})

        source = ArrowResultSource.from_polars(df)

        assert source.schema.kind_of("id") == Int64()
        assert source.schema.kind_of("tags") == ListOf(Int64())
        assert source.fetch_page().rows[0] == {"id": 1, "tags": [1, 2]}


class TestParquetResultSourceInit:
    """Test ParquetResultSource initialization."""

    def test_finds_parquet_files_in_directory(self, sample_parquet_cache):
        """Source should find all parquet files in the directory, sorted."""
        source = ParquetResultSource(sample_parquet_cache)

        assert [f.name for f in source.parquet_files] == ["part_0000.parquet", "part_0001.parquet"]

    def test_accepts_single_file(self, sample_parquet_cache):
        source = ParquetResultSource(sample_parquet_cache / "part_0001.parquet")

        assert len(source) == 1

    def test_handles_empty_directory(self, tmp_path):
        """An empty directory is an empty result (no columns, no rows)."""
        empty_cache = tmp_path / "empty_cache"
        empty_cache.mkdir()

        source = ParquetResultSource(empty_cache)

        assert source.parquet_files == []
        assert len(source.schema) == 0
        page = source.fetch_page()
        assert page.rows == [] and page.is_last

    def test_raises_error_for_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ParquetResultSource(tmp_path / "missing")


class TestParquetResultSourceRead:
    """Test reading parquet pages."""

    def test_reads_all_files_in_order(self, sample_parquet_cache):
        source = ParquetResultSource(sample_parquet_cache, page_size=10)

        page = source.fetch_page()

        assert [row["id"] for row in page.rows] == [1, 2, 3]
        assert page.is_last

    def test_infers_schema(self, sample_parquet_cache):
        source = ParquetResultSource(sample_parquet_cache)

        assert source.schema.names == ("id", "name", "score")
        assert source.schema.kind_of("id") == Int32()

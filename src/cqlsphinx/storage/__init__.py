"""
Result storage layer for cqlsphinx.

Provides paged result sources the export driver reads from:

- Pages: ResultPage and the ResultSource protocol
- Reader: Arrow, Parquet and DataFrame backed sources with schema inference
"""

from .pages import ResultPage, ResultSource
from .reader import (
    ArrowResultSource,
    ParquetResultSource,
    kind_from_arrow,
    schema_from_arrow,
)

__all__ = [
    "ResultPage",
    "ResultSource",
    "ArrowResultSource",
    "ParquetResultSource",
    "kind_from_arrow",
    "schema_from_arrow",
]

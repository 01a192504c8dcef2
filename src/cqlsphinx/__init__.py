"""
cqlsphinx: stream CQL query results into Sphinx xmlpipe2 documents.

Each result row becomes one ``<sphinx:document>`` with a stable id derived
from the key columns and one child element per column.
"""

from cqlsphinx.config import ExportConfig
from cqlsphinx.encoding import (
    DocumentFragment,
    ExportContext,
    IdentityGenerator,
    encode_row,
    encode_value,
    identify,
    render_text,
)
from cqlsphinx.execution import ExportDriver, ExportErr, ExportOk, RetryPolicy
from cqlsphinx.output import DocsetWriter
from cqlsphinx.schema import ColumnSchema, Kinds
from cqlsphinx.storage import ArrowResultSource, ParquetResultSource

__version__ = "0.1.0"

__all__ = [
    "ExportConfig",
    "ColumnSchema",
    "Kinds",
    "encode_value",
    "identify",
    "render_text",
    "encode_row",
    "ExportContext",
    "IdentityGenerator",
    "DocumentFragment",
    "DocsetWriter",
    "ExportDriver",
    "ExportOk",
    "ExportErr",
    "RetryPolicy",
    "ArrowResultSource",
    "ParquetResultSource",
]

"""
Row encoding for cqlsphinx.

Turns CQL result rows into xmlpipe2 document fragments:

- values: text rendering of a single typed value
- identity: document id derivation from key columns
- structured: JSON member list detection in text columns
- row: per-row document fragment assembly
"""

from cqlsphinx.encoding.identity import (
    ExportContext,
    IdentityGenerator,
    identify,
    string_key,
)
from cqlsphinx.encoding.row import DocumentFragment, Field, encode_row
from cqlsphinx.encoding.structured import (
    PlainText,
    RenderedValue,
    StructuredMembers,
    render_text,
)
from cqlsphinx.encoding.values import encode_value

__all__ = [
    "encode_value",
    "ExportContext",
    "IdentityGenerator",
    "identify",
    "string_key",
    "PlainText",
    "StructuredMembers",
    "RenderedValue",
    "render_text",
    "DocumentFragment",
    "Field",
    "encode_row",
]

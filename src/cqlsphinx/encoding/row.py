"""
Row to document fragment encoding.

encode_row() turns one result row into a DocumentFragment: the document id
plus one field per schema column, in schema order. Text columns go through
the structured text detector; every other kind is rendered by encode_value().
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from cqlsphinx.encoding.identity import ExportContext, identify
from cqlsphinx.encoding.structured import PlainText, RenderedValue, render_text
from cqlsphinx.encoding.values import encode_value

# Letter or underscore, then letters, digits, "_", "-" or "."; no namespace prefix
_ELEMENT_NAME = re.compile(r"[^\W\d][\w.-]*\Z")


@dataclass(frozen=True)
class Field:
    """One column element of a document."""

    name: str
    value: RenderedValue

    def __post_init__(self):
        if not _ELEMENT_NAME.match(self.name):
            raise ValueError(f"Column name {self.name!r} is not a valid XML element name")


@dataclass(frozen=True)
class DocumentFragment:
    """One row rendered for the indexer."""

    doc_id: str
    fields: Tuple[Field, ...]

    def field(self, name: str) -> RenderedValue:
        for item in self.fields:
            if item.name == name:
                return item.value
        raise KeyError(f"Document has no field '{name}'")


def encode_row(row: Mapping[str, Any], context: ExportContext) -> DocumentFragment:
    """
    Encode one row.

    Args:
        row: Column name to value mapping
        context: Resolved schema and key columns of the current query

    Returns:
        DocumentFragment with fields in schema order
    """
    fields = []
    for name, kind in context.schema:
        value = row.get(name)
        if kind.is_textual:
            text = value if value is None or isinstance(value, str) else str(value)
            rendered = render_text(text)
        else:
            rendered = PlainText(encode_value(value, kind))
        fields.append(Field(name, rendered))

    return DocumentFragment(doc_id=identify(row, context), fields=tuple(fields))

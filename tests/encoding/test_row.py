"""
Tests for cqlsphinx.encoding.row module.

Covers:
- Field order and naming follow the schema
- Text columns routed through structured text detection
- Non-text columns rendered by encode_value
- Document id from the key columns
"""

import decimal

import pytest

from cqlsphinx.encoding import ExportContext, PlainText, StructuredMembers, encode_row
from cqlsphinx.schema import ColumnSchema
from cqlsphinx.schema.types import Blob, Decimal, Int32, ListOf, SetOf, Text, Unknown


@pytest.fixture
def simple_context():
    schema = ColumnSchema([("id", Int32()), ("tags", Text())])
    return ExportContext.resolve(["id"], schema)


class TestEncodeRow:
    """Test encode_row()."""

    def test_single_integral_key(self, simple_context):
        fragment = encode_row({"id": 42, "tags": "hello"}, simple_context)

        assert fragment.doc_id == "42"
        assert [f.name for f in fragment.fields] == ["id", "tags"]
        assert fragment.field("id") == PlainText("42")
        assert fragment.field("tags") == PlainText("hello")

    def test_composite_key(self):
        schema = ColumnSchema([("a", Int32()), ("b", Text())])
        context = ExportContext.resolve(["a", "b"], schema)

        fragment = encode_row({"a": 7, "b": "x"}, context)

        assert fragment.doc_id == "459313"
        assert encode_row({"a": 7, "b": "x"}, context) == fragment

    def test_fields_follow_schema_order_not_row_order(self):
        schema = ColumnSchema([("z", Text()), ("a", Int32()), ("m", Text())])
        context = ExportContext.resolve(["a"], schema)

        fragment = encode_row({"m": "3", "a": 1, "z": "2"}, context)

        assert [f.name for f in fragment.fields] == ["z", "a", "m"]

    def test_text_member_lists_are_structured(self, simple_context):
        fragment = encode_row({"id": 1, "tags": "[[1,2],[3]]"}, simple_context)

        assert fragment.field("tags") == StructuredMembers(((1, 2), (3,)))

    def test_non_text_columns_are_never_structured(self):
        schema = ColumnSchema([("id", Int32()), ("raw", Blob()), ("ids", ListOf(Int32()))])
        context = ExportContext.resolve(["id"], schema)

        fragment = encode_row({"id": 1, "raw": b"[[1]]", "ids": [1, 2, 3]}, context)

        assert fragment.field("raw") == PlainText("5b5b315d5d")
        assert fragment.field("ids") == PlainText("1 2 3")

    def test_missing_and_null_values_render_empty(self):
        schema = ColumnSchema(
            [("id", Int32()), ("body", Text()), ("price", Decimal()), ("tags", SetOf(Text()))]
        )
        context = ExportContext.resolve(["id"], schema)

        fragment = encode_row({"id": 5, "body": None}, context)

        assert fragment.field("body") == PlainText("")
        assert fragment.field("price") == PlainText("")
        assert fragment.field("tags") == PlainText("")

    def test_unknown_kind_renders_empty(self):
        schema = ColumnSchema([("id", Int32()), ("attrs", Unknown("map<text, text>"))])
        context = ExportContext.resolve(["id"], schema)

        fragment = encode_row({"id": 5, "attrs": {"k": "v"}}, context)

        assert fragment.field("attrs") == PlainText("")

    def test_decimal_column(self):
        schema = ColumnSchema([("id", Int32()), ("price", Decimal())])
        context = ExportContext.resolve(["id"], schema)

        fragment = encode_row({"id": 5, "price": decimal.Decimal("9.90")}, context)

        assert fragment.field("price") == PlainText("9.90")

    def test_unknown_field_lookup_raises(self, simple_context):
        fragment = encode_row({"id": 1, "tags": "t"}, simple_context)

        with pytest.raises(KeyError):
            fragment.field("nope")

    @pytest.mark.parametrize("name", ["first name", "a<b", "1st", "sphinx:id", ""])
    def test_column_name_must_be_an_element_name(self, name):
        schema = ColumnSchema([("id", Int32()), (name, Text())])
        context = ExportContext.resolve(["id"], schema)

        with pytest.raises(ValueError, match="not a valid XML element name"):
            encode_row({"id": 1, name: "x"}, context)

    def test_unicode_column_name_allowed(self):
        schema = ColumnSchema([("id", Int32()), ("título", Text())])
        context = ExportContext.resolve(["id"], schema)

        assert encode_row({"id": 1, "título": "x"}, context).field("título") == PlainText("x")

"""
Tests for cqlsphinx.output.xmlpipe module.

Covers:
- Fragment rendering (escaping, CDATA member lists, empty values)
- Docset envelope start/end and idempotent close
- The full document parses as XML
"""

import io
import xml.etree.ElementTree as ElementTree

import pytest

from cqlsphinx.encoding import DocumentFragment, Field, PlainText, StructuredMembers
from cqlsphinx.output import DocsetWriter, render_fragment


@pytest.fixture
def fragment():
    return DocumentFragment(
        doc_id="42",
        fields=(Field("id", PlainText("42")), Field("tags", PlainText("hello"))),
    )


def _parse(xml_text):
    # Declare the sphinx prefix so a namespace-aware parser accepts the output
    body = xml_text.split("?>", 1)[1]
    body = body.replace("<sphinx:docset>", '<sphinx:docset xmlns:sphinx="sphinx">', 1)
    return ElementTree.fromstring(body)


class TestRenderFragment:
    """Test render_fragment()."""

    def test_simple_document(self, fragment):
        assert render_fragment(fragment) == (
            '\n<sphinx:document id="42"><id>42</id><tags>hello</tags></sphinx:document>'
        )

    def test_text_is_escaped(self):
        fragment = DocumentFragment("1", (Field("body", PlainText("a < b & c > d")),))

        assert "<body>a &lt; b &amp; c &gt; d</body>" in render_fragment(fragment)

    def test_members_written_as_cdata(self):
        fragment = DocumentFragment("1", (Field("tags", StructuredMembers(((1, 2), (3,)))),))

        assert "<tags><![CDATA[<mem>1 2</mem><mem>3</mem>]]></tags>" in render_fragment(fragment)

    def test_empty_value(self):
        fragment = DocumentFragment("1", (Field("body", PlainText("")),))

        assert "<body></body>" in render_fragment(fragment)


class TestDocsetWriter:
    """Test the docset envelope."""

    def test_envelope(self, fragment):
        stream = io.StringIO()

        with DocsetWriter(stream) as writer:
            writer.write(fragment)

        output = stream.getvalue()
        assert output.startswith('<?xml version="1.0" encoding="utf-8"?>\n<sphinx:docset>')
        assert output.endswith("</sphinx:document>\n</sphinx:docset>\n")
        assert writer.documents_written == 1

    def test_output_is_well_formed(self, fragment):
        stream = io.StringIO()
        with DocsetWriter(stream) as writer:
            writer.write(fragment)
            writer.write(DocumentFragment("43", (Field("tags", StructuredMembers(((7,),))),)))

        root = _parse(stream.getvalue())
        documents = root.findall("{sphinx}document")
        assert [d.get("id") for d in documents] == ["42", "43"]
        assert documents[0].find("tags").text == "hello"
        assert documents[1].find("tags").text == "<mem>7</mem>"

    def test_end_is_idempotent(self):
        stream = io.StringIO()
        writer = DocsetWriter(stream)
        writer.start()
        writer.end()
        writer.end()

        assert stream.getvalue().count("</sphinx:docset>") == 1

    def test_end_without_start_writes_empty_docset(self):
        stream = io.StringIO()

        DocsetWriter(stream).end()

        assert _parse(stream.getvalue()).findall("{sphinx}document") == []

    def test_write_after_end_rejected(self, fragment):
        writer = DocsetWriter(io.StringIO())
        writer.start()
        writer.end()

        with pytest.raises(RuntimeError):
            writer.write(fragment)

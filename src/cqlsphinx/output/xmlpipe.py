"""
Sphinx xmlpipe2 document writer.

Output layout:

    <?xml version="1.0" encoding="utf-8"?>
    <sphinx:docset>
    <sphinx:document id="42"><id>42</id><tags>hello</tags></sphinx:document>
    <sphinx:document id="43"><id>43</id><tags><![CDATA[<mem>1 2</mem>]]></tags></sphinx:document>
    </sphinx:docset>

Each fragment is rendered to a string before anything is written, so a row
that fails to render never leaves a half-written element in the stream.
"""

import logging
from typing import TextIO
from xml.sax.saxutils import escape, quoteattr

from cqlsphinx.constants import DOCSET_ELEMENT, DOCUMENT_ELEMENT, OUTPUT_ENCODING
from cqlsphinx.encoding.row import DocumentFragment
from cqlsphinx.encoding.structured import RenderedValue, StructuredMembers

logger = logging.getLogger(__name__)


def _render_value(value: RenderedValue) -> str:
    if isinstance(value, StructuredMembers):
        return f"<![CDATA[{value.markup()}]]>"
    return escape(value.text)


def render_fragment(fragment: DocumentFragment) -> str:
    """Render one document, including its leading newline."""
    parts = [f"\n<{DOCUMENT_ELEMENT} id={quoteattr(fragment.doc_id)}>"]
    for field in fragment.fields:
        parts.append(f"<{field.name}>{_render_value(field.value)}</{field.name}>")
    parts.append(f"</{DOCUMENT_ELEMENT}>")
    return "".join(parts)


class DocsetWriter:
    """
    Streams documents inside a ``sphinx:docset`` envelope.

    Example:
        >>> with DocsetWriter(sys.stdout) as writer:
        ...     writer.write(fragment)
    """

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.documents_written = 0
        self._started = False
        self._ended = False

    def start(self) -> None:
        if self._started:
            return
        self.stream.write(f'<?xml version="1.0" encoding="{OUTPUT_ENCODING}"?>\n')
        self.stream.write(f"<{DOCSET_ELEMENT}>")
        self._started = True

    def write(self, fragment: DocumentFragment) -> None:
        if not self._started or self._ended:
            raise RuntimeError("DocsetWriter.write() called outside start()/end()")
        self.stream.write(render_fragment(fragment))
        self.documents_written += 1

    def end(self) -> None:
        if self._ended:
            return
        if not self._started:
            self.start()
        self.stream.write(f"\n</{DOCSET_ELEMENT}>\n")
        self.stream.flush()
        self._ended = True
        logger.debug("Closed docset after %d documents", self.documents_written)

    def __enter__(self) -> "DocsetWriter":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.end()

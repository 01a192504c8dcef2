"""xmlpipe2 output for cqlsphinx."""

from .xmlpipe import DocsetWriter, render_fragment

__all__ = [
    "DocsetWriter",
    "render_fragment",
]

"""
Detection of JSON member lists stored in text columns.

Some text columns hold JSON-encoded nested integer arrays such as
``[[1,2],[3]]``. Those are re-rendered as one ``<mem>`` element per inner list
so the indexer sees ``<mem>1 2</mem><mem>3</mem>`` instead of raw JSON.

Only values whose first and last characters are ``[``/``]`` or ``{``/``}`` are
candidates. A candidate that is not valid JSON, or not a list of integer
lists, falls back to plain text and a warning is logged. The export is never
aborted because of a malformed value.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from cqlsphinx.constants import MEMBER_ELEMENT

logger = logging.getLogger(__name__)

_CANDIDATE_BRACKETS = (("[", "]"), ("{", "}"))


@dataclass(frozen=True)
class PlainText:
    """Text written as escaped character data."""

    text: str


@dataclass(frozen=True)
class StructuredMembers:
    """Integer member lists parsed from a JSON text value."""

    members: Tuple[Tuple[int, ...], ...]

    def markup(self) -> str:
        """Render as ``<mem>`` elements, no surrounding container."""
        return "".join(
            f"<{MEMBER_ELEMENT}>{' '.join(str(m) for m in member)}</{MEMBER_ELEMENT}>"
            for member in self.members
        )


RenderedValue = Union[PlainText, StructuredMembers]


def is_candidate(text: str) -> bool:
    """Whether the text is bracketed like a JSON array or object."""
    if len(text) < 2:
        return False
    return any(text[0] == left and text[-1] == right for left, right in _CANDIDATE_BRACKETS)


def _parse_members(text: str) -> Tuple[Tuple[int, ...], ...]:
    parsed = json.loads(text)
    if not isinstance(parsed, list):
        raise ValueError(f"expected a JSON array, got {type(parsed).__name__}")

    members = []
    for inner in parsed:
        if not isinstance(inner, list):
            raise ValueError(f"expected an array of arrays, got {type(inner).__name__}")
        for item in inner:
            if isinstance(item, bool) or not isinstance(item, int):
                raise ValueError(f"expected integer members, got {item!r}")
        members.append(tuple(inner))
    return tuple(members)


def render_text(text: Optional[str]) -> RenderedValue:
    """
    Decide how a text column value is written.

    Args:
        text: Ascii/Text column value (None for a CQL null)

    Returns:
        StructuredMembers for a valid member list, PlainText otherwise
    """
    if text is None:
        return PlainText("")
    if not is_candidate(text):
        return PlainText(text)

    try:
        return StructuredMembers(_parse_members(text))
    except (ValueError, RecursionError) as e:
        # json.JSONDecodeError is a ValueError too
        logger.warning("JSON is not valid, returned text itself. text: %s (%s)", text, e)
        return PlainText(text)

"""Paged access to query results."""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Protocol

from cqlsphinx.schema.columns import ColumnSchema


@dataclass
class ResultPage:
    """A page of rows plus the state needed to fetch the next one."""

    rows: List[Mapping[str, Any]]
    paging_state: Optional[Any]  # None once the result set is drained

    @property
    def is_last(self) -> bool:
        return self.paging_state is None


class ResultSource(Protocol):
    """Anything the export driver can page through."""

    @property
    def schema(self) -> ColumnSchema: ...

    def fetch_page(self, paging_state: Optional[Any] = None) -> ResultPage: ...

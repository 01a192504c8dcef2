"""
Cassandra session and query result source.

connect() opens a session on the cluster described by an ExportConfig.
CassandraResultSource executes one CQL statement and pages through its result
with the driver's paging state, so a page that timed out can be fetched again
without re-reading the rows already exported.
"""

import logging
from typing import Any, Mapping, Optional

from cassandra.query import SimpleStatement, dict_factory

from cqlsphinx.config import ExportConfig
from cqlsphinx.constants import (
    DEFAULT_BATCH_SIZE,
    RECONNECT_BASE_DELAY,
    RECONNECT_MAX_DELAY,
)
from cqlsphinx.schema.columns import ColumnSchema
from cqlsphinx.storage.pages import ResultPage

logger = logging.getLogger(__name__)


def connect(config: ExportConfig):
    """
    Open a session on the configured cluster.

    Returns:
        Tuple of (cluster, session); the caller shuts the cluster down
    """
    from cassandra.auth import PlainTextAuthProvider
    from cassandra.cluster import Cluster
    from cassandra.policies import ExponentialReconnectionPolicy

    auth_provider = None
    if config.user is not None:
        auth_provider = PlainTextAuthProvider(username=config.user, password=config.password)

    cluster = Cluster(
        contact_points=list(config.hosts),
        port=config.port,
        auth_provider=auth_provider,
        reconnection_policy=ExponentialReconnectionPolicy(
            RECONNECT_BASE_DELAY, RECONNECT_MAX_DELAY
        ),
    )
    logger.debug("Connecting to %s:%d", ",".join(config.hosts), config.port)
    session = cluster.connect()
    session.row_factory = dict_factory
    session.default_timeout = config.request_timeout
    return cluster, session


def _as_mapping(row: Any) -> Mapping[str, Any]:
    if isinstance(row, Mapping):
        return row
    # named_tuple_factory rows
    return row._asdict()


class CassandraResultSource:
    """
    Pages through the result of one CQL query.

    Example:
        >>> source = CassandraResultSource(session, "SELECT id, body FROM docs")
        >>> source.schema
        ColumnSchema(id: Int32(), body: Text())
    """

    def __init__(self, session: Any, cql: str, fetch_size: int = DEFAULT_BATCH_SIZE):
        self.session = session
        self.cql = cql
        self.fetch_size = fetch_size
        self._schema: Optional[ColumnSchema] = None
        self._first_page: Optional[ResultPage] = None

    def _execute(self, paging_state: Optional[bytes]) -> ResultPage:
        statement = SimpleStatement(self.cql, fetch_size=self.fetch_size)
        result = self.session.execute(statement, paging_state=paging_state)

        if self._schema is None:
            self._schema = ColumnSchema.from_cql(
                result.column_names or (),
                [cql_type.cql_parameterized_type() for cql_type in result.column_types or ()],
            )
            logger.debug("Query result schema: %s", self._schema)

        return ResultPage(
            rows=[_as_mapping(row) for row in result.current_rows],
            paging_state=result.paging_state,
        )

    @property
    def schema(self) -> ColumnSchema:
        """Result schema, known once the first page has been requested."""
        if self._schema is None:
            self._first_page = self._execute(None)
        return self._schema

    def fetch_page(self, paging_state: Optional[bytes] = None) -> ResultPage:
        if paging_state is None and self._first_page is not None:
            page, self._first_page = self._first_page, None
            return page
        return self._execute(paging_state)

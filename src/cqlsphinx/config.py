"""
Export configuration.

ExportConfig gathers everything one export run needs: where the data comes
from (a CQL query on a cluster, or stored Parquet results), which columns form
the document id, and how transient failures are handled.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from cqlsphinx.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_HOSTS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT,
    ROW_ERROR_ACTIONS,
    TIMEOUT_ACTIONS,
)


@dataclass(frozen=True)
class ExportConfig:
    """Validated settings for one export run."""

    keys: Tuple[str, ...]
    cql: Optional[str] = None
    hosts: Tuple[str, ...] = DEFAULT_HOSTS
    port: int = DEFAULT_PORT
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    debug_file: Optional[str] = None
    fetch_size: int = DEFAULT_BATCH_SIZE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    timeout_action: str = "abort"
    row_errors: str = "skip"
    parquet: Optional[str] = None

    def __post_init__(self):
        # Blank entries come from inputs like "--keys a,,b"
        keys = tuple(k.strip() for k in self.keys if k and k.strip())
        object.__setattr__(self, "keys", keys)
        object.__setattr__(self, "hosts", tuple(h.strip() for h in self.hosts if h.strip()))

        if not keys:
            raise ValueError("At least one key column is required")
        if self.parquet is None and not (self.cql and self.cql.strip()):
            raise ValueError("A CQL query is required unless --parquet is given")
        if not self.hosts:
            raise ValueError("At least one contact point host is required")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be in 1..65535, got {self.port}")
        if self.fetch_size <= 0:
            raise ValueError(f"fetch_size must be positive, got {self.fetch_size}")
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.timeout_action not in TIMEOUT_ACTIONS:
            raise ValueError(f"timeout_action must be one of {TIMEOUT_ACTIONS}")
        if self.row_errors not in ROW_ERROR_ACTIONS:
            raise ValueError(f"row_errors must be one of {ROW_ERROR_ACTIONS}")

        if self.user is not None and self.password is None:
            object.__setattr__(self, "password", "")

"""
Export execution for cqlsphinx.
"""

from cqlsphinx.execution.driver import (
    ErrorKind,
    ExportDriver,
    ExportErr,
    ExportOk,
    ExportResult,
)
from cqlsphinx.execution.retry import (
    NO_RETRY,
    BackoffStrategy,
    ConstantBackoff,
    ExponentialBackoff,
    RetryPolicy,
)
from cqlsphinx.execution.session import CassandraResultSource, connect

__all__ = [
    "ErrorKind",
    "ExportDriver",
    "ExportErr",
    "ExportOk",
    "ExportResult",
    "RetryPolicy",
    "BackoffStrategy",
    "ConstantBackoff",
    "ExponentialBackoff",
    "NO_RETRY",
    # session.py exports
    "CassandraResultSource",
    "connect",
]

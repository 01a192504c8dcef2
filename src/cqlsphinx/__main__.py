"""
Command line exporter.

    cqlsphinx --keys id --cql "SELECT id, title, body FROM site.pages" > pages.xml
    cqlsphinx --keys id --parquet exports/pages/ > pages.xml

The xmlpipe2 document is written to stdout as UTF-8. Exit status is 0 when
the export completed, 1 when it failed, 2 for invalid arguments.
"""

from __future__ import annotations

import argparse
import io
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from cassandra import OperationTimedOut, ReadTimeout

from cqlsphinx.config import ExportConfig
from cqlsphinx.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT,
    OUTPUT_ENCODING,
    ROW_ERROR_ACTIONS,
    TIMEOUT_ACTIONS,
)
from cqlsphinx.execution.driver import ExportDriver, ExportResult
from cqlsphinx.execution.retry import RetryPolicy
from cqlsphinx.execution.session import CassandraResultSource, connect
from cqlsphinx.logs import configure_logging
from cqlsphinx.output.xmlpipe import DocsetWriter
from cqlsphinx.storage.reader import ParquetResultSource

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS = (OperationTimedOut, ReadTimeout, TimeoutError)


def _split_csv(value: str) -> list[str]:
    return [item for item in value.split(",") if item.strip()]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cqlsphinx",
        description="Export a CQL query result as a Sphinx xmlpipe2 document.",
    )
    parser.add_argument(
        "--keys",
        required=True,
        type=_split_csv,
        help=(
            "Comma-separated key columns. A single int/bigint/varint column is used "
            "as the document id directly; otherwise the id is a hash of the key columns."
        ),
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--cql", help="CQL query to export.")
    source.add_argument("--parquet", help="Export a Parquet file or directory instead of a query.")
    parser.add_argument(
        "--host",
        type=_split_csv,
        default=["localhost"],
        help="Comma-separated contact point hosts (default: localhost).",
    )
    parser.add_argument(
        "--port", type=int, default=DEFAULT_PORT, help=f"Native protocol port (default: {DEFAULT_PORT})."
    )
    parser.add_argument("--user", default=None, help="Username for authentication.")
    parser.add_argument("--pass", dest="password", default=None, help="Password for authentication.")
    parser.add_argument("--debug", metavar="FILE", default=None, help="Write debug log to FILE.")
    parser.add_argument(
        "--fetch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Rows per page (default: {DEFAULT_BATCH_SIZE}).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_REQUEST_TIMEOUT:g}).",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=DEFAULT_MAX_ATTEMPTS,
        help=f"Attempts per page on read timeouts (default: {DEFAULT_MAX_ATTEMPTS}).",
    )
    parser.add_argument(
        "--on-timeout",
        choices=TIMEOUT_ACTIONS,
        default="abort",
        help="Abort, or stop and close the document, when a page keeps timing out.",
    )
    parser.add_argument(
        "--on-row-error",
        choices=ROW_ERROR_ACTIONS,
        default="skip",
        help="Skip or abort on a row that cannot be encoded (default: skip).",
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> ExportConfig:
    return ExportConfig(
        keys=tuple(args.keys),
        cql=args.cql,
        hosts=tuple(args.host),
        port=args.port,
        user=args.user,
        password=args.password,
        debug_file=args.debug,
        fetch_size=args.fetch_size,
        request_timeout=args.timeout,
        max_attempts=args.retries,
        timeout_action=args.on_timeout,
        row_errors=args.on_row_error,
        parquet=args.parquet,
    )


def run_export(config: ExportConfig, stream: TextIO) -> ExportResult:
    """Run one export described by config, writing the document to stream."""
    retry_policy = RetryPolicy(
        max_attempts=config.max_attempts,
        retryable_exceptions=RETRYABLE_EXCEPTIONS,
    )

    def _drive(source) -> ExportResult:
        driver = ExportDriver(
            source,
            DocsetWriter(stream),
            config.keys,
            retry_policy=retry_policy,
            row_errors=config.row_errors,
            timeout_action=config.timeout_action,
            progress_every=config.fetch_size,
        )
        return driver.run()

    if config.parquet is not None:
        return _drive(ParquetResultSource(config.parquet, page_size=config.fetch_size))

    cluster, session = connect(config)
    try:
        return _drive(CassandraResultSource(session, config.cql, fetch_size=config.fetch_size))
    finally:
        cluster.shutdown()


def main(argv: Sequence[str] | None = None, stream: TextIO | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        config = _config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(config.debug_file)

    if stream is None:
        stream = io.TextIOWrapper(sys.stdout.buffer, encoding=OUTPUT_ENCODING, newline="\n")

    try:
        result = run_export(config, stream)
    except Exception:
        logger.exception("Export failed")
        return 1

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())

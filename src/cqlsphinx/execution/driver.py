"""
Export driver: pages through a result source and streams documents.

================================================================================
ARCHITECTURE - SEQUENTIAL PAGED EXPORT
================================================================================

    ResultSource --fetch_page()--> rows --encode_row()--> DocsetWriter --> stream
         ^                                                      |
         '--- paging_state (retried with RetryPolicy) ----------'

One row is encoded and written before the next is read. Output is a single
document whose elements appear in result order, so nothing runs in parallel.

OUTCOMES
────────────────────────────────────────────────────────────────────────────────
    - Missing key column           -> ExportErr(CONFIGURATION), no documents
    - Row fails to encode          -> skipped and logged ("skip") or
                                      ExportErr(ROW_ENCODING) ("abort")
                                      (also raised for a column name that is
                                      not a valid XML element name)
    - Retries exhausted on timeout -> ExportErr(TRANSPORT_TIMEOUT) ("abort") or
                                      ExportOk(truncated=True) ("stop")
    - Any other source failure     -> ExportErr(SOURCE)

The docset envelope is closed in every case, so the output stream is always
well-formed.
================================================================================
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Union

from cqlsphinx.constants import DEFAULT_BATCH_SIZE, ROW_ERROR_ACTIONS, TIMEOUT_ACTIONS
from cqlsphinx.encoding.identity import ExportContext
from cqlsphinx.encoding.row import encode_row
from cqlsphinx.execution.retry import RetryPolicy
from cqlsphinx.output.xmlpipe import DocsetWriter
from cqlsphinx.storage.pages import ResultSource

logger = logging.getLogger(__name__)


class ErrorKind(Enum):
    """Why an export did not complete."""

    CONFIGURATION = "configuration"
    ROW_ENCODING = "row_encoding"
    TRANSPORT_TIMEOUT = "transport_timeout"
    SOURCE = "source"


@dataclass(frozen=True)
class ExportOk:
    rows_consumed: int
    rows_skipped: int = 0
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ExportErr:
    kind: ErrorKind
    rows_consumed: int
    error: BaseException

    @property
    def ok(self) -> bool:
        return False


ExportResult = Union[ExportOk, ExportErr]


class _Abort(Exception):
    """Stops the paging loop with a typed outcome."""

    def __init__(self, result: ExportResult):
        super().__init__(result)
        self.result = result


def _elapsed_ms(start: float) -> str:
    return f"{int((time.monotonic() - start) * 1000):,}"


class ExportDriver:
    """
    Runs one export from a result source into a docset writer.

    Example:
        >>> driver = ExportDriver(source, DocsetWriter(sys.stdout), ["id"])
        >>> result = driver.run()
        >>> result.rows_consumed
        1200
    """

    def __init__(
        self,
        source: ResultSource,
        writer: DocsetWriter,
        keys: Iterable[str],
        retry_policy: Optional[RetryPolicy] = None,
        row_errors: str = "skip",
        timeout_action: str = "abort",
        progress_every: int = DEFAULT_BATCH_SIZE,
    ):
        if row_errors not in ROW_ERROR_ACTIONS:
            raise ValueError(f"row_errors must be one of {ROW_ERROR_ACTIONS}, got '{row_errors}'")
        if timeout_action not in TIMEOUT_ACTIONS:
            raise ValueError(
                f"timeout_action must be one of {TIMEOUT_ACTIONS}, got '{timeout_action}'"
            )
        self.source = source
        self.writer = writer
        self.keys = tuple(keys)
        self.retry_policy = retry_policy or RetryPolicy()
        self.row_errors = row_errors
        self.timeout_action = timeout_action
        self.progress_every = progress_every

        self._rows_consumed = 0
        self._rows_skipped = 0

    def run(self) -> ExportResult:
        """Export every row; always closes the docset envelope."""
        self._rows_consumed = 0
        self._rows_skipped = 0
        start = time.monotonic()

        self.writer.start()
        try:
            result = self._export()
        except _Abort as abort:
            result = abort.result
        finally:
            self.writer.end()

        if result.ok:
            logger.debug(
                "Query export successfully. Rows: %d skipped: %d. "
                "Total processing time: %s msec",
                result.rows_consumed,
                result.rows_skipped,
                _elapsed_ms(start),
            )
        else:
            logger.error(
                "Query export failed (%s) after %d rows: %s",
                result.kind.value,
                result.rows_consumed,
                result.error,
            )
        return result

    def _export(self) -> ExportResult:
        # The schema may need the first page, e.g. from a CQL session
        schema = self._retrying(lambda: self.source.schema)
        if schema is None:
            return ExportOk(0, truncated=True)

        if len(schema) == 0:
            logger.info("Result has no columns, nothing to export")
            return ExportOk(rows_consumed=0)

        try:
            context = ExportContext.resolve(self.keys, schema)
        except ValueError as e:
            return self._error(ErrorKind.CONFIGURATION, e)

        paging_state = None
        batch_timer = time.monotonic()
        since_progress = 0
        while True:
            page = self._fetch(paging_state)
            if page is None:
                return ExportOk(self._rows_consumed, self._rows_skipped, truncated=True)

            for row in page.rows:
                self._write_row(row, context)
                since_progress += 1
                if since_progress >= self.progress_every:
                    logger.debug(
                        "Read records: %d processing time: %s msec",
                        self._rows_consumed,
                        _elapsed_ms(batch_timer),
                    )
                    since_progress = 0
                    batch_timer = time.monotonic()

            if page.is_last:
                return ExportOk(self._rows_consumed, self._rows_skipped)
            paging_state = page.paging_state

    def _fetch(self, paging_state: Any):
        return self._retrying(lambda: self.source.fetch_page(paging_state))

    def _retrying(self, call: Callable[[], Any]):
        """Run call under the retry policy; None means stop after exhausted retries."""
        try:
            return self.retry_policy.execute(call)
        except Exception as e:
            if not self.retry_policy.is_retryable(e):
                raise _Abort(self._error(ErrorKind.SOURCE, e)) from e
            if self.timeout_action == "abort":
                raise _Abort(self._error(ErrorKind.TRANSPORT_TIMEOUT, e)) from e
            logger.warning(
                "Giving up on remaining rows after %d rows, read kept timing out: %s",
                self._rows_consumed,
                e,
            )
            return None

    def _write_row(self, row, context: ExportContext) -> None:
        self._rows_consumed += 1
        try:
            fragment = encode_row(row, context)
        except Exception as e:
            if self.row_errors == "abort":
                raise _Abort(self._error(ErrorKind.ROW_ENCODING, e)) from e
            self._rows_skipped += 1
            logger.warning("Skipping row %d, encoding failed: %r", self._rows_consumed, e)
            return
        self.writer.write(fragment)

    def _error(self, kind: ErrorKind, error: BaseException) -> ExportErr:
        return ExportErr(kind=kind, rows_consumed=self._rows_consumed, error=error)

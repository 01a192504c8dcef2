"""
Retry policy for page fetches.

Read timeouts from the cluster are transient: the same page can be fetched
again with the saved paging state. RetryPolicy re-runs a callable on
retryable exceptions with a backoff between attempts and re-raises the last
exception once the attempts are exhausted.
"""

import abc
import logging
import time
from typing import Callable, Tuple, Type, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)


class BackoffStrategy(abc.ABC):
    """Compute wait duration (seconds) after the *attempt*-th failure."""

    @abc.abstractmethod
    def compute(self, attempt: int) -> float: ...


class ConstantBackoff(BackoffStrategy):
    """Fixed delay between attempts."""

    def __init__(self, delay: float = 1.0):
        self.delay = delay

    def compute(self, attempt: int) -> float:
        return self.delay


class ExponentialBackoff(BackoffStrategy):
    """Delay grows exponentially: ``base_delay * 2^(attempt - 1)``, capped."""

    def __init__(self, base_delay: float = 0.5, max_delay: float = 30.0):
        self.base_delay = base_delay
        self.max_delay = max_delay

    def compute(self, attempt: int) -> float:
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)


class RetryPolicy:
    """
    Configurable retry policy.

    Example:
        >>> policy = RetryPolicy(max_attempts=5, retryable_exceptions=(OperationTimedOut,))
        >>> page = policy.execute(lambda: source.fetch_page(state))
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff: BackoffStrategy = None,
        retryable_exceptions: Tuple[Type[BaseException], ...] = (TimeoutError,),
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.backoff = backoff or ExponentialBackoff()
        self.retryable_exceptions = retryable_exceptions
        self._sleep = sleep

    def is_retryable(self, exc: BaseException) -> bool:
        return isinstance(exc, self.retryable_exceptions)

    def execute(self, func: Callable[[], T]) -> T:
        """
        Call func, retrying on retryable exceptions.

        Raises:
            The last exception once attempts are exhausted, or the first
            non-retryable one immediately
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return func()
            except self.retryable_exceptions as exc:
                if attempt == self.max_attempts:
                    raise
                delay = self.backoff.compute(attempt)
                logger.warning(
                    "Attempt %d/%d failed with %r, retrying in %.2fs",
                    attempt,
                    self.max_attempts,
                    exc,
                    delay,
                )
                self._sleep(delay)
        raise AssertionError("unreachable")


NO_RETRY = RetryPolicy(max_attempts=1)

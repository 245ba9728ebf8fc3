"""Fixed-delay retry helper shared by the folder, upload and delete paths."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Callable,
    Generic,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from .errors import RetryExhaustedError, TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryOutcome(str, Enum):
    """Tag describing how a retried operation finished."""

    SUCCESS = "success"
    DEGRADED = "degraded"
    EXHAUSTED = "exhausted"


@dataclass
class RetryResult(Generic[T]):
    """Result of :func:`with_retry`."""

    outcome: RetryOutcome
    value: Optional[T] = None
    attempts: int = 0
    error: Optional[BaseException] = None
    fallback_error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        """Check whether the operation produced a value."""
        return self.outcome != RetryOutcome.EXHAUSTED

    def unwrap(self, message: str = "operation failed", **context: Any) -> T:
        """Return the value or raise the exhausted error with context.

        Args:
            message: Error message used when every attempt failed
            **context: Extra context (path, handle) attached to the error

        Returns:
            Value produced by the operation or its fallback

        Raises:
            RetryExhaustedError: If the outcome is exhausted
        """
        if self.outcome == RetryOutcome.EXHAUSTED:
            raise RetryExhaustedError(
                message, attempts=self.attempts, cause=str(self.error), **context
            ) from self.error
        return self.value  # type: ignore[return-value]


def _delay_for(delay: Union[float, Sequence[float]], gap: int) -> float:
    if isinstance(delay, (int, float)):
        return float(delay)
    if not delay:
        return 0.0
    return float(delay[min(gap, len(delay) - 1)])


def with_retry(
    operation: Callable[[], T],
    attempts: int = 3,
    delay: Union[float, Sequence[float]] = 0.0,
    retry_on: Tuple[Type[BaseException], ...] = (TransientError,),
    fallback: Optional[Callable[[], T]] = None,
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
    log: Optional[logging.Logger] = None,
) -> RetryResult[T]:
    """Run an operation up to ``attempts`` times with fixed delays.

    Args:
        operation: Callable performing one attempt
        attempts: Maximum number of attempts of ``operation``
        delay: Seconds to wait between attempts, either one value for every
            gap or a sequence with one value per gap
        retry_on: Exception types that count as a failed attempt; anything
            else propagates immediately
        fallback: Optional last-resort callable run once after the attempts
            are exhausted; its success yields a DEGRADED outcome
        description: Human readable name used in log messages
        sleep: Sleep function
        log: Logger to use instead of the module logger

    Returns:
        RetryResult tagged SUCCESS, DEGRADED or EXHAUSTED
    """
    log = log or logger
    last_error: Optional[BaseException] = None
    attempt = 0

    for attempt in range(1, max(attempts, 1) + 1):
        try:
            value = operation()
        except retry_on as e:
            last_error = e
            log.warning(
                "%s failed (attempt %d/%d): %s", description, attempt, attempts, e
            )
            if attempt < attempts:
                wait = _delay_for(delay, attempt - 1)
                if wait > 0:
                    sleep(wait)
            continue
        if attempt > 1:
            log.info("%s succeeded on attempt %d", description, attempt)
        return RetryResult(RetryOutcome.SUCCESS, value=value, attempts=attempt)

    if fallback is not None:
        try:
            value = fallback()
        except retry_on as e:
            log.error("%s fallback failed: %s", description, e)
            return RetryResult(
                RetryOutcome.EXHAUSTED,
                attempts=attempt,
                error=last_error,
                fallback_error=e,
            )
        log.warning("%s completed through fallback", description)
        return RetryResult(
            RetryOutcome.DEGRADED, value=value, attempts=attempt, error=last_error
        )

    log.error("%s failed after %d attempts", description, attempt)
    return RetryResult(RetryOutcome.EXHAUSTED, attempts=attempt, error=last_error)

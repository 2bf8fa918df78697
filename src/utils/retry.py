"""Per-item retry logic with structured logging using tenacity."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
    wait_none,
)

from src.utils.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")
R = TypeVar("R")

logger = get_logger(__name__)


class ItemFailedError(Exception):
    """Raised when an item's handler failed on every allowed attempt.

    Wraps the exception from the last attempt and the number of attempts made.
    """

    def __init__(self, error: BaseException, attempts: int) -> None:
        super().__init__(str(error))
        self.error = error
        self.attempts = attempts


def _log_retry(retry_state: RetryCallState) -> None:
    """Log retry attempt with structured context."""
    logger.warning(
        "retrying_bulk_item",
        attempt=retry_state.attempt_number,
        function=getattr(retry_state.fn, "__name__", "unknown"),
        error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
    )


def call_with_retry(
    func: Callable[[T], R],
    item: T,
    max_attempts: int = 1,
    delay_ms: int = 0,
) -> tuple[R, int]:
    """Call func(item), re-attempting on any Exception up to max_attempts times.

    Re-attempts are immediate unless delay_ms is set. Returns the result and
    the number of attempts it took. Raises ItemFailedError carrying the last
    attempt's exception once attempts are exhausted.
    """
    if max_attempts < 1:
        msg = f"max_attempts must be >= 1, got {max_attempts}"
        raise ValueError(msg)

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay_ms / 1000) if delay_ms else wait_none(),
        retry=retry_if_exception_type(Exception),
        before_sleep=_log_retry,
        reraise=False,
    )

    attempts = 0
    try:
        for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                result = func(item)
    except RetryError as exc:
        last = exc.last_attempt
        error = last.exception()
        if error is None:
            raise
        raise ItemFailedError(error, last.attempt_number) from error

    return result, attempts

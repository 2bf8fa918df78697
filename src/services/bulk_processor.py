"""Generic bulk operation processor with batching, bounded concurrency and retries."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from src.core.batching import count_batches, partition_batches
from src.core.result_aggregation import build_bulk_result
from src.models.bulk_operation import BulkOperationType, BulkOptions
from src.utils.progress import BulkProgressTracker
from src.utils.retry import ItemFailedError, call_with_retry

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from concurrent.futures import Future

    from src.models.bulk_operation import BulkResult
    from src.services.protocols import ItemHandler

T = TypeVar("T")
R = TypeVar("R")

logger = structlog.get_logger(__name__)

# Worker ceiling when parallel mode runs without max_concurrency.
_DEFAULT_MAX_WORKERS = 32


class _BulkRun(Generic[T, R]):
    """State for a single process() call.

    Owns its tracker, stop flags, concurrency gate and thread pool, so
    concurrent runs never share counters or limits.
    """

    def __init__(
        self,
        operation_type: BulkOperationType,
        items: Sequence[T],
        handler: ItemHandler[T, R],
        options: BulkOptions,
    ) -> None:
        self.operation_type = operation_type
        self.items = items
        self.handler = handler
        self.options = options
        self.tracker = BulkProgressTracker(
            total=len(items),
            operation_type=operation_type,
            total_batches=count_batches(len(items), options.batch_size),
            on_progress=options.on_progress,
        )
        self.aborted = False
        self.cancelled = False
        self._abort_event = threading.Event()

    def execute(self) -> BulkResult:
        batches = partition_batches(self.items, self.options.batch_size)
        if not batches:
            return build_bulk_result(self.tracker)

        logger.info(
            "bulk_operation_started",
            operation_type=str(self.operation_type),
            total=len(self.items),
            batches=len(batches),
            parallel=self.options.parallel,
            max_concurrency=self.options.max_concurrency,
        )

        if self.options.parallel:
            limit = self.options.max_concurrency or min(
                max(len(batch) for batch in batches), _DEFAULT_MAX_WORKERS
            )
            gate = threading.BoundedSemaphore(limit)
            with ThreadPoolExecutor(max_workers=limit) as executor:
                self._run_batches(batches, lambda batch: self._run_parallel(batch, executor, gate))
        else:
            self._run_batches(batches, self._run_sequential)

        result = build_bulk_result(self.tracker, aborted=self.aborted, cancelled=self.cancelled)
        logger.info(
            "bulk_operation_completed",
            operation_type=str(self.operation_type),
            success=result.success,
            processed=result.total_processed,
            successful=result.successful_count,
            failed=result.failed_count,
            success_rate=result.success_rate,
            processing_time_ms=result.processing_time_ms,
        )
        return result

    def _run_batches(
        self,
        batches: list[list[T]],
        run_batch: Callable[[list[T]], None],
    ) -> None:
        for number, batch in enumerate(batches, start=1):
            if self._should_stop():
                return
            self.tracker.start_batch(number)
            logger.debug(
                "bulk_batch_started",
                operation_type=str(self.operation_type),
                batch_number=number,
                batch_size=len(batch),
                total_batches=len(batches),
            )
            run_batch(batch)

            is_last = number == len(batches)
            if not is_last and self.options.batch_delay_ms > 0 and not self._should_stop():
                time.sleep(self.options.batch_delay_ms / 1000)

    def _run_sequential(self, batch: list[T]) -> None:
        for item in batch:
            if self._should_stop():
                return
            self._run_item(item)

    def _run_parallel(
        self,
        batch: list[T],
        executor: ThreadPoolExecutor,
        gate: threading.BoundedSemaphore,
    ) -> None:
        futures: list[Future[None]] = []
        for item in batch:
            gate.acquire()
            if self._should_stop():
                gate.release()
                break
            try:
                future = executor.submit(self._run_item, item)
            except RuntimeError:
                gate.release()
                raise
            future.add_done_callback(lambda _future: gate.release())
            futures.append(future)

        wait(futures)
        for future in futures:
            future.result()

    def _run_item(self, item: T) -> None:
        try:
            result, attempts = call_with_retry(
                self.handler,
                item,
                max_attempts=self.options.max_attempts,
                delay_ms=self.options.retry_delay_ms,
            )
        except ItemFailedError as exc:
            logger.warning(
                "bulk_item_failed",
                operation_type=str(self.operation_type),
                item=str(item)[:100],
                error=str(exc.error),
                attempts=exc.attempts,
            )
            self.tracker.record_failure(item, exc.error, exc.attempts)
            if not self.options.continue_on_error:
                self._abort()
            return

        self.tracker.record_success(item, result, attempts)

    def _abort(self) -> None:
        if not self._abort_event.is_set():
            self._abort_event.set()
            self.aborted = True
            logger.warning(
                "bulk_operation_aborted",
                operation_type=str(self.operation_type),
                processed=self.tracker.processed,
                total=self.tracker.total,
            )

    def _should_stop(self) -> bool:
        """Whether new handler invocations must not be issued."""
        if self._abort_event.is_set():
            return True
        cancel_event = self.options.cancel_event
        if cancel_event is not None and cancel_event.is_set():
            if not self.cancelled:
                self.cancelled = True
                logger.info(
                    "bulk_operation_cancelled",
                    operation_type=str(self.operation_type),
                    processed=self.tracker.processed,
                    total=self.tracker.total,
                )
            return True
        return False


class BulkOperationsProcessor:
    """Runs a handler across many items with batching, concurrency and retry policy."""

    @staticmethod
    def process(
        operation_type: BulkOperationType,
        items: Sequence[T],
        handler: ItemHandler[T, R],
        options: BulkOptions | None = None,
        **overrides: Any,
    ) -> BulkResult:
        """Execute handler for every item and return the aggregate result.

        Item failures never raise; they land in the result's failed_items.
        Invalid options raise ValueError before the handler is called.
        Keyword overrides are BulkOptions fields applied on top of options.
        """
        if options is None:
            options = BulkOptions(**overrides)
        elif overrides:
            options = BulkOptions(**{**dict(options), **overrides})

        return _BulkRun(operation_type, items, handler, options).execute()


def bulk_create(
    items: Sequence[T],
    handler: ItemHandler[T, R],
    options: BulkOptions | None = None,
    **overrides: Any,
) -> BulkResult:
    """Run a bulk create."""
    return BulkOperationsProcessor.process(
        BulkOperationType.CREATE, items, handler, options, **overrides
    )


def bulk_update(
    items: Sequence[T],
    handler: ItemHandler[T, R],
    options: BulkOptions | None = None,
    **overrides: Any,
) -> BulkResult:
    """Run a bulk update."""
    return BulkOperationsProcessor.process(
        BulkOperationType.UPDATE, items, handler, options, **overrides
    )


def bulk_delete(
    items: Sequence[T],
    handler: ItemHandler[T, R],
    options: BulkOptions | None = None,
    **overrides: Any,
) -> BulkResult:
    """Run a bulk delete."""
    return BulkOperationsProcessor.process(
        BulkOperationType.DELETE, items, handler, options, **overrides
    )


def bulk_upsert(
    items: Sequence[T],
    handler: ItemHandler[T, R],
    options: BulkOptions | None = None,
    **overrides: Any,
) -> BulkResult:
    """Run a bulk upsert."""
    return BulkOperationsProcessor.process(
        BulkOperationType.UPSERT, items, handler, options, **overrides
    )

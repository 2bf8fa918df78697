"""Progress tracking utilities for bulk operations."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from src.models.bulk_operation import (
    BulkOperationType,
    FailedItem,
    ProgressSnapshot,
    SuccessfulItem,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class BulkProgressTracker:
    """Track per-item outcomes and progress of one bulk run.

    Safe to update from worker threads. The on_progress callback is invoked
    while the tracker lock is held, so invocations never overlap and
    processed counts reach the callback in increasing order.
    """

    total: int
    operation_type: BulkOperationType = BulkOperationType.CREATE
    total_batches: int = 0
    on_progress: Callable[[ProgressSnapshot], Any] | None = None
    log_every: int = 10
    current_batch: int | None = None
    successful_items: list[SuccessfulItem] = field(default_factory=list)
    failed_items: list[FailedItem] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def processed(self) -> int:
        """Items whose final outcome has been recorded."""
        return len(self.successful_items) + len(self.failed_items)

    @property
    def successful(self) -> int:
        return len(self.successful_items)

    @property
    def failed(self) -> int:
        return len(self.failed_items)

    def start_batch(self, batch_number: int) -> None:
        """Mark the 1-based batch number that subsequent items belong to."""
        with self._lock:
            self.current_batch = batch_number

    def record_success(self, item: Any, result: Any, attempts: int = 1) -> None:
        """Record a successful item."""
        with self._lock:
            self.successful_items.append(
                SuccessfulItem(item=item, result=result, attempts=attempts)
            )
            self._item_settled()

    def record_failure(self, item: Any, error: BaseException, attempts: int = 1) -> None:
        """Record a permanently failed item, keeping the error text verbatim."""
        with self._lock:
            self.failed_items.append(
                FailedItem(
                    item=item,
                    error=str(error),
                    error_type=type(error).__name__,
                    attempts=attempts,
                )
            )
            self._item_settled()

    def _item_settled(self) -> None:
        self.log_progress(every_n=self.log_every)
        if self.on_progress is None:
            return
        try:
            self.on_progress(self.snapshot())
        except Exception as exc:
            logger.warning(
                "progress_callback_failed",
                operation_type=str(self.operation_type),
                processed=self.processed,
                error=str(exc),
            )

    def snapshot(self) -> ProgressSnapshot:
        """Build a fresh progress snapshot from the current counters."""
        return ProgressSnapshot(
            operation_type=self.operation_type,
            processed=self.processed,
            total=self.total,
            percentage=self.progress_percentage,
            current_batch=self.current_batch,
            total_batches=self.total_batches,
            successful=self.successful,
            failed=self.failed,
        )

    @property
    def elapsed_seconds(self) -> float:
        """Time elapsed since start."""
        return time.monotonic() - self.start_time

    @property
    def elapsed_ms(self) -> int:
        """Time elapsed since start, in whole milliseconds."""
        return round(self.elapsed_seconds * 1000)

    @property
    def progress_percentage(self) -> float:
        """Percentage of total items processed."""
        if self.total == 0:
            return 100.0
        return (self.processed / self.total) * 100.0

    def log_progress(self, every_n: int = 10) -> None:
        """Log progress every N items."""
        if self.processed % every_n == 0 or self.processed == self.total:
            logger.info(
                "bulk_progress",
                operation_type=str(self.operation_type),
                processed=self.processed,
                total=self.total,
                successful=self.successful,
                failed=self.failed,
                batch=self.current_batch,
                percentage=f"{self.progress_percentage:.1f}%",
                elapsed=f"{self.elapsed_seconds:.1f}s",
            )

"""Models for bulk operation options, progress and results."""

from __future__ import annotations

import threading
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, field_validator

if TYPE_CHECKING:
    from src.models.config import Config


class BulkOperationType(StrEnum):
    """Label for the kind of bulk operation being run."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    UPSERT = "upsert"


class SuccessfulItem(BaseModel):
    """An item whose handler returned normally."""

    model_config = ConfigDict(frozen=True)

    item: Any
    result: Any = None
    attempts: int = 1


class FailedItem(BaseModel):
    """An item whose handler raised on its final allowed attempt."""

    model_config = ConfigDict(frozen=True)

    item: Any
    error: str
    error_type: str = "Exception"
    attempts: int = 1


class ProgressSnapshot(BaseModel):
    """Point-in-time progress of a bulk run, passed to on_progress."""

    model_config = ConfigDict(frozen=True)

    operation_type: BulkOperationType
    processed: int
    total: int
    percentage: float
    current_batch: int | None = None
    total_batches: int | None = None
    successful: int = 0
    failed: int = 0


class BulkResult(BaseModel):
    """Aggregate outcome of a bulk run."""

    operation_type: BulkOperationType
    success: bool
    total_processed: int
    successful_items: list[SuccessfulItem] = []
    failed_items: list[FailedItem] = []
    success_rate: int = 0
    processing_time_ms: int = 0
    aborted: bool = False
    cancelled: bool = False

    @property
    def successful_count(self) -> int:
        """Number of items that succeeded."""
        return len(self.successful_items)

    @property
    def failed_count(self) -> int:
        """Number of items that failed permanently."""
        return len(self.failed_items)

    @property
    def errors(self) -> list[str]:
        """Error messages of failed items, in recorded order."""
        return [failed.error for failed in self.failed_items]


class BulkOptions(BaseModel):
    """Batching, concurrency, retry and progress settings for one run."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    batch_size: int | None = None
    batch_delay_ms: int = 0
    parallel: bool = False
    max_concurrency: int | None = None
    continue_on_error: bool = True
    retry_failed: bool = False
    max_retries: int = 0
    retry_delay_ms: int = 0
    on_progress: Callable[[ProgressSnapshot], Any] | None = None
    cancel_event: threading.Event | None = None

    @field_validator("batch_size", "max_concurrency")
    @classmethod
    def validate_positive(cls, value: int | None) -> int | None:
        """Sizes, when given, must be at least 1."""
        if value is not None and value < 1:
            msg = f"must be >= 1, got {value}"
            raise ValueError(msg)
        return value

    @field_validator("batch_delay_ms", "max_retries", "retry_delay_ms")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        """Delays and retry counts must not be negative."""
        if value < 0:
            msg = f"must be >= 0, got {value}"
            raise ValueError(msg)
        return value

    @property
    def max_attempts(self) -> int:
        """Total handler attempts allowed per item."""
        return self.max_retries + 1 if self.retry_failed else 1

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> BulkOptions:
        """Build options from application settings, then apply overrides."""
        values: dict[str, Any] = {
            "batch_size": config.bulk_batch_size,
            "batch_delay_ms": config.bulk_batch_delay_ms,
            "max_concurrency": config.bulk_max_concurrency,
            "max_retries": config.bulk_max_retries,
            "retry_delay_ms": config.bulk_retry_delay_ms,
        }
        values.update(overrides)
        return cls(**values)

"""Pydantic data models for the bulk operations processor."""

from src.models.bulk_operation import (
    BulkOperationType,
    BulkOptions,
    BulkResult,
    FailedItem,
    ProgressSnapshot,
    SuccessfulItem,
)
from src.models.config import Config

__all__ = [
    "BulkOperationType",
    "BulkOptions",
    "BulkResult",
    "Config",
    "FailedItem",
    "ProgressSnapshot",
    "SuccessfulItem",
]

"""Core -- pure functions for batch partitioning and result aggregation."""

from __future__ import annotations

from src.core.batching import count_batches, partition_batches
from src.core.result_aggregation import (
    build_bulk_result,
    calculate_success_rate,
    format_bulk_summary,
)

__all__ = [
    "build_bulk_result",
    "calculate_success_rate",
    "count_batches",
    "format_bulk_summary",
    "partition_batches",
]

"""Batch partitioning for bulk operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence

T = TypeVar("T")


def partition_batches(items: Sequence[T], batch_size: int | None = None) -> list[list[T]]:
    """Split items into contiguous, order-preserving batches.

    A batch_size of None, or one larger than the item count, yields a single
    batch. Empty input yields no batches.
    """
    if batch_size is not None and batch_size < 1:
        msg = f"batch_size must be >= 1, got {batch_size}"
        raise ValueError(msg)

    if not items:
        return []

    if batch_size is None or batch_size >= len(items):
        return [list(items)]

    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]


def count_batches(total: int, batch_size: int | None = None) -> int:
    """Number of batches partition_batches produces for total items."""
    if total == 0:
        return 0
    if batch_size is None or batch_size >= total:
        return 1
    return -(-total // batch_size)

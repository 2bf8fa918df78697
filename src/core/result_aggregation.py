"""Bulk result aggregation functions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.models.bulk_operation import BulkResult

if TYPE_CHECKING:
    from src.utils.progress import BulkProgressTracker


def calculate_success_rate(successful: int, total: int) -> int:
    """Percentage of successful items, rounded half up to an integer. Zero when total is 0."""
    if total <= 0:
        return 0
    return (successful * 200 + total) // (total * 2)


def build_bulk_result(
    tracker: BulkProgressTracker,
    aborted: bool = False,
    cancelled: bool = False,
) -> BulkResult:
    """Freeze a tracker's recorded outcomes into a BulkResult."""
    successful_items = list(tracker.successful_items)
    failed_items = list(tracker.failed_items)
    total_processed = len(successful_items) + len(failed_items)

    return BulkResult(
        operation_type=tracker.operation_type,
        success=not failed_items and not aborted and not cancelled,
        total_processed=total_processed,
        successful_items=successful_items,
        failed_items=failed_items,
        success_rate=calculate_success_rate(len(successful_items), total_processed),
        processing_time_ms=tracker.elapsed_ms,
        aborted=aborted,
        cancelled=cancelled,
    )


def format_bulk_summary(result: BulkResult) -> str:
    """Format a bulk result as a human-readable summary string."""
    status = "SUCCESS" if result.success else "FAILED"
    lines = [
        f"[{status}] Bulk {result.operation_type}: {result.total_processed} processed",
        f"  Successful: {result.successful_count}",
        f"  Failed: {result.failed_count}",
        f"  Success rate: {result.success_rate}%",
        f"  Duration: {result.processing_time_ms}ms",
    ]
    if result.aborted:
        lines.append("  Stopped early after a failure")
    if result.cancelled:
        lines.append("  Cancelled before all items were attempted")

    errors = result.errors
    if errors:
        lines.append(f"  Errors ({len(errors)}):")
        for error in errors[:10]:
            lines.append(f"    - {error}")
        if len(errors) > 10:
            lines.append(f"    ... and {len(errors) - 10} more")

    return "\n".join(lines)

"""Unit tests for the pure core functions: batching and result aggregation."""

from __future__ import annotations

import pytest

from src.core.batching import count_batches, partition_batches
from src.core.result_aggregation import (
    build_bulk_result,
    calculate_success_rate,
    format_bulk_summary,
)
from src.models.bulk_operation import (
    BulkOperationType,
    BulkResult,
    FailedItem,
    SuccessfulItem,
)
from src.utils.progress import BulkProgressTracker

# ──────────────────────────────────────────────────────────────────────
# Module 1: core/batching.py
# ──────────────────────────────────────────────────────────────────────


class TestPartitionBatches:
    """Tests for partition_batches."""

    def test_even_split(self) -> None:
        batches = partition_batches(list(range(50)), 10)
        assert len(batches) == 5
        assert all(len(batch) == 10 for batch in batches)

    def test_last_batch_shorter(self) -> None:
        batches = partition_batches(list(range(7)), 3)
        assert batches == [[0, 1, 2], [3, 4, 5], [6]]

    def test_preserves_order(self) -> None:
        items = ["a", "b", "c", "d", "e"]
        batches = partition_batches(items, 2)
        assert [item for batch in batches for item in batch] == items

    def test_none_batch_size_single_batch(self) -> None:
        assert partition_batches([1, 2, 3]) == [[1, 2, 3]]

    def test_batch_size_larger_than_items(self) -> None:
        assert partition_batches([1, 2, 3], 1000) == [[1, 2, 3]]

    def test_batch_size_equal_to_items(self) -> None:
        assert partition_batches([1, 2, 3], 3) == [[1, 2, 3]]

    def test_empty_input(self) -> None:
        assert partition_batches([], 10) == []

    def test_single_item(self) -> None:
        assert partition_batches(["only"], 25) == [["only"]]

    def test_zero_batch_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="batch_size"):
            partition_batches([1, 2], 0)

    def test_negative_batch_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="batch_size"):
            partition_batches([1, 2], -5)

    def test_does_not_mutate_input(self) -> None:
        items = [1, 2, 3, 4]
        partition_batches(items, 2)[0].append(99)
        assert items == [1, 2, 3, 4]


class TestCountBatches:
    """Tests for count_batches."""

    def test_zero_items(self) -> None:
        assert count_batches(0, 10) == 0

    def test_rounds_up(self) -> None:
        assert count_batches(21, 10) == 3

    def test_exact_multiple(self) -> None:
        assert count_batches(20, 10) == 2

    def test_unset_batch_size(self) -> None:
        assert count_batches(42) == 1

    def test_matches_partition(self) -> None:
        for total in (1, 9, 10, 11, 99):
            assert count_batches(total, 10) == len(partition_batches(list(range(total)), 10))


# ──────────────────────────────────────────────────────────────────────
# Module 2: core/result_aggregation.py
# ──────────────────────────────────────────────────────────────────────


class TestCalculateSuccessRate:
    """Tests for calculate_success_rate."""

    def test_all_successful(self) -> None:
        assert calculate_success_rate(50, 50) == 100

    def test_ninety_percent(self) -> None:
        assert calculate_success_rate(45, 50) == 90

    def test_seventy_percent(self) -> None:
        assert calculate_success_rate(7, 10) == 70

    def test_zero_total(self) -> None:
        assert calculate_success_rate(0, 0) == 0

    def test_rounds_to_integer(self) -> None:
        assert calculate_success_rate(2, 3) == 67
        assert isinstance(calculate_success_rate(1, 3), int)

    def test_none_successful(self) -> None:
        assert calculate_success_rate(0, 4) == 0

    @pytest.mark.parametrize(
        ("successful", "total", "expected"),
        [(1, 8, 13), (3, 8, 38), (5, 8, 63), (1, 200, 1), (1, 2, 50)],
    )
    def test_halves_round_up(self, successful: int, total: int, expected: int) -> None:
        assert calculate_success_rate(successful, total) == expected


class TestBuildBulkResult:
    """Tests for build_bulk_result."""

    def test_empty_tracker(self) -> None:
        tracker = BulkProgressTracker(total=0)
        result = build_bulk_result(tracker)
        assert result.total_processed == 0
        assert result.success_rate == 0
        assert result.success is True

    def test_mixed_outcomes(self) -> None:
        tracker = BulkProgressTracker(total=3, operation_type=BulkOperationType.UPDATE)
        tracker.record_success({"id": 1}, "ok")
        tracker.record_success({"id": 2}, "ok")
        tracker.record_failure({"id": 3}, RuntimeError("boom"))
        result = build_bulk_result(tracker)
        assert result.operation_type == BulkOperationType.UPDATE
        assert result.total_processed == 3
        assert result.successful_count == 2
        assert result.failed_count == 1
        assert result.success_rate == 67
        assert result.success is False

    def test_aborted_is_not_success(self) -> None:
        tracker = BulkProgressTracker(total=2)
        tracker.record_success(1, 1)
        result = build_bulk_result(tracker, aborted=True)
        assert result.success is False
        assert result.aborted is True

    def test_cancelled_is_not_success(self) -> None:
        tracker = BulkProgressTracker(total=2)
        tracker.record_success(1, 1)
        result = build_bulk_result(tracker, cancelled=True)
        assert result.success is False
        assert result.cancelled is True

    def test_result_is_a_copy(self) -> None:
        tracker = BulkProgressTracker(total=2)
        tracker.record_success(1, 1)
        result = build_bulk_result(tracker)
        tracker.record_success(2, 2)
        assert result.successful_count == 1


class TestFormatBulkSummary:
    """Tests for format_bulk_summary."""

    def _result(self, failures: int, **kwargs: object) -> BulkResult:
        values: dict[str, object] = {
            "operation_type": BulkOperationType.CREATE,
            "success": failures == 0,
            "total_processed": 5 + failures,
            "successful_items": [SuccessfulItem(item=i) for i in range(5)],
            "failed_items": [
                FailedItem(item=i, error=f"err_{i}") for i in range(failures)
            ],
            "success_rate": calculate_success_rate(5, 5 + failures),
            "processing_time_ms": 12,
        }
        values.update(kwargs)
        return BulkResult(**values)  # type: ignore[arg-type]

    def test_success_header(self) -> None:
        summary = format_bulk_summary(self._result(0))
        assert summary.startswith("[SUCCESS] Bulk create: 5 processed")
        assert "Success rate: 100%" in summary
        assert "Errors" not in summary

    def test_lists_errors(self) -> None:
        summary = format_bulk_summary(self._result(2))
        assert summary.startswith("[FAILED]")
        assert "Errors (2):" in summary
        assert "    - err_0" in summary
        assert "    - err_1" in summary

    def test_truncates_after_ten_errors(self) -> None:
        summary = format_bulk_summary(self._result(13))
        assert "    - err_9" in summary
        assert "err_10" not in summary
        assert "... and 3 more" in summary

    def test_mentions_abort(self) -> None:
        summary = format_bulk_summary(self._result(1, aborted=True))
        assert "Stopped early" in summary

    def test_mentions_cancel(self) -> None:
        summary = format_bulk_summary(self._result(0, success=False, cancelled=True))
        assert "Cancelled" in summary

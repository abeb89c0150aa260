"""Unit tests for the shared error budget tracker."""

import threading
from datetime import UTC, datetime

import pytest

from esigate.fetch.budget import ErrorBudgetTracker
from esigate.fetch.errors import ErrorBudgetExhaustedError


def budget_headers(
    remain: str, reset: str = "1718280060", window: str = "60"
) -> dict[str, str]:
    """Build X-ESI-Error-Limit headers."""
    return {
        "X-ESI-Error-Limit-Remain": remain,
        "X-ESI-Error-Limit-Reset": reset,
        "X-ESI-Error-Limit-Window": window,
    }


class TestUpdateFromHeaders:
    """Tests for budget updates."""

    def test_initial_snapshot(self) -> None:
        """Test the unknown budget before any response."""
        budget = ErrorBudgetTracker().snapshot()

        assert budget.remain == 0
        assert budget.reset is None
        assert budget.window == 0

    def test_all_headers(self) -> None:
        """Test that remain, reset and window are parsed."""
        tracker = ErrorBudgetTracker()

        updated = tracker.update_from_headers(budget_headers("87"))

        assert updated is not None
        assert updated.remain == 87
        assert updated.reset == datetime.fromtimestamp(1718280060, UTC)
        assert updated.window == 60
        assert tracker.snapshot() == updated

    def test_missing_remain_returns_none(self) -> None:
        """Test that only the remain header marks an update as reportable."""
        tracker = ErrorBudgetTracker()

        assert tracker.update_from_headers({"X-ESI-Error-Limit-Window": "60"}) is None
        assert tracker.snapshot().window == 60
        assert tracker.snapshot().remain == 0

    def test_unparseable_values_ignored(self) -> None:
        """Test that garbage does not overwrite the budget."""
        tracker = ErrorBudgetTracker()
        tracker.update_from_headers(budget_headers("90"))

        assert tracker.update_from_headers(budget_headers("lots")) is None
        assert tracker.snapshot().remain == 90

    def test_concurrent_updates(self) -> None:
        """Test that concurrent updates leave a consistent budget."""
        tracker = ErrorBudgetTracker()

        def worker(value: int) -> None:
            for _ in range(50):
                tracker.update_from_headers(budget_headers(str(value)))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(1, 9)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert tracker.snapshot().remain in range(1, 9)


class TestCheck:
    """Tests for the advisory gate."""

    def test_unknown_budget_passes(self) -> None:
        """Test that remain=0 (never reported) does not block."""
        ErrorBudgetTracker().check()

    @pytest.mark.parametrize("remain", ["10", "42", "100"])
    def test_healthy_budget_passes(self, remain: str) -> None:
        """Test that budgets at or above the gate pass."""
        tracker = ErrorBudgetTracker()
        tracker.update_from_headers(budget_headers(remain))

        tracker.check()

    @pytest.mark.parametrize("remain", ["1", "5", "9"])
    def test_low_budget_raises(self, remain: str) -> None:
        """Test that 0 < remain < 10 trips the gate."""
        tracker = ErrorBudgetTracker()
        tracker.update_from_headers(budget_headers(remain))

        with pytest.raises(ErrorBudgetExhaustedError) as exc_info:
            tracker.check()

        assert exc_info.value.remain == int(remain)

    def test_custom_gate_threshold(self) -> None:
        """Test a configured gate threshold."""
        tracker = ErrorBudgetTracker(gate_threshold=20)
        tracker.update_from_headers(budget_headers("15"))

        with pytest.raises(ErrorBudgetExhaustedError):
            tracker.check()

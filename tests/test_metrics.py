"""Tests for tradejournal.analytics.metrics — the setup metrics snapshot."""

from datetime import timedelta

import pytest

from tradejournal.analytics.metrics import (
    PROFIT_FACTOR_CAP,
    compute_consistency_metrics,
    compute_core_metrics,
    compute_execution_quality_metrics,
    compute_metrics_snapshot,
)
from tests.conftest import BASE_TIME, make_entry


def _series(pnls, step=timedelta(hours=1)):
    return [make_entry(pnl=p, entry_date=BASE_TIME + step * i) for i, p in enumerate(pnls)]


# ── Core metrics ───────────────────────────────────────────────────

class TestCoreMetrics:
    def test_mixed(self, mixed_entries):
        core = compute_core_metrics(mixed_entries)
        assert core.total_trades == 4
        assert core.win_rate == 0.5
        assert core.avg_win == 150.0
        assert core.avg_loss == 50.0
        assert core.avg_rrr == 3.0
        assert core.profit_factor == 3.0
        assert core.expectancy == 50.0
        assert core.total_pnl == 200.0

    def test_no_trades(self):
        core = compute_core_metrics([])
        assert core.total_trades == 0
        assert core.win_rate == 0.0
        assert core.profit_factor == 0.0
        assert core.expectancy == 0.0

    def test_all_wins(self):
        core = compute_core_metrics(_series([10, 20]))
        assert core.win_rate == 1.0
        assert core.avg_loss == 0.0
        assert core.avg_rrr == 0.0
        assert core.profit_factor == PROFIT_FACTOR_CAP

    def test_all_losses(self):
        core = compute_core_metrics(_series([-10, -30]))
        assert core.win_rate == 0.0
        assert core.avg_loss == 20.0
        assert core.profit_factor == 0.0
        assert core.expectancy == -20.0

    def test_breakeven_only(self):
        core = compute_core_metrics(_series([0, 0]))
        assert core.win_rate == 0.0
        assert core.profit_factor == 0.0
        assert core.total_pnl == 0.0


# ── Consistency metrics ────────────────────────────────────────────

class TestConsistencyMetrics:
    def test_streaks(self):
        metrics = compute_consistency_metrics(_series([10, 10, -5, 10, 10, 10, -5]))
        assert metrics.best_streak == 3
        assert metrics.worst_streak == 1

    def test_streaks_follow_entry_date(self):
        entries = _series([10, -5, -5, 10])
        # Same trades, shuffled: sorted back into entry-date order
        metrics = compute_consistency_metrics([entries[3], entries[1], entries[0], entries[2]])
        assert metrics.best_streak == 1
        assert metrics.worst_streak == 2

    def test_zero_breaks_streaks(self):
        metrics = compute_consistency_metrics(_series([5, 5, 0, 5, -1, 0, -1]))
        assert metrics.best_streak == 2
        assert metrics.worst_streak == 1

    def test_std_deviation(self, mixed_entries):
        metrics = compute_consistency_metrics(mixed_entries)
        assert metrics.std_deviation == pytest.approx(106.066, rel=1e-4)
        assert metrics.hit_rate == 0.5

    def test_single_trade(self):
        metrics = compute_consistency_metrics(_series([25]))
        assert metrics.std_deviation == 0.0
        assert metrics.best_streak == 1

    def test_no_trades(self):
        metrics = compute_consistency_metrics([])
        assert metrics.best_streak == 0
        assert metrics.worst_streak == 0
        assert metrics.std_deviation == 0.0
        assert metrics.hit_rate == 0.0


# ── Execution quality metrics ──────────────────────────────────────

class TestExecutionQualityMetrics:
    def test_avg_hold_time(self):
        entries = [
            make_entry(hold_time=3600),
            make_entry(hold_time=10800),
            make_entry(hold_time=7200),
        ]
        assert compute_execution_quality_metrics(entries).avg_hold_time == 7200.0

    def test_time_of_day(self, mixed_entries):
        metrics = compute_execution_quality_metrics(mixed_entries)
        # 10:00 averages +150, 11:00 and 15:00 tie at -50
        assert metrics.best_time_of_day == 10
        assert metrics.worst_time_of_day == 11

    def test_no_trades(self):
        metrics = compute_execution_quality_metrics([])
        assert metrics.avg_hold_time == 0.0
        assert metrics.best_time_of_day == 0
        assert metrics.worst_time_of_day == 0


class TestMetricsSnapshot:
    def test_document_shape(self, mixed_entries):
        doc = compute_metrics_snapshot(mixed_entries).to_document()
        assert set(doc) == {"coreMetrics", "consistencyMetrics", "executionQualityMetrics"}
        assert doc["coreMetrics"]["avgRRR"] == 3.0
        assert doc["coreMetrics"]["totalPnl"] == 200.0
        assert doc["consistencyMetrics"]["bestStreak"] == 1
        assert doc["executionQualityMetrics"]["avgHoldTime"] == 7200.0

    def test_deterministic(self, mixed_entries):
        assert compute_metrics_snapshot(mixed_entries) == compute_metrics_snapshot(list(mixed_entries))

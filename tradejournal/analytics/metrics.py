"""Setup metrics computation — win rate, streaks, expectancy, profit factor, etc."""

import math
from collections import defaultdict
from datetime import datetime, timezone

from tradejournal.analytics.models import (
    ConsistencyMetrics,
    CoreMetrics,
    ExecutionQualityMetrics,
    MetricsSnapshot,
)
from tradejournal.models.journal import JournalEntry

# Reported instead of infinity when there is profit but no losing trade
PROFIT_FACTOR_CAP = 999.0


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _by_entry_date(entries: list[JournalEntry]) -> list[JournalEntry]:
    """Entries ordered by entry date ascending; equal dates keep input order."""
    return sorted(entries, key=lambda e: _as_utc(e.trade.entry_date))


def _compute_streaks(pnls: list[float]) -> tuple[int, int]:
    """Longest run of wins and of losses. A pnl of exactly 0 breaks both."""
    best = worst = 0
    cur_wins = cur_losses = 0
    for pnl in pnls:
        if pnl > 0:
            cur_wins += 1
            cur_losses = 0
            best = max(best, cur_wins)
        elif pnl < 0:
            cur_losses += 1
            cur_wins = 0
            worst = max(worst, cur_losses)
        else:
            cur_wins = 0
            cur_losses = 0
    return best, worst


def _population_std(values: list[float]) -> float:
    n = len(values)
    if n < 2:
        return 0.0
    mean = sum(values) / n
    return math.sqrt(sum((v - mean) ** 2 for v in values) / n)


def _hourly_avg_pnl(entries: list[JournalEntry]) -> dict[int, float]:
    """Average pnl per UTC entry hour, keyed in ascending hour order."""
    buckets: dict[int, list[float]] = defaultdict(list)
    for e in entries:
        buckets[_as_utc(e.trade.entry_date).hour].append(e.pnl)
    return {hour: sum(p) / len(p) for hour, p in sorted(buckets.items())}


def compute_core_metrics(entries: list[JournalEntry]) -> CoreMetrics:
    if not entries:
        return CoreMetrics()

    pnls = [e.pnl for e in entries]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    gross_profit = sum(wins)
    gross_loss = abs(sum(losses))

    win_rate = len(wins) / len(pnls)
    avg_win = gross_profit / len(wins) if wins else 0.0
    avg_loss = gross_loss / len(losses) if losses else 0.0

    avg_rrr = avg_win / avg_loss if avg_loss > 0 else 0.0
    profit_factor = gross_profit / gross_loss if gross_loss > 0 else (PROFIT_FACTOR_CAP if gross_profit > 0 else 0.0)
    expectancy = win_rate * avg_win - (1 - win_rate) * avg_loss

    return CoreMetrics(
        total_trades=len(pnls),
        win_rate=win_rate,
        avg_win=avg_win,
        avg_loss=avg_loss,
        avg_rrr=avg_rrr,
        profit_factor=profit_factor,
        expectancy=expectancy,
        total_pnl=sum(pnls),
    )


def compute_consistency_metrics(entries: list[JournalEntry]) -> ConsistencyMetrics:
    if not entries:
        return ConsistencyMetrics()

    pnls = [e.pnl for e in _by_entry_date(entries)]
    best, worst = _compute_streaks(pnls)
    # No minimum-size rule distinguishes hit rate from win rate
    hit_rate = len([p for p in pnls if p > 0]) / len(pnls)

    return ConsistencyMetrics(
        best_streak=best,
        worst_streak=worst,
        std_deviation=_population_std(pnls),
        hit_rate=hit_rate,
    )


def compute_execution_quality_metrics(entries: list[JournalEntry]) -> ExecutionQualityMetrics:
    if not entries:
        return ExecutionQualityMetrics()

    hold_times = [e.results.hold_time for e in entries if e.results.hold_time is not None]
    avg_hold = sum(hold_times) / len(hold_times) if hold_times else 0.0

    # max()/min() return the first extreme, and hours iterate ascending,
    # so ties go to the earliest hour
    hourly = _hourly_avg_pnl(entries)
    best_hour = max(hourly, key=hourly.get)
    worst_hour = min(hourly, key=hourly.get)

    return ExecutionQualityMetrics(
        avg_hold_time=avg_hold,
        best_time_of_day=best_hour,
        worst_time_of_day=worst_hour,
    )


def compute_metrics_snapshot(entries: list[JournalEntry]) -> MetricsSnapshot:
    """All three metric groups over one setup's closed trades."""
    return MetricsSnapshot(
        core_metrics=compute_core_metrics(entries),
        consistency_metrics=compute_consistency_metrics(entries),
        execution_quality_metrics=compute_execution_quality_metrics(entries),
    )

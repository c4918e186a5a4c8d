"""Metrics snapshot models, serialized with the camelCase response keys."""

from pydantic import Field

from tradejournal.models.base import DocumentModel


class CoreMetrics(DocumentModel):
    total_trades: int = 0
    win_rate: float = 0.0  # fraction of trades with pnl > 0
    avg_win: float = 0.0
    avg_loss: float = 0.0  # positive magnitude
    avg_rrr: float = Field(default=0.0, alias="avgRRR")
    profit_factor: float = 0.0
    expectancy: float = 0.0
    total_pnl: float = 0.0


class ConsistencyMetrics(DocumentModel):
    best_streak: int = 0
    worst_streak: int = 0
    std_deviation: float = 0.0  # population std dev of per-trade pnl
    hit_rate: float = 0.0


class ExecutionQualityMetrics(DocumentModel):
    avg_hold_time: float = 0.0  # seconds
    # UTC hour 0-23; 0 with no trades (check totalTrades to tell it from midnight)
    best_time_of_day: int = 0
    worst_time_of_day: int = 0


class MetricsSnapshot(DocumentModel):
    core_metrics: CoreMetrics = CoreMetrics()
    consistency_metrics: ConsistencyMetrics = ConsistencyMetrics()
    execution_quality_metrics: ExecutionQualityMetrics = ExecutionQualityMetrics()

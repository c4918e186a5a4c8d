from tradejournal.analytics.metrics import (
    compute_consistency_metrics,
    compute_core_metrics,
    compute_execution_quality_metrics,
    compute_metrics_snapshot,
)
from tradejournal.analytics.models import (
    ConsistencyMetrics,
    CoreMetrics,
    ExecutionQualityMetrics,
    MetricsSnapshot,
)

__all__ = [
    "ConsistencyMetrics",
    "CoreMetrics",
    "ExecutionQualityMetrics",
    "MetricsSnapshot",
    "compute_consistency_metrics",
    "compute_core_metrics",
    "compute_execution_quality_metrics",
    "compute_metrics_snapshot",
]

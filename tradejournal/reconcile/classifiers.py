"""Execution-quality and market-session classifiers for journal entries.

No grading rule has been agreed yet, so the defaults return fixed neutral
values. Anything implementing the protocols below can be passed to the
JournalEntryBuilder instead.
"""

from datetime import timezone
from typing import Protocol

from tradejournal.models.journal import PLACEHOLDER_SESSION, ExecutionQuality
from tradejournal.models.trade import Trade


class ExecutionQualityClassifier(Protocol):
    def classify(self, trade: Trade) -> ExecutionQuality:
        ...


class MarketSessionClassifier(Protocol):
    def classify(self, trade: Trade) -> str:
        ...


class PlaceholderExecutionQuality:
    def classify(self, trade: Trade) -> ExecutionQuality:
        return ExecutionQuality()


class PlaceholderSession:
    def classify(self, trade: Trade) -> str:
        return PLACEHOLDER_SESSION


class UtcHourSessionClassifier:
    """Buckets the entry hour (UTC) into a forex trading session."""

    def classify(self, trade: Trade) -> str:
        entry = trade.entry_date
        if entry.tzinfo is not None:
            entry = entry.astimezone(timezone.utc)
        hour = entry.hour
        if 0 <= hour < 8:
            return "asian"
        elif 8 <= hour < 12:
            return "london"
        elif 12 <= hour < 16:
            return "overlap"
        elif 16 <= hour < 21:
            return "newyork"
        return "asian"


SESSION_CLASSIFIERS: dict[str, type] = {
    "placeholder": PlaceholderSession,
    "utc_hour": UtcHourSessionClassifier,
}


def session_classifier(name: str) -> MarketSessionClassifier:
    try:
        return SESSION_CLASSIFIERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown market session classifier '{name}'. "
            f"Expected one of: {', '.join(SESSION_CLASSIFIERS)}"
        ) from None

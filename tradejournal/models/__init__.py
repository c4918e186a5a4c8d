from tradejournal.models.deal import Deal, DealEntryType, DealType
from tradejournal.models.journal import (
    ExecutionQuality,
    JournalEntry,
    MarketContext,
    TradeResults,
)
from tradejournal.models.setup import Setup
from tradejournal.models.trade import Trade, TradeState, TradeType

__all__ = [
    "Deal",
    "DealEntryType",
    "DealType",
    "ExecutionQuality",
    "JournalEntry",
    "MarketContext",
    "Setup",
    "Trade",
    "TradeResults",
    "TradeState",
    "TradeType",
]

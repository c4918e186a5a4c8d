"""Journal entry models: the persisted wrapper around a reconciled trade."""

from typing import Any

from tradejournal.models.base import DocumentModel
from tradejournal.models.deal import Deal
from tradejournal.models.trade import Trade, TradeState

PLACEHOLDER_GRADE = "F"
PLACEHOLDER_SESSION = "new york"


class ExecutionQuality(DocumentModel):
    entry_quality: float = 1
    exit_quality: float = 1
    grade: str = PLACEHOLDER_GRADE


class MarketContext(DocumentModel):
    market_session: str = PLACEHOLDER_SESSION  # "asian", "london", "overlap", "newyork"


class TradeResults(DocumentModel):
    pnl: float = 0.0
    hold_time: float | None = None  # seconds, None while open


class JournalEntry(DocumentModel):
    journal_entry_id: str = ""
    position_id: str | None = None
    entry_deal_id: str | None = None
    exit_deal_id: str | None = None
    setup_id: str | None = None

    trade: Trade
    execution_quality: ExecutionQuality = ExecutionQuality()
    market_context: MarketContext = MarketContext()
    results: TradeResults = TradeResults()

    # Exit legs that did not yet cover the entry volume; empty once closed
    partial_exits: list[Deal] = []

    # Free-form notes, only ever edited by the user
    learning: dict[str, Any] = {}

    @property
    def is_closed(self) -> bool:
        return self.trade.state == TradeState.CLOSED

    @property
    def pnl(self) -> float:
        return self.results.pnl

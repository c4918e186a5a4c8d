from datetime import datetime
from enum import Enum

from tradejournal.models.base import DocumentModel


class TradeType(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class Trade(DocumentModel):
    """Canonical round trip reconciled from one broker position."""

    symbol: str
    type: TradeType
    volume: float = 0.0

    entry_date: datetime
    entry_price: float

    # Exit details stay empty while the position is open
    exit_date: datetime | None = None
    exit_price: float | None = None

    stop_loss: float = 0.0
    take_profit: float = 0.0
    state: TradeState = TradeState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state == TradeState.OPEN

"""Trade pairing — reduces each position's deals to at most one canonical trade.

Two policies are supported:

    first_match      first entry-in deal + first entry-out deal (partial
                     fills beyond the first leg are ignored)
    volume_weighted  all entry-in / entry-out legs averaged by volume; the
                     trade only closes once exit volume covers entry volume

A position with an entry leg but no (sufficient) exit becomes an OPEN trade;
the exit legs seen so far stay attached so a later sync can finish closing it.
A position with exit legs only is reported as an orphan exit so ingestion can
close the OPEN trade persisted by an earlier sync.
"""

from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from tradejournal.models.deal import Deal, DealEntryType
from tradejournal.models.trade import Trade, TradeState, TradeType

VOLUME_EPSILON = 1e-9


class PairingPolicy(str, Enum):
    FIRST_MATCH = "first_match"
    VOLUME_WEIGHTED = "volume_weighted"


@dataclass
class PairedPosition:
    """A position reduced to its trade plus the deal data the journal needs."""
    position_id: str
    trade: Trade
    entry_deal_id: str
    exit_deal_id: str | None = None
    pnl: float = 0.0
    # Exit legs seen while the trade is still open (volume_weighted only)
    exits: list[Deal] = field(default_factory=list)

    @property
    def hold_time(self) -> float | None:
        """Seconds between entry and exit, None while open."""
        if self.trade.exit_date is None:
            return None
        return (self.trade.exit_date - self.trade.entry_date).total_seconds()


@dataclass
class OrphanExit:
    """Exit legs whose entry leg was not part of the fetched deal range."""
    position_id: str
    exits: list[Deal]


@dataclass
class PairingResult:
    closed: list[PairedPosition] = field(default_factory=list)
    open: list[PairedPosition] = field(default_factory=list)
    orphan_exits: list[OrphanExit] = field(default_factory=list)

    @property
    def trades(self) -> list[Trade]:
        return [p.trade for p in self.closed]


def _entry_legs(deals: list[Deal]) -> list[Deal]:
    # An entry leg without symbol or price cannot describe a trade
    return [
        d for d in deals
        if d.entry_type == DealEntryType.IN and d.price is not None and d.symbol
    ]


def _exit_legs(deals: list[Deal]) -> list[Deal]:
    return [d for d in deals if d.entry_type == DealEntryType.OUT and d.price is not None]


def _weighted_price(legs: list[Deal]) -> float:
    total_volume = sum(d.volume or 0.0 for d in legs)
    if total_volume <= 0:
        return sum(d.price for d in legs) / len(legs)
    return sum(d.price * (d.volume or 0.0) for d in legs) / total_volume


def open_trade(entries: list[Deal], policy: PairingPolicy = PairingPolicy.FIRST_MATCH) -> Trade:
    """Build the OPEN trade described by a position's entry legs."""
    first = entries[0]
    legs = entries if policy == PairingPolicy.VOLUME_WEIGHTED else [first]
    return Trade(
        symbol=first.symbol,
        type=TradeType.LONG if first.is_buy else TradeType.SHORT,
        volume=sum(d.volume or 0.0 for d in legs),
        entry_date=min(d.time for d in legs),
        entry_price=_weighted_price(legs),
        stop_loss=next((d.stop_loss for d in legs if d.stop_loss), 0.0),
        take_profit=next((d.take_profit for d in legs if d.take_profit), 0.0),
        state=TradeState.OPEN,
    )


def close_trade(
    trade: Trade,
    exits: list[Deal],
    policy: PairingPolicy = PairingPolicy.FIRST_MATCH,
) -> tuple[Trade, float, str] | None:
    """Apply exit legs to an open trade.

    Returns (closed trade, pnl, exit deal id), or None when the exits do not
    close the trade. Exit SL/TP take precedence over the values already on
    the trade (which came from the entry leg).
    """
    if not exits:
        return None
    legs = exits if policy == PairingPolicy.VOLUME_WEIGHTED else exits[:1]

    if policy == PairingPolicy.VOLUME_WEIGHTED:
        exit_volume = sum(d.volume or 0.0 for d in legs)
        if exit_volume < trade.volume - VOLUME_EPSILON:
            return None

    stop_loss = next((d.stop_loss for d in reversed(legs) if d.stop_loss), None)
    take_profit = next((d.take_profit for d in reversed(legs) if d.take_profit), None)

    closed = trade.model_copy(update={
        "exit_date": max(d.time for d in legs),
        "exit_price": _weighted_price(legs),
        "stop_loss": stop_loss or trade.stop_loss or 0.0,
        "take_profit": take_profit or trade.take_profit or 0.0,
        "state": TradeState.CLOSED,
    })
    pnl = sum(d.profit for d in legs)
    return closed, pnl, legs[-1].deal_id


def pair_position(
    position_id: str,
    deals: list[Deal],
    policy: PairingPolicy = PairingPolicy.FIRST_MATCH,
) -> PairedPosition | None:
    """Reduce one position to a trade, or None if it has no usable entry leg."""
    entries = _entry_legs(deals)
    if not entries:
        return None

    trade = open_trade(entries, policy)
    paired = PairedPosition(
        position_id=position_id,
        trade=trade,
        entry_deal_id=entries[0].deal_id,
    )

    exits = _exit_legs(deals)
    result = close_trade(trade, exits, policy)
    if result is not None:
        paired.trade, paired.pnl, paired.exit_deal_id = result
    else:
        paired.exits = exits
    return paired


def pair_positions(
    positions: dict[str, list[Deal]],
    policy: PairingPolicy = PairingPolicy.FIRST_MATCH,
) -> PairingResult:
    """Pair every position bucket. Never raises on malformed deals."""
    result = PairingResult()
    for position_id, deals in positions.items():
        paired = pair_position(position_id, deals, policy)
        if paired is None:
            exits = _exit_legs(deals)
            if exits:
                result.orphan_exits.append(OrphanExit(position_id=position_id, exits=exits))
            else:
                logger.debug(f"Position {position_id}: no usable entry or exit deal")
            continue

        if paired.trade.is_open:
            result.open.append(paired)
        else:
            result.closed.append(paired)
    return result

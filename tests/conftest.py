"""Shared test fixtures for reconciliation, ingestion and metrics tests."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from tradejournal.bridge import DealSource
from tradejournal.db.sqlite_store import SQLiteDocumentStore
from tradejournal.models.deal import Deal
from tradejournal.models.journal import JournalEntry, TradeResults
from tradejournal.models.trade import Trade, TradeState, TradeType

BASE_TIME = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def make_deal(
    deal_id="1",
    position_id="100",
    type="DEAL_TYPE_BUY",
    entry_type="DEAL_ENTRY_IN",
    symbol="XAUUSD",
    volume=0.1,
    price=2000.0,
    time=BASE_TIME,
    profit=0.0,
    stop_loss=None,
    take_profit=None,
) -> Deal:
    return Deal(
        deal_id=deal_id,
        position_id=position_id,
        type=type,
        entry_type=entry_type,
        symbol=symbol,
        volume=volume,
        price=price,
        time=time,
        profit=profit,
        stop_loss=stop_loss,
        take_profit=take_profit,
    )


def make_round_trip(
    position_id="100",
    entry_deal_id=None,
    exit_deal_id=None,
    direction="DEAL_TYPE_BUY",
    entry_price=2000.0,
    exit_price=2010.0,
    entry_time=BASE_TIME,
    hold=timedelta(hours=4),
    profit=10.0,
    volume=0.1,
) -> list[Deal]:
    """Entry-in + entry-out deal pair for one position."""
    exit_type = "DEAL_TYPE_SELL" if direction == "DEAL_TYPE_BUY" else "DEAL_TYPE_BUY"
    return [
        make_deal(
            deal_id=entry_deal_id or f"{position_id}-in",
            position_id=position_id,
            type=direction,
            entry_type="DEAL_ENTRY_IN",
            price=entry_price,
            volume=volume,
            time=entry_time,
        ),
        make_deal(
            deal_id=exit_deal_id or f"{position_id}-out",
            position_id=position_id,
            type=exit_type,
            entry_type="DEAL_ENTRY_OUT",
            price=exit_price,
            volume=volume,
            time=entry_time + hold,
            profit=profit,
        ),
    ]


def make_entry(
    pnl=10.0,
    entry_date=BASE_TIME,
    hold_time=3600.0,
    setup_id="setup-1",
    journal_entry_id="",
    position_id=None,
    state=TradeState.CLOSED,
) -> JournalEntry:
    closed = state == TradeState.CLOSED
    return JournalEntry(
        journal_entry_id=journal_entry_id,
        position_id=position_id,
        setup_id=setup_id,
        trade=Trade(
            symbol="XAUUSD",
            type=TradeType.LONG,
            volume=0.1,
            entry_date=entry_date,
            entry_price=2000.0,
            exit_date=entry_date + timedelta(seconds=hold_time) if closed else None,
            exit_price=2000.0 + pnl if closed else None,
            state=state,
        ),
        results=TradeResults(pnl=pnl if closed else 0.0, hold_time=hold_time if closed else None),
    )


@pytest_asyncio.fixture
async def store():
    """In-memory document store, fresh per test."""
    s = SQLiteDocumentStore(":memory:")
    await s.connect()
    yield s
    await s.disconnect()


@pytest.fixture
def mixed_entries():
    """Wins and losses spread over several entry hours (UTC)."""
    return [
        make_entry(pnl=100.0, entry_date=BASE_TIME, hold_time=3600),
        make_entry(pnl=-50.0, entry_date=BASE_TIME + timedelta(hours=1), hold_time=10800),
        make_entry(pnl=200.0, entry_date=BASE_TIME + timedelta(days=1), hold_time=7200),
        make_entry(pnl=-50.0, entry_date=BASE_TIME + timedelta(days=1, hours=5), hold_time=7200),
    ]


class FakeDealSource(DealSource):
    """Deal source serving a fixed deal list; ``error`` makes every fetch raise."""

    def __init__(self, deals=None, error=None, delay=0.0):
        self.deals = list(deals or [])
        self.error = error
        self.delay = delay
        self.calls = []

    async def fetch_deals(self, account, from_time, to_time):
        self.calls.append((account, from_time, to_time))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.deals)

"""Tests for tradejournal.reconcile.pipeline — deal history end to end."""

from datetime import timedelta

from tradejournal.reconcile.pairer import PairingPolicy
from tradejournal.reconcile.pipeline import process_deal_history
from tests.conftest import BASE_TIME, make_deal, make_round_trip


def _history():
    return (
        make_round_trip(position_id="1", profit=10.0)
        + make_round_trip(position_id="2", profit=-4.0, entry_time=BASE_TIME + timedelta(hours=1))
        + [make_deal(deal_id="b1", position_id=None, type="DEAL_TYPE_BALANCE", entry_type=None, profit=1000.0)]
        + make_round_trip(position_id="3")[:1]
    )


class TestProcessDealHistory:
    def test_empty(self):
        history = process_deal_history([])
        assert history.entries == []
        assert history.deals_received == 0
        assert history.positions == 0

    def test_counts(self):
        history = process_deal_history(_history())
        assert history.deals_received == 6
        assert history.deals_excluded == 1
        assert history.positions == 3
        assert len(history.closed_entries) == 2
        assert len(history.open_entries) == 1

    def test_closed_entries_come_first(self):
        history = process_deal_history(_history())
        assert [e.is_closed for e in history.entries] == [True, True, False]

    def test_balance_contributes_nothing(self):
        without = process_deal_history(_history()[:-2] + _history()[-1:])
        with_balance = process_deal_history(_history())
        assert [e.pnl for e in with_balance.closed_entries] == [e.pnl for e in without.closed_entries]
        assert sum(e.pnl for e in with_balance.entries) == 6.0

    def test_missing_side_yields_no_closed_trade(self):
        deals = make_round_trip(position_id="1")[:1] + make_round_trip(position_id="2")[1:]
        history = process_deal_history(deals)
        assert history.closed_entries == []
        assert len(history.open_entries) == 1
        assert [o.position_id for o in history.orphan_exits] == ["2"]

    def test_duplicate_deals_ignored(self):
        deals = make_round_trip() + make_round_trip()
        history = process_deal_history(deals)
        assert history.deals_excluded == 2
        assert len(history.closed_entries) == 1

    def test_rerun_identical(self):
        first = process_deal_history(_history())
        second = process_deal_history(_history())
        assert [e.trade for e in first.entries] == [e.trade for e in second.entries]

    def test_volume_weighted_policy(self):
        deals = make_round_trip(volume=0.5)
        deals.append(make_deal(deal_id="extra-out", type="DEAL_TYPE_SELL",
                               entry_type="DEAL_ENTRY_OUT", volume=0.5, price=2015.0))
        history = process_deal_history(deals, policy=PairingPolicy.VOLUME_WEIGHTED)
        assert len(history.closed_entries) == 1

"""Tests for the journal entry builder and classifiers."""

from datetime import datetime, timezone

import pytest

from tradejournal.models.journal import PLACEHOLDER_GRADE, PLACEHOLDER_SESSION, ExecutionQuality
from tradejournal.reconcile.builder import JournalEntryBuilder
from tradejournal.reconcile.classifiers import (
    UtcHourSessionClassifier,
    session_classifier,
)
from tradejournal.reconcile.pairer import pair_position
from tests.conftest import make_round_trip


@pytest.fixture
def closed_position():
    return pair_position("100", make_round_trip(profit=25.0))


class TestJournalEntryBuilder:
    def test_placeholder_defaults(self, closed_position):
        entry = JournalEntryBuilder().build(closed_position)
        assert entry.execution_quality.entry_quality == 1
        assert entry.execution_quality.exit_quality == 1
        assert entry.execution_quality.grade == PLACEHOLDER_GRADE
        assert entry.market_context.market_session == PLACEHOLDER_SESSION
        assert entry.learning == {}

    def test_results_and_deal_refs(self, closed_position):
        entry = JournalEntryBuilder().build(closed_position)
        assert entry.results.pnl == 25.0
        assert entry.results.hold_time == 14400.0
        assert entry.position_id == "100"
        assert entry.entry_deal_id == "100-in"
        assert entry.exit_deal_id == "100-out"
        assert entry.trade == closed_position.trade
        assert entry.is_closed

    def test_id_left_to_uploader(self, closed_position):
        assert JournalEntryBuilder().build(closed_position).journal_entry_id == ""

    def test_custom_classifiers(self, closed_position):
        class Graded:
            def classify(self, trade):
                return ExecutionQuality(entry_quality=0.8, exit_quality=0.6, grade="B")

        builder = JournalEntryBuilder(
            quality_classifier=Graded(), session_classifier=UtcHourSessionClassifier()
        )
        entry = builder.build(closed_position)
        assert entry.execution_quality.grade == "B"
        assert entry.market_context.market_session == "london"

    def test_document_keys_are_camel_case(self, closed_position):
        doc = JournalEntryBuilder().build(closed_position).to_document()
        assert doc["executionQuality"]["grade"] == PLACEHOLDER_GRADE
        assert doc["marketContext"]["marketSession"] == PLACEHOLDER_SESSION
        assert doc["results"]["holdTime"] == 14400.0
        assert doc["trade"]["entryPrice"] == 2000.0
        assert doc["trade"]["state"] == "closed"


class TestSessionClassifier:
    @pytest.mark.parametrize("hour,session", [
        (3, "asian"),
        (9, "london"),
        (13, "overlap"),
        (18, "newyork"),
        (22, "asian"),
    ])
    def test_utc_hours(self, hour, session):
        entry_time = datetime(2024, 1, 15, hour, tzinfo=timezone.utc)
        paired = pair_position("1", make_round_trip(position_id="1", entry_time=entry_time))
        assert UtcHourSessionClassifier().classify(paired.trade) == session

    def test_lookup(self):
        assert isinstance(session_classifier("utc_hour"), UtcHourSessionClassifier)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown market session classifier"):
            session_classifier("moon_phase")

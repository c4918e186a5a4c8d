"""Journal Entry Builder — wraps reconciled trades into journal entries."""

from tradejournal.models.journal import JournalEntry, MarketContext, TradeResults
from tradejournal.reconcile.classifiers import (
    ExecutionQualityClassifier,
    MarketSessionClassifier,
    PlaceholderExecutionQuality,
    PlaceholderSession,
)
from tradejournal.reconcile.pairer import PairedPosition


class JournalEntryBuilder:
    """Builds journal entries; the uploader assigns their ids."""

    def __init__(
        self,
        quality_classifier: ExecutionQualityClassifier | None = None,
        session_classifier: MarketSessionClassifier | None = None,
    ):
        self.quality_classifier = quality_classifier or PlaceholderExecutionQuality()
        self.session_classifier = session_classifier or PlaceholderSession()

    def build(self, paired: PairedPosition) -> JournalEntry:
        trade = paired.trade
        return JournalEntry(
            position_id=paired.position_id,
            entry_deal_id=paired.entry_deal_id,
            exit_deal_id=paired.exit_deal_id,
            trade=trade,
            execution_quality=self.quality_classifier.classify(trade),
            market_context=MarketContext(
                market_session=self.session_classifier.classify(trade)
            ),
            results=TradeResults(pnl=paired.pnl, hold_time=paired.hold_time),
            partial_exits=paired.exits,
            learning={},
        )

    def build_all(self, paired_positions: list[PairedPosition]) -> list[JournalEntry]:
        return [self.build(p) for p in paired_positions]

from tradejournal.reconcile.aggregator import group_by_position
from tradejournal.reconcile.builder import JournalEntryBuilder
from tradejournal.reconcile.normalizer import drop_duplicate_deals, normalize_deals
from tradejournal.reconcile.pairer import (
    OrphanExit,
    PairedPosition,
    PairingPolicy,
    PairingResult,
    pair_position,
    pair_positions,
)
from tradejournal.reconcile.pipeline import ReconciledHistory, process_deal_history

__all__ = [
    "JournalEntryBuilder",
    "OrphanExit",
    "PairedPosition",
    "PairingPolicy",
    "PairingResult",
    "ReconciledHistory",
    "drop_duplicate_deals",
    "group_by_position",
    "normalize_deals",
    "pair_position",
    "pair_positions",
    "process_deal_history",
]

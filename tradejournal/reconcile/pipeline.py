"""Deal history processing: raw deals -> journal entries."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from loguru import logger

from tradejournal.models.deal import Deal
from tradejournal.models.journal import JournalEntry
from tradejournal.reconcile.aggregator import group_by_position
from tradejournal.reconcile.builder import JournalEntryBuilder
from tradejournal.reconcile.normalizer import drop_duplicate_deals, normalize_deals
from tradejournal.reconcile.pairer import OrphanExit, PairingPolicy, pair_positions


@dataclass
class ReconciledHistory:
    entries: list[JournalEntry] = field(default_factory=list)  # closed first, then open
    orphan_exits: list[OrphanExit] = field(default_factory=list)
    deals_received: int = 0
    deals_excluded: int = 0
    positions: int = 0

    @property
    def closed_entries(self) -> list[JournalEntry]:
        return [e for e in self.entries if e.is_closed]

    @property
    def open_entries(self) -> list[JournalEntry]:
        return [e for e in self.entries if not e.is_closed]


def process_deal_history(
    deals: Iterable[Deal],
    builder: JournalEntryBuilder | None = None,
    policy: PairingPolicy = PairingPolicy.FIRST_MATCH,
) -> ReconciledHistory:
    """Normalize, group, pair and build journal entries for one account's deals."""
    builder = builder or JournalEntryBuilder()
    deals = list(deals)

    normalized = drop_duplicate_deals(normalize_deals(deals))
    positions = group_by_position(normalized)
    pairing = pair_positions(positions, policy)

    history = ReconciledHistory(
        entries=builder.build_all(pairing.closed) + builder.build_all(pairing.open),
        orphan_exits=pairing.orphan_exits,
        deals_received=len(deals),
        deals_excluded=len(deals) - len(normalized),
        positions=len(positions),
    )
    logger.info(
        f"Reconciled {history.deals_received} deals into {history.positions} positions: "
        f"{len(pairing.closed)} closed, {len(pairing.open)} open, "
        f"{len(pairing.orphan_exits)} orphan exits"
    )
    return history

"""Setup-level reads: a setup's closed trades, its metrics and its running PnL."""

from loguru import logger

from tradejournal.analytics.metrics import compute_metrics_snapshot
from tradejournal.analytics.models import MetricsSnapshot
from tradejournal.db.store import DocumentStore, journal_entries_path, setups_path
from tradejournal.errors import DocumentNotFoundError, SetupNotFoundError
from tradejournal.models.journal import JournalEntry
from tradejournal.models.setup import Setup


async def get_setup(store: DocumentStore, user_id: str, setup_id: str) -> Setup:
    doc = await store.get_document(f"{setups_path(user_id)}/{setup_id}")
    if doc is None:
        raise SetupNotFoundError(setup_id)
    return Setup.from_document(doc)


async def list_setup_entries(
    store: DocumentStore, user_id: str, setup_id: str
) -> list[JournalEntry]:
    """Closed journal entries assigned to the setup, read fresh from the store."""
    docs = await store.list_documents(journal_entries_path(user_id))
    entries = [JournalEntry.from_document(d) for d in docs]
    return [e for e in entries if e.setup_id == setup_id and e.is_closed]


async def get_setup_metrics(
    store: DocumentStore, user_id: str, setup_id: str
) -> MetricsSnapshot:
    await get_setup(store, user_id, setup_id)
    entries = await list_setup_entries(store, user_id, setup_id)
    snapshot = compute_metrics_snapshot(entries)
    logger.debug(f"Metrics for setup {setup_id}: {len(entries)} trades")
    return snapshot


async def refresh_setup_pnl(store: DocumentStore, user_id: str, setup_id: str) -> float:
    """Recompute a setup's totalPnL from its closed entries."""
    entries = await list_setup_entries(store, user_id, setup_id)
    total_pnl = sum(e.pnl for e in entries)
    await store.merge_update(f"{setups_path(user_id)}/{setup_id}", {"totalPnL": total_pnl})
    return total_pnl


async def assign_entry_to_setup(
    store: DocumentStore, user_id: str, journal_entry_id: str, setup_id: str
) -> Setup:
    """Tag a journal entry with a setup and refresh the affected setups' totals."""
    await get_setup(store, user_id, setup_id)

    entry_path = f"{journal_entries_path(user_id)}/{journal_entry_id}"
    doc = await store.get_document(entry_path)
    if doc is None:
        raise DocumentNotFoundError(entry_path)
    previous_setup_id = JournalEntry.from_document(doc).setup_id

    await store.merge_update(entry_path, {"setupId": setup_id})

    if previous_setup_id and previous_setup_id != setup_id:
        if await store.get_document(f"{setups_path(user_id)}/{previous_setup_id}") is not None:
            await refresh_setup_pnl(store, user_id, previous_setup_id)
    await refresh_setup_pnl(store, user_id, setup_id)

    logger.info(f"Journal entry {journal_entry_id} assigned to setup {setup_id}")
    return await get_setup(store, user_id, setup_id)

"""Ingestion uploader — persists journal entries with bounded concurrency.

Every write is awaited and individually time-bounded. A failed write is
recorded in the UploadReport and never cancels its siblings; only a batch in
which every write failed raises IngestionError.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from loguru import logger

from tradejournal.analytics.setup_metrics import refresh_setup_pnl
from tradejournal.config import settings
from tradejournal.db.store import DocumentStore, journal_entries_path
from tradejournal.errors import (
    DocumentExistsError,
    DocumentNotFoundError,
    IngestionError,
    StoreError,
)
from tradejournal.ingest.identity import generate_journal_entry_id, journal_entry_id_for
from tradejournal.models.deal import Deal
from tradejournal.models.journal import JournalEntry
from tradejournal.reconcile.pairer import (
    OrphanExit,
    PairedPosition,
    PairingPolicy,
    close_trade,
)

CREATED = "created"
CLOSED = "closed"
SKIPPED = "skipped"
UNMATCHED = "unmatched"


@dataclass
class UploadFailure:
    journal_entry_id: str
    error: str


@dataclass
class UploadReport:
    user_id: str
    total: int = 0
    created: list[str] = field(default_factory=list)
    closed: list[str] = field(default_factory=list)  # OPEN entries moved to CLOSED
    skipped: list[str] = field(default_factory=list)  # already stored, nothing to do
    unmatched: list[str] = field(default_factory=list)  # orphan exits with no stored OPEN entry
    failures: list[UploadFailure] = field(default_factory=list)
    refreshed_setups: list[str] = field(default_factory=list)  # setups whose totalPnL was recomputed

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def all_failed(self) -> bool:
        return self.total > 0 and len(self.failures) == self.total

    def merge(self, other: "UploadReport") -> "UploadReport":
        return UploadReport(
            user_id=self.user_id,
            total=self.total + other.total,
            created=self.created + other.created,
            closed=self.closed + other.closed,
            skipped=self.skipped + other.skipped,
            unmatched=self.unmatched + other.unmatched,
            failures=self.failures + other.failures,
            refreshed_setups=sorted(set(self.refreshed_setups + other.refreshed_setups)),
        )


def assign_journal_entry_id(entry: JournalEntry) -> str:
    """Give the entry its deterministic id (or a random one without broker deals)."""
    if not entry.journal_entry_id:
        if entry.position_id and entry.entry_deal_id:
            entry.journal_entry_id = journal_entry_id_for(entry.position_id, entry.entry_deal_id)
        else:
            entry.journal_entry_id = generate_journal_entry_id()
    return entry.journal_entry_id


class JournalUploader:
    def __init__(
        self,
        store: DocumentStore,
        concurrency: int | None = None,
        timeout: float | None = None,
    ):
        self.store = store
        self.concurrency = concurrency or settings.upload_concurrency
        self.timeout = timeout or settings.store_timeout_seconds

    async def upload(self, user_id: str, entries: list[JournalEntry]) -> UploadReport:
        """Create new entries, close stored OPEN ones, skip everything already stored."""
        collection = journal_entries_path(user_id)
        touched_setups: set[str] = set()
        jobs = [
            (
                assign_journal_entry_id(entry),
                self._write_factory(collection, entry, touched_setups),
            )
            for entry in entries
        ]
        report = await self._run(user_id, jobs)
        report.refreshed_setups = await self._refresh_setups(user_id, touched_setups)
        logger.info(
            f"Upload for user {user_id}: {len(report.created)} created, "
            f"{len(report.closed)} closed, {len(report.skipped)} skipped, "
            f"{len(report.failures)} failed"
        )
        return self._check(report)

    async def close_orphan_exits(
        self,
        user_id: str,
        orphans: list[OrphanExit],
        policy: PairingPolicy = PairingPolicy.FIRST_MATCH,
    ) -> UploadReport:
        """Close stored OPEN entries whose exit legs arrived in a later sync."""
        if not orphans:
            return UploadReport(user_id=user_id)

        collection = journal_entries_path(user_id)
        stored = await asyncio.wait_for(
            self.store.list_documents(collection), self.timeout
        )
        open_by_position: dict[str, JournalEntry] = {}
        for doc in stored:
            entry = JournalEntry.from_document(doc)
            if entry.position_id and not entry.is_closed:
                open_by_position[entry.position_id] = entry

        touched_setups: set[str] = set()
        jobs = []
        for orphan in orphans:
            entry = open_by_position.get(orphan.position_id)
            if entry is None:
                jobs.append((f"position:{orphan.position_id}", _unmatched))
                continue
            jobs.append((
                entry.journal_entry_id,
                self._close_factory(collection, entry, orphan, policy, touched_setups),
            ))

        report = await self._run(user_id, jobs)
        report.refreshed_setups = await self._refresh_setups(user_id, touched_setups)
        logger.info(
            f"Orphan exits for user {user_id}: {len(report.closed)} closed, "
            f"{len(report.unmatched)} unmatched, {len(report.failures)} failed"
        )
        return self._check(report)

    async def _run(
        self,
        user_id: str,
        jobs: list[tuple[str, Callable[[], Awaitable[str]]]],
    ) -> UploadReport:
        report = UploadReport(user_id=user_id, total=len(jobs))
        if not jobs:
            return report

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _worker(entry_id: str, write: Callable[[], Awaitable[str]]):
            async with semaphore:
                try:
                    outcome = await asyncio.wait_for(write(), self.timeout)
                except asyncio.TimeoutError:
                    error = f"Timed out after {self.timeout}s"
                except Exception as e:
                    error = str(e) or type(e).__name__
                else:
                    getattr(report, outcome).append(entry_id)
                    return
            logger.warning(f"Journal entry {entry_id} write failed: {error}")
            report.failures.append(UploadFailure(journal_entry_id=entry_id, error=error))

        await asyncio.gather(*(_worker(entry_id, write) for entry_id, write in jobs))

        for ids in (report.created, report.closed, report.skipped, report.unmatched):
            ids.sort()
        report.failures.sort(key=lambda f: f.journal_entry_id)
        return report

    def _check(self, report: UploadReport) -> UploadReport:
        if report.all_failed:
            raise IngestionError(
                f"All {report.total} journal entry writes failed for user {report.user_id}",
                report,
            )
        return report

    async def _refresh_setups(self, user_id: str, setup_ids: set[str]) -> list[str]:
        """Recompute totalPnL of setups whose entries were closed in this batch.

        Runs after every write has settled so each total sees all of them.
        """
        refreshed = []
        for setup_id in sorted(setup_ids):
            try:
                await asyncio.wait_for(
                    refresh_setup_pnl(self.store, user_id, setup_id), self.timeout
                )
            except DocumentNotFoundError:
                logger.warning(f"Setup {setup_id} no longer exists, totalPnL not refreshed")
                continue
            except (StoreError, asyncio.TimeoutError) as e:
                logger.warning(f"Setup {setup_id} totalPnL refresh failed: {e}")
                continue
            refreshed.append(setup_id)
        return refreshed

    def _write_factory(self, collection: str, entry: JournalEntry, touched_setups: set[str]):
        async def write() -> str:
            path = f"{collection}/{entry.journal_entry_id}"
            existing = await self.store.get_document(path)
            if existing is None:
                try:
                    await self.store.create_document(
                        collection, entry.to_document(), entry.journal_entry_id
                    )
                except DocumentExistsError:
                    # Another job stored it between our read and write
                    return SKIPPED
                return CREATED

            stored = JournalEntry.from_document(existing)
            if stored.is_closed:
                return SKIPPED
            if entry.is_closed:
                await self.store.merge_update(path, _closing_fields(entry))
                if stored.setup_id:
                    touched_setups.add(stored.setup_id)
                return CLOSED

            # Still open on both sides: keep any exit legs the stored entry lacks
            legs = _union_legs(stored.partial_exits, entry.partial_exits)
            if len(legs) > len(stored.partial_exits):
                await self.store.merge_update(path, _partial_exit_fields(legs))
            return SKIPPED

        return write

    def _close_factory(
        self,
        collection: str,
        entry: JournalEntry,
        orphan: OrphanExit,
        policy: PairingPolicy,
        touched_setups: set[str],
    ):
        async def write() -> str:
            path = f"{collection}/{entry.journal_entry_id}"
            # Legs from earlier syncs come first, then the newly fetched ones
            legs = _union_legs(entry.partial_exits, orphan.exits)
            result = close_trade(entry.trade, legs, policy)
            if result is None:
                if len(legs) > len(entry.partial_exits):
                    await self.store.merge_update(path, _partial_exit_fields(legs))
                return SKIPPED

            trade, pnl, exit_deal_id = result
            paired = PairedPosition(
                position_id=orphan.position_id,
                trade=trade,
                entry_deal_id=entry.entry_deal_id or "",
                exit_deal_id=exit_deal_id,
                pnl=pnl,
            )
            closed = entry.model_copy(update={
                "trade": trade,
                "exit_deal_id": exit_deal_id,
                "results": entry.results.model_copy(
                    update={"pnl": paired.pnl, "hold_time": paired.hold_time}
                ),
                "partial_exits": [],
            })
            await self.store.merge_update(path, _closing_fields(closed))
            if entry.setup_id:
                touched_setups.add(entry.setup_id)
            return CLOSED

        return write


async def _unmatched() -> str:
    return UNMATCHED


def _union_legs(known: list[Deal], incoming: list[Deal]) -> list[Deal]:
    seen = {d.deal_id for d in known}
    return known + [d for d in incoming if d.deal_id not in seen]


def _partial_exit_fields(legs: list[Deal]) -> dict:
    return {"partialExits": [d.to_document() for d in legs]}


def _closing_fields(entry: JournalEntry) -> dict:
    # User-owned fields (learning, setupId, grading) are left alone
    doc = entry.to_document()
    return {key: doc[key] for key in ("trade", "results", "exitDealId", "partialExits")}

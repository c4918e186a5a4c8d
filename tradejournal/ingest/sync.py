"""Account sync — one fetch -> reconcile -> upload job per broker account."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone

from loguru import logger

from tradejournal.bridge import DealSource
from tradejournal.config import settings
from tradejournal.db.store import DocumentStore
from tradejournal.errors import BrokerError
from tradejournal.ingest.uploader import JournalUploader, UploadReport
from tradejournal.reconcile.builder import JournalEntryBuilder
from tradejournal.reconcile.classifiers import session_classifier
from tradejournal.reconcile.pairer import PairingPolicy
from tradejournal.reconcile.pipeline import process_deal_history

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class SyncJob:
    user_id: str
    account: str
    from_time: datetime = EPOCH
    to_time: datetime | None = None  # None = now


@dataclass
class SyncReport:
    user_id: str
    account: str
    deals_received: int = 0
    deals_excluded: int = 0
    positions: int = 0
    closed_trades: int = 0
    open_trades: int = 0
    orphan_exits: int = 0
    upload: UploadReport | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and (self.upload is None or not self.upload.all_failed)


class AccountSync:
    def __init__(
        self,
        source: DealSource,
        store: DocumentStore,
        builder: JournalEntryBuilder | None = None,
        policy: PairingPolicy | str | None = None,
        uploader: JournalUploader | None = None,
    ):
        self.source = source
        self.store = store
        self.builder = builder or JournalEntryBuilder(
            session_classifier=session_classifier(settings.market_session_classifier)
        )
        self.policy = PairingPolicy(policy or settings.pairing_policy)
        self.uploader = uploader or JournalUploader(store)

    async def run(self, job: SyncJob) -> SyncReport:
        """Fetch the account's deals for the range and persist them as journal entries.

        Raises BrokerError when the deal fetch fails and IngestionError when
        every write failed; partial write failures are reported, not raised.
        """
        to_time = job.to_time or datetime.now(timezone.utc)
        logger.info(
            f"Sync started: user={job.user_id} account={job.account} "
            f"range={job.from_time.isoformat()}..{to_time.isoformat()}"
        )

        try:
            deals = await asyncio.wait_for(
                self.source.fetch_deals(job.account, job.from_time, to_time),
                settings.broker_timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise BrokerError(
                f"Deal fetch for account {job.account} timed out after "
                f"{settings.broker_timeout_seconds}s"
            ) from None

        history = process_deal_history(deals, self.builder, self.policy)
        report = SyncReport(
            user_id=job.user_id,
            account=job.account,
            deals_received=history.deals_received,
            deals_excluded=history.deals_excluded,
            positions=history.positions,
            closed_trades=len(history.closed_entries),
            open_trades=len(history.open_entries),
            orphan_exits=len(history.orphan_exits),
        )

        upload = await self.uploader.upload(job.user_id, history.entries)
        closing = await self.uploader.close_orphan_exits(
            job.user_id, history.orphan_exits, self.policy
        )
        report.upload = upload.merge(closing)

        logger.info(
            f"Sync finished: user={job.user_id} account={job.account} | "
            f"created={len(report.upload.created)} closed={len(report.upload.closed)} "
            f"skipped={len(report.upload.skipped)} failed={len(report.upload.failures)}"
        )
        return report


async def run_sync_jobs(
    sync: AccountSync,
    jobs: list[SyncJob],
    max_parallel: int | None = None,
) -> list[SyncReport]:
    """Run several account syncs concurrently; one job's failure does not stop the others."""
    semaphore = asyncio.Semaphore(max_parallel or settings.max_parallel_syncs)

    async def _run_one(job: SyncJob) -> SyncReport:
        async with semaphore:
            try:
                return await sync.run(job)
            except Exception as e:
                logger.error(f"Sync failed for user={job.user_id} account={job.account}: {e}")
                return SyncReport(user_id=job.user_id, account=job.account, error=str(e))

    return list(await asyncio.gather(*(_run_one(job) for job in jobs)))

from tradejournal.ingest.identity import journal_entry_id_for
from tradejournal.ingest.sync import AccountSync, SyncJob, SyncReport, run_sync_jobs
from tradejournal.ingest.uploader import JournalUploader, UploadFailure, UploadReport

__all__ = [
    "AccountSync",
    "JournalUploader",
    "SyncJob",
    "SyncReport",
    "UploadFailure",
    "UploadReport",
    "journal_entry_id_for",
    "run_sync_jobs",
]

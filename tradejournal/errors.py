"""Exception hierarchy for the trade journal engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tradejournal.ingest.uploader import UploadReport


class TradeJournalError(Exception):
    """Base class for all engine errors."""


class StoreError(TradeJournalError):
    """A document store operation failed."""


class DocumentNotFoundError(StoreError):
    def __init__(self, path: str):
        super().__init__(f"Document not found: {path}")
        self.path = path


class DocumentExistsError(StoreError):
    def __init__(self, path: str):
        super().__init__(f"Document already exists: {path}")
        self.path = path


class BrokerError(TradeJournalError):
    """The brokerage deal source returned an error or timed out."""


class IngestionError(TradeJournalError):
    """Every write of an ingestion batch failed."""

    def __init__(self, message: str, report: UploadReport):
        super().__init__(message)
        self.report = report


class SetupNotFoundError(TradeJournalError):
    def __init__(self, setup_id: str):
        super().__init__(f"Setup not found: {setup_id}")
        self.setup_id = setup_id

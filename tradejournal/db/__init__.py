from tradejournal.db.sqlite_store import SQLiteDocumentStore
from tradejournal.db.store import DocumentStore

__all__ = ["DocumentStore", "SQLiteDocumentStore"]

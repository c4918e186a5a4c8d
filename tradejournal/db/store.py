"""Document store interface: create/get/list/merge/delete over slash-separated paths.

A path alternates collection and document segments, e.g.
``users/{uid}/journalEntries/{journalEntryId}``. The collection of a document
is its path minus the last segment.
"""

from abc import ABC, abstractmethod
from typing import Any


def user_collection(user_id: str, name: str) -> str:
    return f"users/{user_id}/{name}"


def journal_entries_path(user_id: str) -> str:
    return user_collection(user_id, "journalEntries")


def setups_path(user_id: str) -> str:
    return user_collection(user_id, "setups")


def split_path(path: str) -> tuple[str, str]:
    """Split a document path into (collection, doc_id)."""
    collection, _, doc_id = path.rstrip("/").rpartition("/")
    if not collection or not doc_id:
        raise ValueError(f"Not a document path: {path!r}")
    return collection, doc_id


def deep_merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Merge ``updates`` into a copy of ``base``; nested dicts merge key by key."""
    merged = dict(base)
    for key, val in updates.items():
        if isinstance(val, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


class DocumentStore(ABC):
    @abstractmethod
    async def create_document(
        self, collection: str, payload: dict[str, Any], doc_id: str | None = None
    ) -> str:
        """Create a document and return its id.

        A server-generated id is used when ``doc_id`` is omitted. Raises
        DocumentExistsError if a document with that id is already present.
        """

    @abstractmethod
    async def get_document(self, path: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def list_documents(self, collection: str) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    async def merge_update(self, path: str, partial: dict[str, Any]) -> None:
        """Merge fields into an existing document; unspecified fields are untouched."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        ...

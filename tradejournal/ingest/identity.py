"""Deterministic journal entry identifiers."""

import hashlib
import uuid


def journal_entry_id_for(position_id: str, entry_deal_id: str) -> str:
    """Derive a stable journal entry id from a position and its entry deal.

    The key only uses the entry leg so an entry stored while its position was
    open keeps the same id once the exit arrives. Re-ingesting the same deals
    therefore always lands on the same documents.
    """
    key_string = "|".join([position_id, entry_deal_id])
    hash_digest = hashlib.sha256(key_string.encode()).hexdigest()[:16]
    return f"JE-{hash_digest}"


def generate_journal_entry_id() -> str:
    """Random id for entries that have no broker deals behind them."""
    return uuid.uuid4().hex

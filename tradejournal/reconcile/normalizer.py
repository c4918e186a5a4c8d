"""Deal normalization — strips records that can never belong to a trade."""

from collections.abc import Iterable

from loguru import logger

from tradejournal.models.deal import Deal


def normalize_deals(deals: Iterable[Deal]) -> list[Deal]:
    """Drop balance deals and deals without a position id, preserving order.

    Optional fields (symbol, price, volume, SL/TP) pass through untouched;
    later stages decide whether a deal is usable as an entry or exit leg.
    """
    normalized = []
    for deal in deals:
        if deal.is_balance:
            continue
        if not deal.position_id:
            logger.debug(f"Deal {deal.deal_id} has no position id, skipping")
            continue
        normalized.append(deal)
    return normalized


def drop_duplicate_deals(deals: Iterable[Deal]) -> list[Deal]:
    """Keep the first occurrence of each deal id."""
    seen: set[str] = set()
    unique = []
    for deal in deals:
        if deal.deal_id in seen:
            continue
        seen.add(deal.deal_id)
        unique.append(deal)
    return unique

from collections.abc import Iterable

from tradejournal.models.deal import Deal


def group_by_position(deals: Iterable[Deal]) -> dict[str, list[Deal]]:
    """Bucket normalized deals by position id.

    Buckets appear in order of first sighting and keep deals in arrival
    order, so the same input always yields the same grouping.
    """
    positions: dict[str, list[Deal]] = {}
    for deal in deals:
        positions.setdefault(deal.position_id, []).append(deal)
    return positions

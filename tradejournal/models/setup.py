from pydantic import Field

from tradejournal.models.base import DocumentModel


class Setup(DocumentModel):
    """User-defined strategy tag; journal entries point at it via ``setupId``."""

    setup_id: str = ""
    name: str = ""
    description: str = ""
    total_pnl: float = Field(default=0.0, alias="totalPnL")

"""Broker execution records as delivered by MetaTrader 5."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from tradejournal.models.base import DocumentModel


class DealType(str, Enum):
    BUY = "DEAL_TYPE_BUY"
    SELL = "DEAL_TYPE_SELL"
    BALANCE = "DEAL_TYPE_BALANCE"
    CREDIT = "DEAL_TYPE_CREDIT"
    CHARGE = "DEAL_TYPE_CHARGE"
    CORRECTION = "DEAL_TYPE_CORRECTION"
    BONUS = "DEAL_TYPE_BONUS"
    COMMISSION = "DEAL_TYPE_COMMISSION"
    COMMISSION_DAILY = "DEAL_TYPE_COMMISSION_DAILY"
    COMMISSION_MONTHLY = "DEAL_TYPE_COMMISSION_MONTHLY"
    COMMISSION_AGENT_DAILY = "DEAL_TYPE_COMMISSION_AGENT_DAILY"
    COMMISSION_AGENT_MONTHLY = "DEAL_TYPE_COMMISSION_AGENT_MONTHLY"
    INTEREST = "DEAL_TYPE_INTEREST"
    BUY_CANCELED = "DEAL_TYPE_BUY_CANCELED"
    SELL_CANCELED = "DEAL_TYPE_SELL_CANCELED"
    DIVIDEND = "DEAL_DIVIDEND"
    DIVIDEND_FRANKED = "DEAL_DIVIDEND_FRANKED"
    TAX = "DEAL_TAX"


class DealEntryType(str, Enum):
    IN = "DEAL_ENTRY_IN"
    OUT = "DEAL_ENTRY_OUT"
    INOUT = "DEAL_ENTRY_INOUT"
    OUT_BY = "DEAL_ENTRY_OUT_BY"


class Deal(DocumentModel):
    model_config = ConfigDict(frozen=True)

    deal_id: str = Field(validation_alias=AliasChoices("dealId", "deal_id", "id"))
    position_id: str | None = None
    type: DealType
    entry_type: DealEntryType | None = None  # None = neither opening nor closing
    symbol: str | None = None
    volume: float | None = None
    price: float | None = None
    time: datetime
    profit: float = 0.0
    stop_loss: float | None = None
    take_profit: float | None = None

    @field_validator("deal_id", mode="before")
    @classmethod
    def _coerce_deal_id(cls, v):
        # MT5 sends numeric tickets; ticket 0 is a valid deal id
        return v if v is None else str(v)

    @field_validator("position_id", mode="before")
    @classmethod
    def _coerce_position_id(cls, v):
        # Position 0 means "no position"
        if v is None or v == "" or v == 0 or v == "0":
            return None
        return str(v)

    @field_validator("time")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_balance(self) -> bool:
        return self.type == DealType.BALANCE

    @property
    def is_buy(self) -> bool:
        return self.type == DealType.BUY

"""Transaction model."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from merchant_ledger.data.keys import (
    RecordKind,
    encode_sort_key,
    to_epoch_millis,
    truncate_to_millis,
)
from merchant_ledger.utils.pii import mask_card_number


class TransactionType(str, Enum):
    ONLINE = "online"
    POS = "pos"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCESSFUL = "successful"
    CHARGEBACK = "chargeback"
    PAID_OUT = "paid_out"


class CardBrand(str, Enum):
    VISA = "visa"
    MASTERCARD = "mastercard"
    AMEX = "amex"
    DISCOVER = "discover"


class Transaction(BaseModel):
    """Represents a card transaction owned by a merchant."""

    id: str = Field(
        pattern=r"^[A-Za-z0-9._-]+$", description="Unique transaction identifier"
    )
    merchant_id: str = Field(description="Owning merchant identifier")
    settlement_merchant_id: str = Field(
        description="Merchant that receives the settled funds"
    )
    transaction_type: TransactionType = Field(description="Online or point of sale")
    status: TransactionStatus = Field(description="Lifecycle state")
    amount: Decimal = Field(description="Transaction amount")
    fees: Decimal = Field(default=Decimal("0"), description="Processing fees")
    currency: str = Field(default="EUR", description="Currency code (EUR, USD, GBP, etc.)")
    pan: str = Field(description="Masked card number")
    card_brand: CardBrand = Field(description="Card scheme")
    created_at: datetime = Field(description="Transaction date and time (UTC)")
    settled_at: datetime | None = Field(default=None, description="Settlement time")
    payout_id: str | None = Field(default=None, description="Payout the transaction was paid in")

    @field_validator("pan")
    @classmethod
    def _mask_pan(cls, value: str) -> str:
        return mask_card_number(value)

    @field_validator("created_at", "settled_at")
    @classmethod
    def _to_millis(cls, value: datetime | None) -> datetime | None:
        return truncate_to_millis(value) if value is not None else None

    @property
    def sort_key(self) -> str:
        return encode_sort_key(RecordKind.TRANSACTION, self.created_at, self.id)

    @property
    def tiebreak(self) -> int:
        return to_epoch_millis(self.created_at)

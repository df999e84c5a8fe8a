"""Merchant model."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from merchant_ledger.data.keys import truncate_to_millis


class MerchantLevel(str, Enum):
    """Three-tier merchant hierarchy: a group owns chains, a chain owns outlets."""

    OUTLET = "outlet"
    CHAIN = "chain"
    GROUP = "group"


class Merchant(BaseModel):
    """Represents a merchant."""

    id: str = Field(pattern=r"^[A-Za-z0-9._-]+$", description="Unique merchant identifier")
    name: str = Field(description="Merchant display name")
    founded_date: date = Field(description="Date the business was founded")
    industry: str = Field(description="Business category")
    tax_id: str = Field(description="VAT or tax registration number")
    num_employees: int = Field(default=0, ge=0, description="Headcount")
    description: str = Field(default="", description="Brief description of the merchant")
    created_at: datetime = Field(description="When the merchant was onboarded")
    level: MerchantLevel = Field(default=MerchantLevel.OUTLET, description="Hierarchy tier")
    sub_merchants: list[str] = Field(
        default_factory=list, description="Child merchant ids (chains and groups only)"
    )
    can_settle: bool = Field(default=False, description="May receive settlements")
    can_bill: bool = Field(default=False, description="May be billed")

    @field_validator("created_at")
    @classmethod
    def _to_millis(cls, value: datetime) -> datetime:
        return truncate_to_millis(value)

    @model_validator(mode="after")
    def _outlets_have_no_children(self) -> "Merchant":
        if self.level is MerchantLevel.OUTLET and self.sub_merchants:
            raise ValueError("outlet merchants cannot have sub-merchants")
        return self

    @property
    def accepts_settlement(self) -> bool:
        """Only an outlet with the settlement permission can be a settlement target."""
        return self.level is MerchantLevel.OUTLET and self.can_settle

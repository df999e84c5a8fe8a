"""Models module - Pydantic data models."""

from .transaction import Transaction, TransactionType, TransactionStatus, CardBrand
from .merchant import Merchant, MerchantLevel
from .page import Edge, Page, PageInfo

__all__ = [
    "Transaction",
    "TransactionType",
    "TransactionStatus",
    "CardBrand",
    "Merchant",
    "MerchantLevel",
    "Edge",
    "Page",
    "PageInfo",
]

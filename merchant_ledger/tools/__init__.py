"""Tools module - LangChain tools over the ledger."""

from .transactions import list_transactions, list_settlement_transactions
from .merchants import get_merchant_info

__all__ = [
    "list_transactions",
    "list_settlement_transactions",
    "get_merchant_info",
]

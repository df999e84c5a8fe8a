"""Merchant lookup tool."""

from typing import Any

from langchain_core.tools import tool

from merchant_ledger.errors import LedgerError, NotFoundError
from merchant_ledger.services.ledger import LedgerService, get_record_store
from merchant_ledger.utils.session import get_current_context


@tool
def get_merchant_info(merchant_id: str) -> dict[str, Any]:
    """Get detailed information about a merchant.

    Args:
        merchant_id: The merchant's ID

    Returns:
        Dictionary with merchant details or error message
    """
    context = get_current_context()
    service = LedgerService(get_record_store())

    try:
        merchant = service.get_merchant(context, merchant_id)
    except NotFoundError:
        return {
            "found": False,
            "message": f"Merchant {merchant_id} not found.",
        }
    except LedgerError as e:
        return {
            "found": False,
            "error": e.code,
            "message": str(e),
        }

    return {
        "found": True,
        "merchant": context.project(merchant),
        "accepts_settlement": merchant.accepts_settlement,
    }

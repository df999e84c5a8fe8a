"""Transaction listing tools."""

from typing import Any

from langchain_core.tools import tool

from merchant_ledger.auth import RequestContext
from merchant_ledger.errors import LedgerError
from merchant_ledger.models.page import Page
from merchant_ledger.services.ledger import LedgerService, get_record_store
from merchant_ledger.utils.session import get_current_context


def _page_result(page: Page, context: RequestContext) -> dict[str, Any]:
    txn_dicts = []
    for edge in page.edges:
        entry = context.project(edge.node)
        entry["cursor"] = edge.cursor
        txn_dicts.append(entry)

    count = len(txn_dicts)
    if count == 0:
        message = "No matching transactions found."
    elif page.page_info.has_next_page:
        message = f"Showing {count} transaction(s). More are available."
    else:
        message = f"Showing {count} transaction(s)."

    return {
        "success": True,
        "transactions": txn_dicts,
        "count": count,
        "page_info": page.page_info.model_dump(),
        "message": message,
    }


def _error_result(error: LedgerError) -> dict[str, Any]:
    return {
        "success": False,
        "error": error.code,
        "message": str(error),
    }


@tool
def list_transactions(
    merchant_id: str,
    year: int | None = None,
    month: int | None = None,
    day: int | None = None,
    card_brand: str | None = None,
    after: str | None = None,
    before: str | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    """List a merchant's transactions, newest first, one page at a time.

    Args:
        merchant_id: The owning merchant's ID
        year: Optional year filter (e.g. 2025)
        month: Optional month filter (1-12)
        day: Optional day of month filter
        card_brand: Optional card brand (visa, mastercard, amex, discover)
        after: Cursor of the last transaction already seen, to get older ones
        before: Cursor bounding the page from below
        limit: Page size (default 10)

    Returns:
        Dictionary with:
        - transactions: Transactions on this page, each with its cursor
        - page_info: has_next_page, has_previous_page, start/end cursors
        - message: Human-readable summary
    """
    context = get_current_context()
    service = LedgerService(get_record_store())

    try:
        page = service.list_transactions(
            context,
            merchant_id,
            year=year,
            month=month,
            day=day,
            card_brand=card_brand,
            after=after,
            before=before,
            limit=limit,
        )
    except LedgerError as e:
        return _error_result(e)

    return _page_result(page, context)


@tool
def list_settlement_transactions(
    settlement_merchant_id: str,
    after: str | None = None,
    before: str | None = None,
    limit: int | None = None,
) -> dict[str, Any]:
    """List transactions whose funds settle to a merchant, newest first.

    Args:
        settlement_merchant_id: The merchant receiving the settled funds
        after: Cursor of the last transaction already seen
        before: Cursor bounding the page from below
        limit: Page size (default 10)

    Returns:
        Same shape as list_transactions
    """
    context = get_current_context()
    service = LedgerService(get_record_store())

    try:
        page = service.list_settlement_transactions(
            context,
            settlement_merchant_id,
            after=after,
            before=before,
            limit=limit,
        )
    except LedgerError as e:
        return _error_result(e)

    return _page_result(page, context)

"""Page assembly."""

from merchant_ledger.data.cursor import encode_cursor
from merchant_ledger.data.keys import decode_sort_key, to_epoch_millis
from merchant_ledger.models.page import Edge, Page, PageInfo
from merchant_ledger.models.transaction import Transaction


def cursor_for(txn: Transaction) -> str:
    """Cursor built from the record's own key, valid as an after/before bound anywhere."""
    return encode_cursor(txn.sort_key, txn.tiebreak)


def cursor_for_key(sort_key: str) -> str:
    return encode_cursor(sort_key, to_epoch_millis(decode_sort_key(sort_key).timestamp))


def assemble_page(
    records: list[Transaction],
    has_next_page: bool,
    has_previous_page: bool,
    continuation_key: str | None = None,
) -> Page:
    """Wrap scanned records into a page with per-record cursors.

    Args:
        records: Records in scan order (newest first)
        has_next_page: The executor's continuation signal
        has_previous_page: Whether the request carried an "after" cursor
        continuation_key: Sort key where the store stopped, if it stopped early

    Returns:
        Page whose ``end_cursor`` resumes the scan even when the post-scan
        filter left no edges
    """
    edges = [Edge(cursor=cursor_for(txn), node=txn) for txn in records]

    start_cursor = edges[0].cursor if edges else None
    end_cursor = edges[-1].cursor if edges else None
    if has_next_page and continuation_key is not None:
        if not records or continuation_key < records[-1].sort_key:
            end_cursor = cursor_for_key(continuation_key)

    return Page(
        edges=edges,
        page_info=PageInfo(
            has_next_page=has_next_page,
            has_previous_page=has_previous_page,
            start_cursor=start_cursor,
            end_cursor=end_cursor,
        ),
    )

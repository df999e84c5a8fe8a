"""Intersection of a period range with cursor bounds.

Scans run newest first. An "after" cursor marks the last record the caller
has seen, so the next page lies strictly *below* it: the cursor tightens the
upper bound. A "before" cursor tightens the lower bound. Cursor bounds only
ever shrink the range.
"""

from merchant_ledger.data.keys import key_predecessor, key_successor
from merchant_ledger.data.ranges import KeyRange


def clamp_range(
    key_range: KeyRange,
    after: str | None = None,
    before: str | None = None,
) -> KeyRange:
    """Apply exclusive cursor bounds to an inclusive key range.

    Args:
        key_range: Range from the time filter
        after: Sort key of an "after" cursor (exclusive upper bound)
        before: Sort key of a "before" cursor (exclusive lower bound)

    Returns:
        The narrowed, still inclusive range. May be empty.
    """
    lower, upper = key_range.lower, key_range.upper

    if after is not None and after <= upper:
        upper = key_predecessor(after)

    if before is not None and before >= lower:
        lower = key_successor(before)

    return KeyRange(lower, upper)

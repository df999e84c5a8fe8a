"""Data module - key codecs, range resolution and record stores.

Only the model-free codecs are re-exported here; import stores from
``merchant_ledger.data.storage`` and ``merchant_ledger.data.dynamo``.
"""

from .keys import RecordKind, encode_sort_key, decode_sort_key, merchant_key
from .ranges import KeyRange, TimeFilter, build_range
from .cursor import CursorPosition, encode_cursor, decode_cursor
from .bounds import clamp_range

__all__ = [
    "RecordKind",
    "encode_sort_key",
    "decode_sort_key",
    "merchant_key",
    "KeyRange",
    "TimeFilter",
    "build_range",
    "CursorPosition",
    "encode_cursor",
    "decode_cursor",
    "clamp_range",
]

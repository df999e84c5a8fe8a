"""Sort key codec.

Transaction sort keys look like ``TRANSACTION#2025-01-05T13:04:11.250Z#txn-42``.
Every numeric component is zero-padded to a fixed width and rendered in UTC,
so for a fixed kind prefix the lexicographic key order equals chronological
order, with ties broken by the record id.

Keys are restricted to printable ASCII without spaces (0x21-0x7E). That makes
``key_successor`` and ``key_predecessor`` exact: they turn an exclusive bound
into an inclusive one that admits exactly the same set of keys.
"""

import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import NamedTuple

from merchant_ledger.errors import EncodingError


SEPARATOR = "#"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Sorts before every key character / after every key character.
KEY_FLOOR = " "
KEY_CEILING = "\x7f"

_TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d{3})Z$"
)
_DISAMBIGUATOR_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class RecordKind(str, Enum):
    TRANSACTION = "TRANSACTION"
    MERCHANT = "MERCHANT"


TIMESTAMPED_KINDS = frozenset({RecordKind.TRANSACTION})


class SortKeyParts(NamedTuple):
    kind: RecordKind
    timestamp: datetime
    disambiguator: str


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as e:
        raise EncodingError(f"Timestamp {value!r} cannot be represented in UTC") from e


def encode_timestamp(value: datetime) -> str:
    """Render a timestamp as fixed-width ISO-8601 UTC with millisecond precision.

    Naive datetimes are taken to be UTC already.
    """
    if not isinstance(value, datetime):
        raise EncodingError(f"Expected a datetime, got {type(value).__name__}")
    ts = _as_utc(value)
    return (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
        f"T{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"
        f".{ts.microsecond // 1000:03d}Z"
    )


def decode_timestamp(text: str) -> datetime:
    """Parse a timestamp produced by ``encode_timestamp``."""
    match = _TIMESTAMP_RE.match(text) if isinstance(text, str) else None
    if match is None:
        raise EncodingError(f"Malformed timestamp component: {text!r}")
    year, month, day, hour, minute, second, millis = (int(g) for g in match.groups())
    try:
        return datetime(
            year, month, day, hour, minute, second, millis * 1000, tzinfo=timezone.utc
        )
    except ValueError as e:
        raise EncodingError(f"Timestamp out of range: {text!r}") from e


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision, which keys and stored timestamps do not carry."""
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def to_epoch_millis(value: datetime) -> int:
    """Milliseconds since the Unix epoch, used as the cursor tiebreak."""
    delta = _as_utc(value) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def from_epoch_millis(millis: int) -> datetime:
    if isinstance(millis, bool) or not isinstance(millis, int):
        raise EncodingError(f"Expected integer milliseconds, got {millis!r}")
    try:
        return _EPOCH + timedelta(milliseconds=millis)
    except OverflowError as e:
        raise EncodingError(f"Epoch milliseconds out of range: {millis}") from e


def kind_prefix(kind: RecordKind) -> str:
    """``TRANSACTION#``: the lowest possible key of a kind."""
    return f"{RecordKind(kind).value}{SEPARATOR}"


def encode_sort_key(kind: RecordKind, timestamp: datetime, disambiguator: str) -> str:
    """Build an order-preserving sort key for a timestamped record."""
    try:
        kind = RecordKind(kind)
    except ValueError as e:
        raise EncodingError(f"Unknown record kind: {kind!r}") from e
    if kind not in TIMESTAMPED_KINDS:
        raise EncodingError(f"{kind.value} records are not keyed by time")
    if not isinstance(disambiguator, str) or not _DISAMBIGUATOR_RE.match(disambiguator):
        raise EncodingError(f"Invalid key disambiguator: {disambiguator!r}")
    return f"{kind_prefix(kind)}{encode_timestamp(timestamp)}{SEPARATOR}{disambiguator}"


def decode_sort_key(key: str) -> SortKeyParts:
    """Split a sort key back into (kind, timestamp, disambiguator)."""
    if not isinstance(key, str):
        raise EncodingError(f"Sort key must be a string, got {type(key).__name__}")
    parts = key.split(SEPARATOR)
    if len(parts) != 3:
        raise EncodingError(f"Malformed sort key: {key!r}")
    raw_kind, raw_ts, disambiguator = parts
    try:
        kind = RecordKind(raw_kind)
    except ValueError as e:
        raise EncodingError(f"Unknown record kind in key: {key!r}") from e
    if kind not in TIMESTAMPED_KINDS:
        raise EncodingError(f"{kind.value} keys carry no timestamp: {key!r}")
    if not _DISAMBIGUATOR_RE.match(disambiguator):
        raise EncodingError(f"Invalid key disambiguator in {key!r}")
    return SortKeyParts(kind, decode_timestamp(raw_ts), disambiguator)


def merchant_key(merchant_id: str) -> str:
    """Partition and sort key of a merchant record."""
    if not isinstance(merchant_id, str) or not _DISAMBIGUATOR_RE.match(merchant_id):
        raise EncodingError(f"Invalid merchant id: {merchant_id!r}")
    return f"{kind_prefix(RecordKind.MERCHANT)}{merchant_id}"


def _check_key_alphabet(key: str) -> None:
    if not key or any(not ("!" <= ch <= "~") for ch in key):
        raise EncodingError(f"Key outside the printable ASCII alphabet: {key!r}")


def key_successor(key: str) -> str:
    """Smallest inclusive lower bound admitting exactly the keys greater than ``key``."""
    _check_key_alphabet(key)
    return key + KEY_FLOOR


def key_predecessor(key: str) -> str:
    """Largest inclusive upper bound admitting exactly the keys less than ``key``."""
    _check_key_alphabet(key)
    return key[:-1] + chr(ord(key[-1]) - 1) + KEY_CEILING

"""Opaque pagination cursors.

A cursor is ``base64url("<checksum>:<json>")`` with the padding stripped.
The JSON body holds the sort key and the numeric tiebreak; the checksum is a
short BLAKE2b digest of the body so that a corrupted token is rejected
instead of decoding to a neighbouring key.
"""

import base64
import binascii
import hashlib
import hmac
import json
from typing import NamedTuple

from merchant_ledger.data.keys import decode_sort_key
from merchant_ledger.errors import EncodingError, InvalidCursorError


CURSOR_VERSION = 1
_DIGEST_SIZE = 8


class CursorPosition(NamedTuple):
    sort_key: str
    tiebreak: int


def _checksum(body: bytes) -> str:
    return hashlib.blake2b(body, digest_size=_DIGEST_SIZE).hexdigest()


def encode_cursor(sort_key: str, tiebreak: int) -> str:
    """Encode a resume point as an opaque, URL-safe token."""
    decode_sort_key(sort_key)
    if isinstance(tiebreak, bool) or not isinstance(tiebreak, int):
        raise EncodingError(f"Cursor tiebreak must be an integer, got {tiebreak!r}")
    body = json.dumps(
        {"v": CURSOR_VERSION, "k": sort_key, "t": tiebreak},
        separators=(",", ":"),
        sort_keys=True,
    ).encode()
    raw = _checksum(body).encode() + b":" + body
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(token: str) -> CursorPosition:
    """Decode a token produced by ``encode_cursor``.

    Raises:
        InvalidCursorError: if the token is not one this codec produced
    """
    if not isinstance(token, str) or not token:
        raise InvalidCursorError("Cursor must be a non-empty string")

    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError) as e:
        raise InvalidCursorError("Cursor is not valid base64") from e

    digest, sep, body = raw.partition(b":")
    if not sep or not hmac.compare_digest(digest, _checksum(body).encode()):
        raise InvalidCursorError("Cursor checksum mismatch")

    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidCursorError("Cursor body is not valid JSON") from e

    if not isinstance(payload, dict) or payload.get("v") != CURSOR_VERSION:
        raise InvalidCursorError("Unsupported cursor version")
    sort_key = payload.get("k")
    tiebreak = payload.get("t")
    if not isinstance(sort_key, str) or isinstance(tiebreak, bool) or not isinstance(tiebreak, int):
        raise InvalidCursorError("Cursor fields have the wrong types")

    try:
        decode_sort_key(sort_key)
    except EncodingError as e:
        raise InvalidCursorError(f"Cursor holds a malformed sort key: {e}") from e

    return CursorPosition(sort_key, tiebreak)

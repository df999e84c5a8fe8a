"""Typed conversion between store attribute maps and models.

Decoding fails fast: a missing or mistyped attribute raises StorageError
rather than being defaulted.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from merchant_ledger.data.keys import from_epoch_millis, merchant_key, to_epoch_millis
from merchant_ledger.errors import EncodingError, StorageError
from merchant_ledger.models.merchant import Merchant
from merchant_ledger.models.transaction import Transaction


PARTITION_KEY = "pk"
SORT_KEY = "sk"
SETTLEMENT_KEY = "settlement_merchant_id"

_TRANSACTION_REQUIRED = (
    PARTITION_KEY, SORT_KEY, "id", "merchant_id", SETTLEMENT_KEY,
    "transaction_type", "status", "amount", "currency", "pan",
    "card_brand", "created_at",
)
_MERCHANT_REQUIRED = (
    PARTITION_KEY, SORT_KEY, "id", "name", "founded_date", "industry",
    "tax_id", "num_employees", "description", "created_at", "level",
    "sub_merchants", "can_settle", "can_bill",
)


def _require(item: dict[str, Any], names: tuple[str, ...], what: str) -> None:
    missing = [name for name in names if item.get(name) is None]
    if missing:
        raise StorageError(f"Malformed {what} record: missing {', '.join(missing)}")


def _integer(item: dict[str, Any], name: str) -> int:
    value = item[name]
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal) and value == value.to_integral_value():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise StorageError(f"Attribute {name} must be an integer, got {value!r}")
    return value


def _millis(item: dict[str, Any], name: str) -> datetime:
    value = _integer(item, name)
    try:
        return from_epoch_millis(value)
    except EncodingError as e:
        raise StorageError(str(e)) from e


def _decimal(item: dict[str, Any], name: str) -> Decimal:
    value = item[name]
    if isinstance(value, bool) or not isinstance(value, (Decimal, int)):
        raise StorageError(f"Attribute {name} must be numeric, got {value!r}")
    return Decimal(value)


def transaction_to_item(txn: Transaction) -> dict[str, Any]:
    item = {
        PARTITION_KEY: txn.merchant_id,
        SORT_KEY: txn.sort_key,
        "id": txn.id,
        "merchant_id": txn.merchant_id,
        SETTLEMENT_KEY: txn.settlement_merchant_id,
        "transaction_type": txn.transaction_type.value,
        "status": txn.status.value,
        "amount": txn.amount,
        "fees": txn.fees,
        "currency": txn.currency,
        "pan": txn.pan,
        "card_brand": txn.card_brand.value,
        "created_at": to_epoch_millis(txn.created_at),
    }
    if txn.settled_at is not None:
        item["settled_at"] = to_epoch_millis(txn.settled_at)
    if txn.payout_id is not None:
        item["payout_id"] = txn.payout_id
    return item


def transaction_from_item(item: dict[str, Any]) -> Transaction:
    """Decode a transaction attribute map."""
    _require(item, _TRANSACTION_REQUIRED, "transaction")
    data = {
        "id": item["id"],
        "merchant_id": item["merchant_id"],
        "settlement_merchant_id": item[SETTLEMENT_KEY],
        "transaction_type": item["transaction_type"],
        "status": item["status"],
        "amount": _decimal(item, "amount"),
        "fees": _decimal(item, "fees") if item.get("fees") is not None else Decimal("0"),
        "currency": item["currency"],
        "pan": item["pan"],
        "card_brand": item["card_brand"],
        "created_at": _millis(item, "created_at"),
        "settled_at": _millis(item, "settled_at") if item.get("settled_at") is not None else None,
        "payout_id": item.get("payout_id"),
    }
    try:
        txn = Transaction.model_validate(data)
    except PydanticValidationError as e:
        raise StorageError(f"Malformed transaction record {item.get('id')!r}: {e}") from e

    if item[PARTITION_KEY] != txn.merchant_id or item[SORT_KEY] != txn.sort_key:
        raise StorageError(f"Transaction {txn.id} is stored under inconsistent keys")
    return txn


def merchant_to_item(merchant: Merchant) -> dict[str, Any]:
    key = merchant_key(merchant.id)
    return {
        PARTITION_KEY: key,
        SORT_KEY: key,
        "id": merchant.id,
        "name": merchant.name,
        "founded_date": merchant.founded_date.isoformat(),
        "industry": merchant.industry,
        "tax_id": merchant.tax_id,
        "num_employees": merchant.num_employees,
        "description": merchant.description,
        "created_at": to_epoch_millis(merchant.created_at),
        "level": merchant.level.value,
        "sub_merchants": list(merchant.sub_merchants),
        "can_settle": merchant.can_settle,
        "can_bill": merchant.can_bill,
    }


def merchant_from_item(item: dict[str, Any]) -> Merchant:
    """Decode a merchant attribute map."""
    _require(item, _MERCHANT_REQUIRED, "merchant")
    for name in ("can_settle", "can_bill"):
        if not isinstance(item[name], bool):
            raise StorageError(f"Attribute {name} must be a boolean, got {item[name]!r}")
    for name in ("id", "name", "founded_date", "industry", "tax_id", "description", "level"):
        if not isinstance(item[name], str):
            raise StorageError(f"Attribute {name} must be a string, got {item[name]!r}")
    sub_merchants = item["sub_merchants"]
    if not isinstance(sub_merchants, list) or not all(isinstance(s, str) for s in sub_merchants):
        raise StorageError(f"Attribute sub_merchants must be a list of ids, got {sub_merchants!r}")

    data = {
        "id": item["id"],
        "name": item["name"],
        "founded_date": item["founded_date"],
        "industry": item["industry"],
        "tax_id": item["tax_id"],
        "num_employees": _integer(item, "num_employees"),
        "description": item["description"],
        "created_at": _millis(item, "created_at"),
        "level": item["level"],
        "sub_merchants": list(sub_merchants),
        "can_settle": item["can_settle"],
        "can_bill": item["can_bill"],
    }
    try:
        return Merchant.model_validate(data)
    except PydanticValidationError as e:
        raise StorageError(f"Malformed merchant record {item.get('id')!r}: {e}") from e

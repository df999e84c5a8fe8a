"""Record store contract and the in-memory implementation."""

import copy
import json
from bisect import bisect_left, bisect_right, insort
from dataclasses import dataclass, field
from enum import Enum
from operator import itemgetter
from pathlib import Path
from typing import Any, Mapping, Protocol

from merchant_ledger.config import settings
from merchant_ledger.data.ranges import KeyRange
from merchant_ledger.data.records import (
    PARTITION_KEY,
    SETTLEMENT_KEY,
    SORT_KEY,
    merchant_to_item,
    transaction_to_item,
)
from merchant_ledger.errors import StorageError
from merchant_ledger.models.merchant import Merchant
from merchant_ledger.models.transaction import Transaction
from merchant_ledger.utils.logging import get_logger


logger = get_logger("storage", settings.log_level)


class IndexName(str, Enum):
    """Which view of the records a scan runs against."""

    PRIMARY = "primary"          # partitioned by owning merchant
    SETTLEMENT = "settlement"    # partitioned by settlement merchant


@dataclass
class ScanResult:
    """Raw outcome of one bounded scan."""

    items: list[dict[str, Any]] = field(default_factory=list)
    # Sort key of the last record the store evaluated, set only when records
    # remain in range beyond it.
    last_evaluated_key: str | None = None

    @property
    def has_more(self) -> bool:
        return self.last_evaluated_key is not None


class RecordStore(Protocol):
    def query(
        self,
        index: IndexName,
        partition: str,
        key_range: KeyRange,
        limit: int,
        filters: Mapping[str, str] | None = None,
    ) -> ScanResult:
        """Evaluate at most ``limit`` records of ``key_range`` newest first.

        ``filters`` are equality predicates applied after the scan; they may
        reduce the number of returned items below ``limit``.
        """

    def get_item(self, partition: str, sort_key: str) -> dict[str, Any] | None:
        """Single-item lookup by primary key."""

    def put_item(self, item: dict[str, Any]) -> None:
        """Insert or replace an item."""


class RecordWriterMixin:
    """Model-level writes shared by store implementations."""

    def put_transaction(self, txn: Transaction) -> None:
        self.put_item(transaction_to_item(txn))

    def put_merchant(self, merchant: Merchant) -> None:
        self.put_item(merchant_to_item(merchant))


def _matches(item: dict[str, Any], filters: Mapping[str, str] | None) -> bool:
    if not filters:
        return True
    return all(item.get(name) == value for name, value in filters.items())


class InMemoryRecordStore(RecordWriterMixin):
    """Sorted in-memory store with the same scan semantics as DynamoDB.

    Each partition keeps its sort keys in a sorted list; the settlement index
    keeps ``(sort_key, partition)`` pairs sorted by sort key.
    """

    def __init__(self) -> None:
        self._items: dict[tuple[str, str], dict[str, Any]] = {}
        self._partitions: dict[str, list[str]] = {}
        self._settlement_index: dict[str, list[tuple[str, str]]] = {}

    @classmethod
    def from_files(cls, data_dir: Path) -> "InMemoryRecordStore":
        """Load ``merchants.json`` and ``transactions.json`` from ``data_dir``."""
        store = cls()
        merchants_file = data_dir / "merchants.json"
        transactions_file = data_dir / "transactions.json"

        for merchant in cls._load(merchants_file):
            store.put_merchant(Merchant.model_validate(merchant))
        for txn in cls._load(transactions_file):
            store.put_transaction(Transaction.model_validate(txn))

        logger.info(f"Loaded {len(store)} record(s) from {data_dir}")
        return store

    @staticmethod
    def _load(path: Path) -> list[dict]:
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read {path}: {e}") from e
        if not isinstance(data, list):
            raise StorageError(f"{path} must contain a JSON list")
        return data

    def __len__(self) -> int:
        return len(self._items)

    def put_item(self, item: dict[str, Any]) -> None:
        pk, sk = item[PARTITION_KEY], item[SORT_KEY]
        previous = self._items.get((pk, sk))
        if previous is None:
            insort(self._partitions.setdefault(pk, []), sk)
        elif previous.get(SETTLEMENT_KEY) is not None:
            self._settlement_index[previous[SETTLEMENT_KEY]].remove((sk, pk))

        self._items[(pk, sk)] = copy.deepcopy(item)
        settlement = item.get(SETTLEMENT_KEY)
        if settlement is not None:
            insort(self._settlement_index.setdefault(settlement, []), (sk, pk))

    def get_item(self, partition: str, sort_key: str) -> dict[str, Any] | None:
        item = self._items.get((partition, sort_key))
        return copy.deepcopy(item) if item is not None else None

    def query(
        self,
        index: IndexName,
        partition: str,
        key_range: KeyRange,
        limit: int,
        filters: Mapping[str, str] | None = None,
    ) -> ScanResult:
        if index is IndexName.PRIMARY:
            keys = self._partitions.get(partition, [])
            lo = bisect_left(keys, key_range.lower)
            hi = bisect_right(keys, key_range.upper)
            in_range = [(sk, partition) for sk in keys[lo:hi]]
        else:
            entries = self._settlement_index.get(partition, [])
            lo = bisect_left(entries, key_range.lower, key=itemgetter(0))
            hi = bisect_right(entries, key_range.upper, key=itemgetter(0))
            in_range = entries[lo:hi]

        in_range.reverse()
        evaluated = in_range[:limit]
        items = [
            copy.deepcopy(self._items[(pk, sk)])
            for sk, pk in evaluated
            if _matches(self._items[(pk, sk)], filters)
        ]
        last_key = evaluated[-1][0] if evaluated and len(in_range) > limit else None
        return ScanResult(items=items, last_evaluated_key=last_key)

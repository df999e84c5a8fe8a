"""Single bounded scan against the record store."""

from dataclasses import dataclass
from typing import Mapping

from merchant_ledger.config import settings
from merchant_ledger.data.ranges import KeyRange
from merchant_ledger.data.records import transaction_from_item
from merchant_ledger.data.storage import IndexName, RecordStore
from merchant_ledger.errors import LedgerError, StorageError
from merchant_ledger.models.transaction import Transaction
from merchant_ledger.utils.logging import get_logger


logger = get_logger("executor", settings.log_level)


@dataclass
class ScanOutcome:
    records: list[Transaction]
    has_more: bool
    # Where the store stopped; may lie past the last returned record when a
    # post-scan filter dropped the tail of the page.
    continuation_key: str | None = None


class QueryExecutor:
    """Issues exactly one descending range scan per call. Never retries."""

    def __init__(self, store: RecordStore):
        self.store = store

    def scan(
        self,
        index: IndexName,
        partition: str,
        key_range: KeyRange,
        limit: int,
        filters: Mapping[str, str] | None = None,
    ) -> ScanOutcome:
        if key_range.is_empty:
            logger.debug(f"Empty range for {index.value}:{partition}, skipping store call")
            return ScanOutcome(records=[], has_more=False)

        try:
            result = self.store.query(index, partition, key_range, limit, filters)
        except LedgerError:
            raise
        except Exception as e:
            # Store adapters translate their own errors; anything else is a
            # failure of the collaborator.
            raise StorageError(f"Record store query failed: {e}") from e

        records = [transaction_from_item(item) for item in result.items]

        if index is IndexName.SETTLEMENT:
            for txn in records:
                if txn.settlement_merchant_id != partition:
                    raise StorageError(
                        f"Settlement index returned {txn.id} for "
                        f"{txn.settlement_merchant_id}, expected {partition}"
                    )

        for txn in records:
            if txn.sort_key not in key_range:
                raise StorageError(f"Store returned {txn.id} outside the requested range")

        logger.debug(
            f"Scanned {index.value}:{partition} [{key_range.lower}, {key_range.upper}] "
            f"-> {len(records)} record(s), has_more={result.has_more}"
        )
        return ScanOutcome(
            records=records,
            has_more=result.has_more,
            continuation_key=result.last_evaluated_key,
        )

"""Ledger listing and lookup operations."""

from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, TypeVar

from merchant_ledger.auth import RequestContext
from merchant_ledger.config import PagingConfig, settings
from merchant_ledger.data.bounds import clamp_range
from merchant_ledger.data.cursor import decode_cursor
from merchant_ledger.data.keys import RecordKind, merchant_key
from merchant_ledger.data.ranges import TimeFilter, build_range
from merchant_ledger.data.records import merchant_from_item
from merchant_ledger.data.storage import IndexName, InMemoryRecordStore, RecordStore
from merchant_ledger.errors import (
    EncodingError,
    LedgerError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from merchant_ledger.models.merchant import Merchant
from merchant_ledger.models.page import Page
from merchant_ledger.models.transaction import CardBrand
from merchant_ledger.services.executor import QueryExecutor
from merchant_ledger.services.pages import assemble_page
from merchant_ledger.utils.logging import get_logger


logger = get_logger("ledger", settings.log_level)

T = TypeVar("T")


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    """Shared store handle for the process, built from settings on first use."""
    if settings.store_backend == "dynamodb":
        from merchant_ledger.data.dynamo import DynamoRecordStore

        return DynamoRecordStore.from_config(settings.dynamodb)
    return InMemoryRecordStore.from_files(settings.data_dir)


class LedgerService:
    """Keyset-paginated transaction listings and merchant lookup.

    Every argument is validated and every cursor decoded before the store is
    touched. Errors are terminal for the request: no partial page is ever
    returned.
    """

    def __init__(self, store: RecordStore, paging: PagingConfig | None = None):
        self.store = store
        self.paging = paging or settings.paging
        self.executor = QueryExecutor(store)

    def list_transactions(
        self,
        context: RequestContext,
        merchant_id: str,
        year: int | None = None,
        month: int | None = None,
        day: int | None = None,
        card_brand: CardBrand | str | None = None,
        after: str | None = None,
        before: str | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> Page:
        """List a merchant's transactions, newest first.

        Args:
            context: Caller's request context
            merchant_id: Owning merchant
            year: Optional year filter
            month: Optional month filter (defaults the year to the current one)
            day: Optional day filter (defaults month and year to the current ones)
            card_brand: Optional card brand equality filter
            after: Cursor of the last record seen; returns older records
            before: Cursor bounding the page from below
            limit: Records to evaluate (default from settings)
            now: Reference time for defaults and the all-time upper bound

        Returns:
            Page of transactions with per-record cursors
        """
        arguments = {
            "merchant_id": merchant_id, "year": year, "month": month, "day": day,
            "card_brand": card_brand, "after": after, "before": before, "limit": limit,
        }

        def run() -> Page:
            context.require("Query.transactions")
            partition = self._partition(merchant_id, "merchant_id")
            page_size = self._page_size(limit)
            time_filter = TimeFilter.parse(year, month, day)
            filters = {"card_brand": self._card_brand(card_brand).value} if card_brand is not None else None
            return self._list(
                IndexName.PRIMARY, partition, time_filter, after, before,
                page_size, filters, now,
            )

        return self._audited(context, "list_transactions", arguments, run)

    def list_settlement_transactions(
        self,
        context: RequestContext,
        settlement_merchant_id: str,
        after: str | None = None,
        before: str | None = None,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> Page:
        """List transactions settled to a merchant via the settlement index."""
        arguments = {
            "settlement_merchant_id": settlement_merchant_id,
            "after": after, "before": before, "limit": limit,
        }

        def run() -> Page:
            context.require("Query.settlementTransactions")
            partition = self._partition(settlement_merchant_id, "settlement_merchant_id")
            page_size = self._page_size(limit)
            return self._list(
                IndexName.SETTLEMENT, partition, None, after, before,
                page_size, None, now,
            )

        return self._audited(context, "list_settlement_transactions", arguments, run)

    def get_merchant(self, context: RequestContext, merchant_id: str) -> Merchant:
        """Look up a single merchant.

        Raises:
            NotFoundError: if no merchant has this id
        """

        def run() -> Merchant:
            context.require("Query.merchant")
            try:
                key = merchant_key(self._partition(merchant_id, "merchant_id"))
            except EncodingError as e:
                raise ValidationError(str(e)) from e
            try:
                item = self.store.get_item(key, key)
            except LedgerError:
                raise
            except Exception as e:
                raise StorageError(f"Record store lookup failed: {e}") from e
            if item is None:
                raise NotFoundError(f"Merchant {merchant_id} not found")
            return merchant_from_item(item)

        return self._audited(context, "get_merchant", {"merchant_id": merchant_id}, run)

    def _list(
        self,
        index: IndexName,
        partition: str,
        time_filter: TimeFilter | None,
        after: str | None,
        before: str | None,
        limit: int,
        filters: dict[str, str] | None,
        now: datetime | None,
    ) -> Page:
        after_position = decode_cursor(after) if after is not None else None
        before_position = decode_cursor(before) if before is not None else None

        key_range = clamp_range(
            build_range(RecordKind.TRANSACTION, time_filter, now),
            after=after_position.sort_key if after_position else None,
            before=before_position.sort_key if before_position else None,
        )
        outcome = self.executor.scan(index, partition, key_range, limit, filters)
        return assemble_page(
            outcome.records,
            has_next_page=outcome.has_more,
            has_previous_page=after_position is not None,
            continuation_key=outcome.continuation_key,
        )

    def _page_size(self, limit: int | None) -> int:
        if limit is None:
            return self.paging.default_page_size
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError(f"limit must be an integer, got {limit!r}")
        if not 1 <= limit <= self.paging.max_page_size:
            raise ValidationError(
                f"limit must be between 1 and {self.paging.max_page_size}, got {limit}"
            )
        return limit

    @staticmethod
    def _partition(value: str, name: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name} is required")
        return value

    @staticmethod
    def _card_brand(value: CardBrand | str) -> CardBrand:
        try:
            return CardBrand(value.lower() if isinstance(value, str) else value)
        except ValueError as e:
            allowed = ", ".join(b.value for b in CardBrand)
            raise ValidationError(f"Unknown card brand {value!r} (expected one of {allowed})") from e

    def _audited(
        self,
        context: RequestContext,
        operation: str,
        arguments: dict[str, Any],
        run: Callable[[], T],
    ) -> T:
        try:
            result = run()
        except LedgerError as e:
            logger.info(f"{operation} rejected: {type(e).__name__}: {e}")
            if context.audit is not None:
                context.audit.log_query_failed(operation, arguments, e)
            raise

        if context.audit is not None:
            if isinstance(result, Page):
                context.audit.log_query(
                    operation, arguments, len(result), result.page_info.has_next_page
                )
            else:
                context.audit.log_query(operation, arguments, 1, False)
        return result

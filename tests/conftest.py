"""Shared fixtures for the ledger tests."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from merchant_ledger.auth import RequestContext, Role
from merchant_ledger.config import PagingConfig
from merchant_ledger.data.storage import InMemoryRecordStore
from merchant_ledger.models.merchant import Merchant, MerchantLevel
from merchant_ledger.models.transaction import Transaction
from merchant_ledger.services.ledger import LedgerService


NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def build_transaction(
    txn_id: str,
    created_at: datetime,
    merchant_id: str = "merchant-X",
    settlement_merchant_id: str | None = None,
    card_brand: str = "visa",
    **overrides,
) -> Transaction:
    data = {
        "id": txn_id,
        "merchant_id": merchant_id,
        "settlement_merchant_id": settlement_merchant_id or merchant_id,
        "transaction_type": "online",
        "status": "successful",
        "amount": Decimal("42.50"),
        "fees": Decimal("1.20"),
        "currency": "EUR",
        "pan": "4111111111111111",
        "card_brand": card_brand,
        "created_at": created_at,
    }
    data.update(overrides)
    return Transaction(**data)


@pytest.fixture
def make_txn():
    """Factory for transactions with sensible defaults."""
    return build_transaction


@pytest.fixture
def now():
    """Fixed reference time for range defaults."""
    return NOW


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def five_day_store(store):
    """Merchant X with one transaction per day, 2025-01-01 .. 2025-01-05."""
    for day in range(1, 6):
        store.put_transaction(
            build_transaction(f"d{day:02d}", datetime(2025, 1, day, 9, 30, tzinfo=timezone.utc))
        )
    return store


@pytest.fixture
def merchant():
    return Merchant(
        id="merchant-X",
        name="Uniqlo",
        founded_date="2020-01-01",
        industry="Retail",
        tax_id="VAT123456",
        num_employees=100,
        description="A sample merchant",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        level=MerchantLevel.OUTLET,
        can_settle=True,
    )


@pytest.fixture
def reader():
    return RequestContext(role=Role.READER, user_id="user_001")


@pytest.fixture
def admin():
    return RequestContext(role=Role.ADMIN, user_id="admin_001")


@pytest.fixture
def service(store):
    return LedgerService(store, PagingConfig())

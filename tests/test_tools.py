"""Tests for the tools module."""

from datetime import datetime, timezone

import pytest

from merchant_ledger.auth import RequestContext, Role
from merchant_ledger.tools.merchants import get_merchant_info
from merchant_ledger.tools.transactions import list_settlement_transactions, list_transactions
from merchant_ledger.utils.session import reset_current_context, set_current_context


@pytest.fixture
def ledger_store(five_day_store, merchant, make_txn):
    """Five days of merchant-X transactions plus the merchant record."""
    five_day_store.put_merchant(merchant)
    five_day_store.put_transaction(make_txn(
        "s01", datetime(2025, 2, 1, tzinfo=timezone.utc),
        merchant_id="outlet-9", settlement_merchant_id="merchant-X",
    ))
    return five_day_store


@pytest.fixture
def patched_store(ledger_store, monkeypatch):
    monkeypatch.setattr("merchant_ledger.tools.transactions.get_record_store", lambda: ledger_store)
    monkeypatch.setattr("merchant_ledger.tools.merchants.get_record_store", lambda: ledger_store)
    return ledger_store


@pytest.fixture
def as_reader():
    """Run the test as a reader."""
    token = set_current_context(RequestContext(role=Role.READER, user_id="user_001"))
    yield
    reset_current_context(token)


@pytest.fixture
def as_admin():
    """Run the test as an admin."""
    token = set_current_context(RequestContext(role=Role.ADMIN, user_id="admin_001"))
    yield
    reset_current_context(token)


class TestListTransactions:
    """Tests for the list_transactions tool."""

    def test_first_page(self, patched_store, as_reader):
        """Test listing the newest transactions of a year."""
        result = list_transactions.invoke({"merchant_id": "merchant-X", "year": 2025, "limit": 3})

        assert result["success"] is True
        assert result["count"] == 3
        assert [t["id"] for t in result["transactions"]] == ["d05", "d04", "d03"]
        assert result["page_info"]["has_next_page"] is True
        assert "More are available" in result["message"]

    def test_follow_end_cursor(self, patched_store, as_reader):
        """Test resuming from the end cursor of the previous page."""
        first = list_transactions.invoke({"merchant_id": "merchant-X", "year": 2025, "limit": 3})

        second = list_transactions.invoke({
            "merchant_id": "merchant-X",
            "year": 2025,
            "limit": 3,
            "after": first["page_info"]["end_cursor"],
        })

        assert [t["id"] for t in second["transactions"]] == ["d02", "d01"]
        assert second["page_info"]["has_next_page"] is False
        assert second["page_info"]["has_previous_page"] is True

    def test_each_transaction_has_cursor(self, patched_store, as_reader):
        """Test that every listed transaction carries its own cursor."""
        result = list_transactions.invoke({"merchant_id": "merchant-X", "limit": 2})

        cursors = [t["cursor"] for t in result["transactions"]]
        assert all(cursors)
        assert cursors[-1] == result["page_info"]["end_cursor"]

    def test_card_numbers_are_masked(self, patched_store, as_reader):
        """Test that only the last four digits are ever returned."""
        result = list_transactions.invoke({"merchant_id": "merchant-X"})

        for txn in result["transactions"]:
            assert txn["pan"] == "****1111"

    def test_empty_month(self, patched_store, as_reader):
        """Test a month without transactions."""
        result = list_transactions.invoke({"merchant_id": "merchant-X", "year": 2025, "month": 3})

        assert result["success"] is True
        assert result["count"] == 0
        assert result["message"] == "No matching transactions found."

    def test_invalid_cursor(self, patched_store, as_reader):
        """Test that a tampered cursor is reported, not ignored."""
        result = list_transactions.invoke({"merchant_id": "merchant-X", "after": "not-a-cursor"})

        assert result["success"] is False
        assert result["error"] == "invalid_cursor"

    def test_invalid_limit(self, patched_store, as_reader):
        """Test an out-of-range page size."""
        result = list_transactions.invoke({"merchant_id": "merchant-X", "limit": 500})

        assert result["success"] is False
        assert result["error"] == "validation_error"

    def test_unknown_card_brand(self, patched_store, as_reader):
        """Test filtering by a brand the ledger does not know."""
        result = list_transactions.invoke({"merchant_id": "merchant-X", "card_brand": "diners"})

        assert result["success"] is False
        assert result["error"] == "validation_error"

    def test_without_request_context(self, patched_store):
        """Test that no role is assumed when the session has none."""
        with pytest.raises(RuntimeError):
            list_transactions.invoke({"merchant_id": "merchant-X"})


class TestListSettlementTransactions:
    """Tests for the list_settlement_transactions tool."""

    def test_lists_settled_transactions(self, patched_store, as_reader):
        """Test listing what settles to a merchant, across owning merchants."""
        result = list_settlement_transactions.invoke({"settlement_merchant_id": "merchant-X"})

        assert result["success"] is True
        ids = [t["id"] for t in result["transactions"]]
        assert ids == ["s01", "d05", "d04", "d03", "d02", "d01"]
        assert result["transactions"][0]["merchant_id"] == "outlet-9"

    def test_unknown_merchant(self, patched_store, as_reader):
        """Test a merchant nothing settles to."""
        result = list_settlement_transactions.invoke({"settlement_merchant_id": "merchant-Z"})

        assert result["success"] is True
        assert result["count"] == 0


class TestGetMerchantInfo:
    """Tests for the get_merchant_info tool."""

    def test_found_merchant(self, patched_store, as_reader):
        """Test retrieving an existing merchant."""
        result = get_merchant_info.invoke({"merchant_id": "merchant-X"})

        assert result["found"] is True
        assert result["merchant"]["name"] == "Uniqlo"
        assert result["accepts_settlement"] is True

    def test_reader_does_not_see_tax_id(self, patched_store, as_reader):
        """Test that admin-only fields are dropped for readers."""
        result = get_merchant_info.invoke({"merchant_id": "merchant-X"})

        assert "tax_id" not in result["merchant"]

    def test_admin_sees_tax_id(self, patched_store, as_admin):
        """Test that admins see every merchant field."""
        result = get_merchant_info.invoke({"merchant_id": "merchant-X"})

        assert result["merchant"]["tax_id"] == "VAT123456"

    def test_not_found_merchant(self, patched_store, as_reader):
        """Test with a nonexistent merchant ID."""
        result = get_merchant_info.invoke({"merchant_id": "merchant-999"})

        assert result["found"] is False
        assert "error" not in result

    def test_invalid_merchant_id(self, patched_store, as_reader):
        """Test with an ID that cannot be a merchant key."""
        result = get_merchant_info.invoke({"merchant_id": "merchant X"})

        assert result["found"] is False
        assert result["error"] == "validation_error"

"""
Tests for SqlTransactionRepository
"""
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.domain.errors import StorageError
from app.domain.transaction import Transaction, TransactionCategory
from app.infrastructure.repositories.base import (
    DateRangeFilter, FilterOptions, OrderBy, SortDirection,
)
from app.infrastructure.repositories.transactions import SqlTransactionRepository, TransactionChanges

USER = "user-1"


def _tx(amount, category="groceries", day=date(2024, 6, 10), user_id=USER, description=None):
    return Transaction.create(
        user_id=user_id, amount=Decimal(amount), category=category, date=day, description=description,
    )


@pytest.fixture
def repo(db_session):
    return SqlTransactionRepository(db_session)


class TestCrud:
    def test_create_and_find(self, repo):
        tx = _tx("25.99", description="Weekly shop")
        assert repo.create(tx).is_ok()

        found = repo.find_by_id(tx.id).value
        assert found.amount == Decimal("25.99")
        assert found.category is TransactionCategory.GROCERIES
        assert found.description == "Weekly shop"
        assert found.date == date(2024, 6, 10)

    def test_find_missing_returns_none(self, repo):
        assert repo.find_by_id("nope").value is None

    def test_update_only_given_fields(self, repo):
        tx = _tx("10.00", description="keep me")
        repo.create(tx)

        updated = repo.update(tx.id, TransactionChanges(amount=Decimal("12.00"))).value
        assert updated.amount == Decimal("12.00")
        assert updated.description == "keep me"
        assert updated.category is TransactionCategory.GROCERIES

    def test_update_missing_is_storage_error(self, repo):
        result = repo.update("nope", TransactionChanges(amount=Decimal("1")))
        assert isinstance(result.error, StorageError)

    def test_delete(self, repo):
        tx = _tx("1.00")
        repo.create(tx)
        assert repo.delete(tx.id).value is True
        assert repo.delete(tx.id).value is False


class TestListing:
    def test_user_isolation(self, repo):
        repo.create(_tx("1.00"))
        repo.create(_tx("2.00", user_id="someone-else"))
        assert len(repo.find_by_user_id(USER).value) == 1

    def test_default_order_is_creation_order(self, repo):
        ids = [repo.create(_tx(str(i))).value.id for i in range(1, 4)]
        assert [t.id for t in repo.find_by_user_id(USER).value] == ids

    def test_desc_order_with_limit(self, repo):
        ids = [repo.create(_tx(str(i))).value.id for i in range(1, 5)]
        options = FilterOptions(order_by=OrderBy.CREATED_AT, direction=SortDirection.DESC, limit=2)
        assert [t.id for t in repo.find_by_user_id(USER, options).value] == ids[::-1][:2]

    def test_order_by_unknown_column_raises(self, repo):
        with pytest.raises(ValueError):
            repo.find_by_user_id(USER, FilterOptions(order_by=OrderBy.DUE_DATE))

    def test_date_range_inclusive(self, repo):
        for day in (1, 5, 10, 15):
            repo.create(_tx("1.00", day=date(2024, 6, day)))
        rows = repo.find_by_date_range(USER, DateRangeFilter(date(2024, 6, 5), date(2024, 6, 10))).value
        assert [t.date.day for t in rows] == [10, 5]

    def test_total_spent(self, repo):
        repo.create(_tx("10.50", day=date(2024, 5, 1)))
        repo.create(_tx("4.50", day=date(2024, 6, 1)))
        assert repo.get_total_spent(USER).value == Decimal("15.00")
        assert repo.get_total_spent(USER, since=date(2024, 5, 15)).value == Decimal("4.50")

    def test_total_spent_no_rows(self, repo):
        assert repo.get_total_spent(USER).value == Decimal("0")


class TestSpendingAnalysis:
    def test_groups_by_category(self, repo):
        for amount in ("25.99", "12.50", "5.00"):
            repo.create(_tx(amount, "groceries"))
        repo.create(_tx("100.00", "utilities"))

        rows = repo.analyze_spending_by_category(USER, since=date(2024, 6, 1), until=date(2024, 6, 30)).value
        assert [r.category for r in rows] == [TransactionCategory.UTILITIES, TransactionCategory.GROCERIES]
        groceries = rows[1]
        assert groceries.total_amount == Decimal("43.49")
        assert groceries.transaction_count == 3

    def test_window_excludes_older(self, repo):
        repo.create(_tx("9.00", day=date(2024, 1, 1)))
        rows = repo.analyze_spending_by_category(USER, since=date(2024, 6, 1)).value
        assert rows == []


class TestStorageFailures:
    def test_sqlalchemy_error_becomes_storage_error(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.side_effect = OperationalError("SELECT", {}, Exception("down"))
        result = SqlTransactionRepository(db).find_by_id("x")

        assert isinstance(result.error, StorageError)
        assert result.error.operation == "select"
        db.rollback.assert_called_once()

"""
Tests for TransactionService
"""
from datetime import date, timedelta
from decimal import Decimal

from app.domain.errors import ValidationError
from app.domain.transaction import TransactionCategory

USER = "user-1"


def _payload(**overrides):
    payload = {"userId": USER, "amount": "10.00", "category": "groceries", "date": "2024-06-10"}
    payload.update(overrides)
    return payload


class TestCreateTransaction:
    def test_create_with_camel_case_payload(self, services):
        tx = services.transactions.create_transaction(_payload(description="Bread")).value
        assert tx.amount == Decimal("10.00")
        assert tx.category is TransactionCategory.GROCERIES
        assert tx.date == date(2024, 6, 10)
        assert tx.description == "Bread"

    def test_non_positive_amount_rejected(self, services):
        for amount in ("0", "-5"):
            result = services.transactions.create_transaction(_payload(amount=amount))
            assert isinstance(result.error, ValidationError)
            assert result.error.field == "amount"

    def test_unknown_category_rejected(self, services):
        result = services.transactions.create_transaction(_payload(category="rent"))
        assert result.error.field == "category"

    def test_bad_date_rejected(self, services):
        result = services.transactions.create_transaction(_payload(date="10.06.2024"))
        assert result.error.field == "date"

    def test_missing_user_rejected(self, services):
        result = services.transactions.create_transaction(_payload(userId=""))
        assert result.error.field == "user_id"

    def test_invalid_input_writes_nothing(self, services):
        services.transactions.create_transaction(_payload(amount="abc"))
        assert services.transactions.get_transactions_by_user(USER).value == []


class TestSpendingAnalysis:
    def test_groceries_scenario(self, services, today):
        for amount in ("25.99", "12.50", "5.00"):
            services.transactions.create_transaction(_payload(amount=amount, date=today.isoformat()))

        rows = services.transactions.analyze_spending_by_category(USER, 30).value
        assert len(rows) == 1
        groceries = rows[0]
        assert groceries.category is TransactionCategory.GROCERIES
        assert groceries.total_amount == Decimal("43.49")
        assert groceries.transaction_count == 3
        assert groceries.average_amount.quantize(Decimal("0.01")) == Decimal("14.50")

    def test_one_row_per_category_highest_first(self, services, today):
        for amount, category in (("5.00", "other"), ("25.99", "groceries"), ("12.50", "transport")):
            services.transactions.create_transaction(
                _payload(amount=amount, category=category, date=today.isoformat()),
            )

        rows = services.transactions.analyze_spending_by_category(USER, 30).value
        assert [r.total_amount for r in rows] == [Decimal("25.99"), Decimal("12.50"), Decimal("5.00")]
        assert all(r.transaction_count == 1 for r in rows)
        assert all(r.average_amount == r.total_amount for r in rows)

    def test_window_bounds(self, services, today):
        services.transactions.create_transaction(_payload(amount="1.00", date=(today - timedelta(days=7)).isoformat()))
        services.transactions.create_transaction(_payload(amount="2.00", date=(today - timedelta(days=8)).isoformat()))

        rows = services.transactions.analyze_spending_by_category(USER, 7).value
        assert rows[0].total_amount == Decimal("1.00")

    def test_negative_days_rejected(self, services):
        result = services.transactions.analyze_spending_by_category(USER, -1)
        assert result.error.field == "days"

    def test_days_beyond_calendar_rejected(self, services):
        result = services.transactions.analyze_spending_by_category(USER, 10**7)
        assert isinstance(result.error, ValidationError)
        assert result.error.field == "days"

    def test_no_transactions_empty(self, services):
        assert services.transactions.analyze_spending_by_category(USER, 30).value == []


class TestQueries:
    def test_newest_first(self, services):
        first = services.transactions.create_transaction(_payload()).value
        second = services.transactions.create_transaction(_payload()).value
        listed = services.transactions.get_transactions_by_user(USER).value
        assert [t.id for t in listed] == [second.id, first.id]

    def test_range_start_after_end(self, services):
        result = services.transactions.get_transactions_in_range(USER, date(2024, 6, 2), date(2024, 6, 1))
        assert result.error.field == "start_date"

    def test_total_spent_rejects_bad_days(self, services):
        for days in (-1, 10**7):
            result = services.transactions.get_total_spent(USER, days)
            assert isinstance(result.error, ValidationError), days
            assert result.error.field == "days"

    def test_trailing_zero_amount_accepted(self, services):
        tx = services.transactions.create_transaction(_payload(amount="12.500")).value
        assert tx.amount == Decimal("12.5")

    def test_total_spent_last_30_days(self, services, today):
        services.transactions.create_transaction(_payload(amount="5.00", date=today.isoformat()))
        services.transactions.create_transaction(_payload(amount="7.00", date=(today - timedelta(days=60)).isoformat()))
        assert services.transactions.get_total_spent(USER).value == Decimal("5.00")

"""
Transaction service - spending records and category analysis
"""
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable

from pydantic import Field

from app.domain.errors import StorageError, ValidationError
from app.domain.transaction import CategorySpending, Transaction, TransactionCategory
from app.infrastructure.repositories.base import DateRangeFilter, FilterOptions, OrderBy, SortDirection
from app.infrastructure.repositories.transactions import TransactionRepository
from app.utils.dates import today_local
from app.utils.result import Ok, Err, Result
from app.utils.validation import InputSchema, IsoDate, Money, OptionalText, validate_schema


# === Input models ===

class CreateTransactionInput(InputSchema):
    user_id: str = Field(min_length=1)
    amount: Money = Field(gt=0)
    category: TransactionCategory
    description: OptionalText = None
    date: IsoDate


def _window_start(today: date, days: int) -> Result[date, ValidationError]:
    """First day of the trailing `days`-day window ending today."""
    if isinstance(days, bool) or not isinstance(days, int) or days < 0:
        return Err(ValidationError("days must be a non-negative integer", field="days"))
    if days > (today - date.min).days:
        return Err(ValidationError("days reaches before the earliest representable date", field="days"))
    return Ok(today - timedelta(days=days))


class TransactionService:
    def __init__(self, repository: TransactionRepository, today: Callable[[], date] = today_local):
        self.repository = repository
        self._today = today

    def create_transaction(
        self, data: CreateTransactionInput | dict[str, Any]
    ) -> Result[Transaction, ValidationError | StorageError]:
        validated = validate_schema(CreateTransactionInput, data)
        if validated.is_err():
            return validated
        inp = validated.value

        transaction = Transaction.create(
            user_id=inp.user_id,
            amount=inp.amount,
            category=inp.category,
            date=inp.date,
            description=inp.description,
        )
        return self.repository.create(transaction)

    def get_transactions_by_user(self, user_id: str) -> Result[list[Transaction], StorageError]:
        """All of the user's transactions, most recently created first."""
        return self.repository.find_by_user_id(
            user_id, FilterOptions(order_by=OrderBy.CREATED_AT, direction=SortDirection.DESC),
        )

    def analyze_spending_by_category(
        self, user_id: str, days: int, today: date | None = None
    ) -> Result[list[CategorySpending], ValidationError | StorageError]:
        """
        Spending per category over the trailing `days`-day window ending today.

        Only categories with transactions in the window appear; highest total first.
        """
        today = today or self._today()
        since = _window_start(today, days)
        if since.is_err():
            return since
        return self.repository.analyze_spending_by_category(user_id, since=since.value, until=today)

    def get_transactions_in_range(
        self, user_id: str, start_date: date | None = None, end_date: date | None = None
    ) -> Result[list[Transaction], ValidationError | StorageError]:
        if start_date and end_date and start_date > end_date:
            return Err(ValidationError("start_date must not be after end_date", field="start_date"))
        return self.repository.find_by_date_range(user_id, DateRangeFilter(start_date, end_date))

    def get_total_spent(
        self, user_id: str, days: int = 30, today: date | None = None
    ) -> Result[Decimal, ValidationError | StorageError]:
        today = today or self._today()
        since = _window_start(today, days)
        if since.is_err():
            return since
        return self.repository.get_total_spent(user_id, since=since.value)

"""
Transaction domain entity - a single spending record
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from app.utils.dates import utc_now
from app.utils.ids import new_id


class TransactionCategory(str, Enum):
    GROCERIES = "groceries"
    TRANSPORT = "transport"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    OTHER = "other"


@dataclass
class Transaction:
    """
    Transaction domain entity

    Immutable after creation: created by TransactionService, read back via
    per-user queries. amount is always > 0 (spending is stored unsigned).
    """
    id: str
    user_id: str
    amount: Decimal
    category: TransactionCategory
    date: date
    created_at: datetime
    description: str | None = None

    @staticmethod
    def create(
        user_id: str,
        amount: Decimal,
        category: TransactionCategory,
        date: date,
        description: str | None = None,
    ) -> "Transaction":
        """Mint a new transaction: fresh id, server timestamp."""
        return Transaction(
            id=new_id(),
            user_id=user_id,
            amount=amount,
            category=TransactionCategory(category),
            date=date,
            description=description,
            created_at=utc_now(),
        )


@dataclass
class CategorySpending:
    """One row of spending-by-category analysis"""
    category: TransactionCategory
    total_amount: Decimal
    transaction_count: int
    average_amount: Decimal

    @staticmethod
    def from_totals(category: str, total_amount: Decimal, transaction_count: int) -> "CategorySpending":
        average = total_amount / transaction_count if transaction_count else Decimal("0")
        return CategorySpending(
            category=TransactionCategory(category),
            total_amount=total_amount,
            transaction_count=transaction_count,
            average_amount=average,
        )

"""
Transaction repository
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from app.domain.errors import StorageError
from app.domain.transaction import Transaction, TransactionCategory, CategorySpending
from app.infrastructure.db.models import TransactionModel
from app.infrastructure.repositories.base import (
    UNSET, BaseRepository, DateRangeFilter, FieldChanges, FilterOptions, SqlRepository, to_decimal,
)
from app.utils.result import Ok, Err, Result


@dataclass
class TransactionChanges(FieldChanges):
    amount: Decimal = UNSET
    category: TransactionCategory = UNSET
    description: str | None = UNSET
    date: date = UNSET


# the only columns an update can touch
_UPDATABLE_FIELDS = frozenset({"amount", "category", "description", "date"})


class TransactionRepository(BaseRepository[Transaction, TransactionChanges], Protocol):
    def find_by_user_id(
        self, user_id: str, options: FilterOptions | None = None
    ) -> Result[list[Transaction], StorageError]: ...

    def analyze_spending_by_category(
        self, user_id: str, since: date, until: date | None = None
    ) -> Result[list[CategorySpending], StorageError]: ...

    def find_by_date_range(
        self, user_id: str, date_filter: DateRangeFilter
    ) -> Result[list[Transaction], StorageError]: ...

    def get_total_spent(self, user_id: str, since: date | None = None) -> Result[Decimal, StorageError]: ...


def _to_entity(row: TransactionModel) -> Transaction:
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        category=TransactionCategory(row.category),
        description=row.description,
        date=row.date,
        created_at=row.created_at,
    )


class SqlTransactionRepository(SqlRepository):
    model = TransactionModel

    def _get_row(self, transaction_id: str) -> TransactionModel | None:
        return self.db.query(TransactionModel).filter(
            TransactionModel.id == transaction_id,
        ).first()

    def find_by_id(self, transaction_id: str) -> Result[Transaction | None, StorageError]:
        try:
            row = self._get_row(transaction_id)
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to find transaction", exc)
        return Ok(_to_entity(row) if row else None)

    def create(self, transaction: Transaction) -> Result[Transaction, StorageError]:
        row = TransactionModel(
            id=transaction.id,
            user_id=transaction.user_id,
            amount=transaction.amount,
            category=TransactionCategory(transaction.category).value,
            description=transaction.description,
            date=transaction.date,
            created_at=transaction.created_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("insert", "Failed to create transaction", exc)
        return Ok(transaction)

    def update(self, transaction_id: str, changes: TransactionChanges) -> Result[Transaction, StorageError]:
        values = dict(changes.items())
        if "category" in values:
            values["category"] = TransactionCategory(values["category"]).value
        try:
            row = self._get_row(transaction_id)
            if row is None:
                return Err(StorageError(
                    f"Transaction {transaction_id} not found for update", operation="update",
                ))
            for name, value in values.items():
                if name not in _UPDATABLE_FIELDS:
                    raise ValueError(f"Transaction field {name!r} is not updatable")
                setattr(row, name, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("update", "Failed to update transaction", exc)
        return Ok(_to_entity(row))

    def delete(self, transaction_id: str) -> Result[bool, StorageError]:
        try:
            deleted = self.db.query(TransactionModel).filter(
                TransactionModel.id == transaction_id,
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("delete", "Failed to delete transaction", exc)
        return Ok(deleted > 0)

    def find_by_user_id(
        self, user_id: str, options: FilterOptions | None = None
    ) -> Result[list[Transaction], StorageError]:
        query = self.db.query(TransactionModel).filter(TransactionModel.user_id == user_id)
        query = self._apply_options(query, options or FilterOptions())
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to fetch transactions", exc)
        return Ok([_to_entity(r) for r in rows])

    def analyze_spending_by_category(
        self, user_id: str, since: date, until: date | None = None
    ) -> Result[list[CategorySpending], StorageError]:
        """
        Per-category total and count for transactions dated in [since, until].

        Categories without transactions in the window are absent. Highest total first.
        """
        total = func.sum(TransactionModel.amount).label("total_amount")
        count = func.count(TransactionModel.row_id).label("transaction_count")
        query = self.db.query(TransactionModel.category, total, count).filter(
            TransactionModel.user_id == user_id,
            TransactionModel.date >= since,
        )
        if until is not None:
            query = query.filter(TransactionModel.date <= until)
        query = query.group_by(TransactionModel.category).order_by(
            total.desc(), TransactionModel.category.asc(),
        )
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to analyze spending", exc)
        return Ok([
            CategorySpending.from_totals(r.category, to_decimal(r.total_amount), int(r.transaction_count))
            for r in rows
        ])

    def find_by_date_range(
        self, user_id: str, date_filter: DateRangeFilter
    ) -> Result[list[Transaction], StorageError]:
        query = self.db.query(TransactionModel).filter(TransactionModel.user_id == user_id)
        if date_filter.start_date is not None:
            query = query.filter(TransactionModel.date >= date_filter.start_date)
        if date_filter.end_date is not None:
            query = query.filter(TransactionModel.date <= date_filter.end_date)
        query = query.order_by(TransactionModel.date.desc(), TransactionModel.row_id.desc())
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to fetch transactions by date range", exc)
        return Ok([_to_entity(r) for r in rows])

    def get_total_spent(self, user_id: str, since: date | None = None) -> Result[Decimal, StorageError]:
        query = self.db.query(func.coalesce(func.sum(TransactionModel.amount), 0)).filter(
            TransactionModel.user_id == user_id,
        )
        if since is not None:
            query = query.filter(TransactionModel.date >= since)
        try:
            total = query.scalar()
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to calculate total spending", exc)
        return Ok(to_decimal(total))

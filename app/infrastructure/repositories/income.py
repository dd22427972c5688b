"""
Income repository - contracts and income entries.

Default-contract invariant: a user has at most one active contract with
is_default = true. Every path that sets a default (create_contract with
is_default, set_default_contract) first unsets the user's current default and
then sets the new one inside the same database transaction. On PostgreSQL the
user's contract rows are locked first, so concurrent switches serialize and the
last one wins.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from app.domain.errors import DomainRuleError, StorageError
from app.domain.income import Contract, IncomeEntry, IncomeEntryWithContract
from app.infrastructure.db.models import ContractModel, IncomeEntryModel
from app.infrastructure.repositories.base import UNSET, FieldChanges, SqlRepository
from app.utils.dates import month_bounds, utc_now
from app.utils.result import Ok, Err, Result

logger = logging.getLogger(__name__)


@dataclass
class ContractChanges(FieldChanges):
    title: str = UNSET
    hourly_rate: Decimal = UNSET
    description: str | None = UNSET


_UPDATABLE_CONTRACT_FIELDS = frozenset({"title", "hourly_rate", "description"})


class IncomeRepository(Protocol):
    def create_contract(self, contract: Contract) -> Result[Contract, StorageError]: ...

    def get_contracts(self, user_id: str) -> Result[list[Contract], StorageError]: ...

    def get_contract_by_id(self, contract_id: str, user_id: str) -> Result[Contract | None, StorageError]: ...

    def get_default_contract(self, user_id: str) -> Result[Contract | None, StorageError]: ...

    def set_default_contract(self, contract_id: str, user_id: str) -> Result[Contract, StorageError]: ...

    def update_contract(
        self, contract_id: str, user_id: str, changes: ContractChanges
    ) -> Result[Contract, StorageError]: ...

    def create_income_entry(self, entry: IncomeEntry) -> Result[IncomeEntry, StorageError | DomainRuleError]: ...

    def get_income_entries_by_month(
        self, user_id: str, year: int, month: int
    ) -> Result[list[IncomeEntryWithContract], StorageError]: ...

    def delete_income_entry(self, entry_id: str, user_id: str) -> Result[bool, StorageError]: ...


def _to_contract(row: ContractModel) -> Contract:
    return Contract(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        hourly_rate=row.hourly_rate,
        description=row.description,
        is_active=bool(row.is_active),
        is_default=bool(row.is_default),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlIncomeRepository(SqlRepository):
    model = ContractModel

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def _contract_row(self, contract_id: str, user_id: str) -> ContractModel | None:
        return self.db.query(ContractModel).filter(
            ContractModel.id == contract_id,
            ContractModel.user_id == user_id,
        ).first()

    def _unset_defaults(self, user_id: str) -> None:
        """First half of a default switch; caller commits or rolls back."""
        # FOR UPDATE is dropped by dialects without row locks (SQLite)
        self.db.query(ContractModel.row_id).filter(
            ContractModel.user_id == user_id,
        ).with_for_update().all()
        self.db.query(ContractModel).filter(
            ContractModel.user_id == user_id,
            ContractModel.is_default.is_(True),
        ).update(
            {ContractModel.is_default: False, ContractModel.updated_at: utc_now()},
            synchronize_session="fetch",
        )

    def create_contract(self, contract: Contract) -> Result[Contract, StorageError]:
        row = ContractModel(
            id=contract.id,
            user_id=contract.user_id,
            title=contract.title,
            hourly_rate=contract.hourly_rate,
            description=contract.description,
            is_active=contract.is_active,
            is_default=contract.is_default,
            created_at=contract.created_at,
            updated_at=contract.updated_at,
        )
        try:
            if contract.is_default:
                self._unset_defaults(contract.user_id)
                # the unset must hit the database before the new default row does
                self.db.flush()
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("create_contract", "Failed to create contract", exc)
        return Ok(contract)

    def get_contracts(self, user_id: str) -> Result[list[Contract], StorageError]:
        """Active contracts: the default first, then newest first."""
        query = self.db.query(ContractModel).filter(
            ContractModel.user_id == user_id,
            ContractModel.is_active.is_(True),
        ).order_by(
            ContractModel.is_default.desc(),
            ContractModel.created_at.desc(),
            ContractModel.row_id.desc(),
        )
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            return self._storage_error("get_contracts", "Failed to get contracts", exc)
        return Ok([_to_contract(r) for r in rows])

    def get_contract_by_id(self, contract_id: str, user_id: str) -> Result[Contract | None, StorageError]:
        try:
            row = self._contract_row(contract_id, user_id)
        except SQLAlchemyError as exc:
            return self._storage_error("get_contract", "Failed to get contract", exc)
        return Ok(_to_contract(row) if row else None)

    def get_default_contract(self, user_id: str) -> Result[Contract | None, StorageError]:
        query = self.db.query(ContractModel).filter(
            ContractModel.user_id == user_id,
            ContractModel.is_default.is_(True),
            ContractModel.is_active.is_(True),
        ).order_by(ContractModel.row_id.asc())
        try:
            row = query.first()
        except SQLAlchemyError as exc:
            return self._storage_error("get_default_contract", "Failed to get default contract", exc)
        return Ok(_to_contract(row) if row else None)

    def set_default_contract(self, contract_id: str, user_id: str) -> Result[Contract, StorageError]:
        """
        Unset every default of the user, then set exactly this contract.

        If the set step matches no active contract of the user the whole
        transaction is rolled back, so the previous default survives.
        """
        try:
            self._unset_defaults(user_id)
            updated = self.db.query(ContractModel).filter(
                ContractModel.id == contract_id,
                ContractModel.user_id == user_id,
                ContractModel.is_active.is_(True),
            ).update(
                {ContractModel.is_default: True, ContractModel.updated_at: utc_now()},
                synchronize_session="fetch",
            )
            if updated != 1:
                self.db.rollback()
                return Err(StorageError(
                    f"Contract {contract_id} not found while setting default",
                    operation="set_default_contract",
                ))
            self.db.commit()
            row = self._contract_row(contract_id, user_id)
        except SQLAlchemyError as exc:
            return self._storage_error("set_default_contract", "Failed to set default contract", exc)
        logger.info("Default contract for user %s is now %s", user_id, contract_id)
        return Ok(_to_contract(row))

    def update_contract(
        self, contract_id: str, user_id: str, changes: ContractChanges
    ) -> Result[Contract, StorageError]:
        try:
            row = self._contract_row(contract_id, user_id)
            if row is None:
                return Err(StorageError(
                    f"Contract {contract_id} not found for update", operation="update_contract",
                ))
            for name, value in changes.items():
                if name not in _UPDATABLE_CONTRACT_FIELDS:
                    raise ValueError(f"Contract field {name!r} is not updatable")
                setattr(row, name, value)
            row.updated_at = utc_now()
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("update_contract", "Failed to update contract", exc)
        return Ok(_to_contract(row))

    # ------------------------------------------------------------------
    # Income entries
    # ------------------------------------------------------------------

    def create_income_entry(self, entry: IncomeEntry) -> Result[IncomeEntry, StorageError | DomainRuleError]:
        row = IncomeEntryModel(
            id=entry.id,
            user_id=entry.user_id,
            contract_id=entry.contract_id,
            date=entry.date,
            hours_worked=entry.hours_worked,
            total_amount=entry.total_amount,
            description=entry.description,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
        try:
            duplicate = self.db.query(IncomeEntryModel.id).filter(
                IncomeEntryModel.user_id == entry.user_id,
                IncomeEntryModel.contract_id == entry.contract_id,
                IncomeEntryModel.date == entry.date,
            ).first()
            if duplicate is not None:
                return Err(DomainRuleError(
                    f"An income entry for this contract on {entry.date.isoformat()} already exists",
                    code="duplicate_income_entry",
                    operation="create_income_entry",
                ))
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("create_income_entry", "Failed to create income entry", exc)
        return Ok(entry)

    def get_income_entries_by_month(
        self, user_id: str, year: int, month: int
    ) -> Result[list[IncomeEntryWithContract], StorageError]:
        """Entries dated inside the calendar month, joined with the contract's current title/rate."""
        start, next_month = month_bounds(year, month)
        query = self.db.query(
            IncomeEntryModel, ContractModel.title, ContractModel.hourly_rate,
        ).join(
            ContractModel, ContractModel.id == IncomeEntryModel.contract_id,
        ).filter(
            IncomeEntryModel.user_id == user_id,
            IncomeEntryModel.date >= start,
            IncomeEntryModel.date < next_month,
        ).order_by(IncomeEntryModel.date.asc(), IncomeEntryModel.row_id.asc())
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            return self._storage_error("get_income_entries", "Failed to get income entries", exc)
        return Ok([
            IncomeEntryWithContract(
                id=entry.id,
                user_id=entry.user_id,
                contract_id=entry.contract_id,
                date=entry.date,
                hours_worked=entry.hours_worked,
                total_amount=entry.total_amount,
                description=entry.description,
                created_at=entry.created_at,
                updated_at=entry.updated_at,
                contract_title=title,
                contract_hourly_rate=rate,
            )
            for entry, title, rate in rows
        ])

    def delete_income_entry(self, entry_id: str, user_id: str) -> Result[bool, StorageError]:
        """Both id and owner must match; returns whether a row was deleted."""
        try:
            deleted = self.db.query(IncomeEntryModel).filter(
                IncomeEntryModel.id == entry_id,
                IncomeEntryModel.user_id == user_id,
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("delete_income_entry", "Failed to delete income entry", exc)
        return Ok(deleted > 0)

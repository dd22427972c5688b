"""
Income service - contracts and hours logged against them.

Error mapping:
  - a contract id that does not resolve for the user:
      NotFoundError   on set_default_contract / update_contract
      DomainRuleError on create_income_entry (the entry cannot be priced)
  - quick entry without a default contract: DomainRuleError "no_default_contract"
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import Field

from app.domain.errors import DomainRuleError, NotFoundError, StorageError, ValidationError
from app.domain.income import (
    Contract, IncomeEntry, MonthlyIncomeSummary,
    DEFAULT_QUICK_ENTRY_HOURS, QUICK_ENTRY_DESCRIPTION,
)
from app.infrastructure.repositories.base import UNSET
from app.infrastructure.repositories.income import ContractChanges, IncomeRepository
from app.utils.result import Ok, Err, Result
from app.utils.validation import InputSchema, IsoDate, Money, OptionalText, Quantity, validate_schema

logger = logging.getLogger(__name__)


# === Input models ===

class CreateContractInput(InputSchema):
    title: str = Field(min_length=1)
    hourly_rate: Money = Field(gt=0)
    description: OptionalText = None
    is_default: bool = False


class UpdateContractInput(InputSchema):
    title: str | None = Field(default=None, min_length=1)
    hourly_rate: Money | None = Field(default=None, gt=0)
    description: OptionalText = None


class CreateIncomeEntryInput(InputSchema):
    contract_id: str = Field(min_length=1)
    date: IsoDate
    hours_worked: Quantity = Field(gt=0)
    description: OptionalText = None


class QuickEntryInput(InputSchema):
    date: IsoDate
    hours_worked: Quantity = Field(default=DEFAULT_QUICK_ENTRY_HOURS, gt=0)


class IncomeService:
    def __init__(self, repository: IncomeRepository):
        self.repository = repository

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def create_contract(
        self, data: CreateContractInput | dict[str, Any], user_id: str
    ) -> Result[Contract, ValidationError | StorageError]:
        validated = validate_schema(CreateContractInput, data)
        if validated.is_err():
            return validated
        inp = validated.value

        contract = Contract.create(
            user_id=user_id,
            title=inp.title,
            hourly_rate=inp.hourly_rate,
            description=inp.description,
            is_default=inp.is_default,
        )
        result = self.repository.create_contract(contract)
        if result.is_ok():
            logger.info("Contract %s created for user %s (default=%s)", contract.id, user_id, contract.is_default)
        return result

    def get_contracts(self, user_id: str) -> Result[list[Contract], StorageError]:
        return self.repository.get_contracts(user_id)

    def get_default_contract(self, user_id: str) -> Result[Contract | None, StorageError]:
        return self.repository.get_default_contract(user_id)

    def _require_contract(self, contract_id: str, user_id: str) -> Result[Contract, NotFoundError | StorageError]:
        found = self.repository.get_contract_by_id(contract_id, user_id)
        if found.is_err():
            return found
        if found.value is None or not found.value.is_active:
            return Err(NotFoundError.for_entity("Contract", contract_id, code="contract_not_found"))
        return found

    def set_default_contract(
        self, contract_id: str, user_id: str
    ) -> Result[Contract, NotFoundError | StorageError]:
        existing = self._require_contract(contract_id, user_id)
        if existing.is_err():
            return existing
        return self.repository.set_default_contract(contract_id, user_id)

    def update_contract(
        self, contract_id: str, data: UpdateContractInput | dict[str, Any], user_id: str
    ) -> Result[Contract, ValidationError | NotFoundError | StorageError]:
        """
        Change title, rate or description. Existing income entries keep the
        total they were created with.
        """
        validated = validate_schema(UpdateContractInput, data)
        if validated.is_err():
            return validated
        inp = validated.value

        given = inp.model_fields_set
        for required in ("title", "hourly_rate"):
            if required in given and getattr(inp, required) is None:
                return Err(ValidationError(f"{required}: Field cannot be empty", field=required))

        changes = ContractChanges(
            title=inp.title if "title" in given else UNSET,
            hourly_rate=inp.hourly_rate if "hourly_rate" in given else UNSET,
            description=inp.description if "description" in given else UNSET,
        )

        existing = self._require_contract(contract_id, user_id)
        if existing.is_err():
            return existing
        if changes.is_empty():
            return existing

        return self.repository.update_contract(contract_id, user_id, changes)

    # ------------------------------------------------------------------
    # Income entries
    # ------------------------------------------------------------------

    def create_income_entry(
        self, data: CreateIncomeEntryInput | dict[str, Any], user_id: str
    ) -> Result[IncomeEntry, ValidationError | DomainRuleError | StorageError]:
        validated = validate_schema(CreateIncomeEntryInput, data)
        if validated.is_err():
            return validated
        inp = validated.value

        found = self.repository.get_contract_by_id(inp.contract_id, user_id)
        if found.is_err():
            return found
        contract = found.value
        if contract is None or not contract.is_active:
            return Err(DomainRuleError(
                f"Contract {inp.contract_id} not found",
                code="contract_not_found",
                field="contract_id",
                operation="create_income_entry",
            ))

        entry = IncomeEntry.for_contract(
            contract, date=inp.date, hours_worked=inp.hours_worked, description=inp.description,
        )
        return self.repository.create_income_entry(entry)

    def create_quick_entry(
        self, user_id: str, date: date | str, hours: Decimal | int | str = DEFAULT_QUICK_ENTRY_HOURS
    ) -> Result[IncomeEntry, ValidationError | DomainRuleError | StorageError]:
        """Log `hours` (8 by default) against the user's default contract."""
        validated = validate_schema(QuickEntryInput, {"date": date, "hours_worked": hours})
        if validated.is_err():
            return validated
        inp = validated.value

        found = self.repository.get_default_contract(user_id)
        if found.is_err():
            return found
        if found.value is None:
            return Err(DomainRuleError(
                "No default contract set. Create a contract and mark it as default first.",
                code="no_default_contract",
                operation="create_quick_entry",
            ))

        entry = IncomeEntry.for_contract(
            found.value, date=inp.date, hours_worked=inp.hours_worked, description=QUICK_ENTRY_DESCRIPTION,
        )
        return self.repository.create_income_entry(entry)

    def get_monthly_income(
        self, user_id: str, year: int, month: int
    ) -> Result[MonthlyIncomeSummary, ValidationError | StorageError]:
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            return Err(ValidationError("month must be between 1 and 12", field="month"))
        if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year < 9999:
            return Err(ValidationError("year is out of range", field="year"))

        return self.repository.get_income_entries_by_month(user_id, year, month).map(
            lambda entries: MonthlyIncomeSummary.from_entries(year, month, entries)
        )

    def delete_income_entry(self, entry_id: str, user_id: str) -> Result[None, NotFoundError | StorageError]:
        deleted = self.repository.delete_income_entry(entry_id, user_id)
        if deleted.is_err():
            return deleted
        if not deleted.value:
            return Err(NotFoundError.for_entity("Income entry", entry_id, code="entry_not_found"))
        logger.info("Income entry %s deleted by user %s", entry_id, user_id)
        return Ok(None)

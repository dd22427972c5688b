"""
Income domain - contracts (hourly rates) and the hours logged against them.

Key rules:
  - at most one active default contract per user;
  - an income entry's total_amount is hourly_rate * hours_worked, computed once
    at creation from the contract's rate at that moment and never recomputed.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from app.utils.dates import utc_now
from app.utils.ids import new_id

QUICK_ENTRY_DESCRIPTION = "Quick entry"
DEFAULT_QUICK_ENTRY_HOURS = Decimal("8")


@dataclass
class Contract:
    id: str
    user_id: str
    title: str
    hourly_rate: Decimal
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    is_active: bool = True
    is_default: bool = False

    @staticmethod
    def create(
        user_id: str,
        title: str,
        hourly_rate: Decimal,
        description: str | None = None,
        is_default: bool = False,
    ) -> "Contract":
        now = utc_now()
        return Contract(
            id=new_id(),
            user_id=user_id,
            title=title,
            hourly_rate=hourly_rate,
            description=description,
            is_active=True,
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )


def compute_total_amount(hourly_rate: Decimal, hours_worked: Decimal) -> Decimal:
    return hourly_rate * hours_worked


@dataclass
class IncomeEntry:
    id: str
    user_id: str
    contract_id: str
    date: date
    hours_worked: Decimal
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    description: str | None = None

    @staticmethod
    def for_contract(
        contract: Contract,
        date: date,
        hours_worked: Decimal,
        description: str | None = None,
    ) -> "IncomeEntry":
        """Price an entry with the contract's current rate (frozen from here on)."""
        now = utc_now()
        return IncomeEntry(
            id=new_id(),
            user_id=contract.user_id,
            contract_id=contract.id,
            date=date,
            hours_worked=hours_worked,
            total_amount=compute_total_amount(contract.hourly_rate, hours_worked),
            description=description,
            created_at=now,
            updated_at=now,
        )


@dataclass
class IncomeEntryWithContract(IncomeEntry):
    """Entry enriched with the owning contract's current title and rate"""
    contract_title: str = ""
    contract_hourly_rate: Decimal = Decimal("0")


@dataclass
class MonthlyIncomeSummary:
    year: int
    month: int
    total_amount: Decimal = Decimal("0")
    total_hours: Decimal = Decimal("0")
    entries: list[IncomeEntryWithContract] = field(default_factory=list)

    @staticmethod
    def from_entries(year: int, month: int, entries: list[IncomeEntryWithContract]) -> "MonthlyIncomeSummary":
        return MonthlyIncomeSummary(
            year=year,
            month=month,
            total_amount=sum((e.total_amount for e in entries), Decimal("0")),
            total_hours=sum((e.hours_worked for e in entries), Decimal("0")),
            entries=list(entries),
        )

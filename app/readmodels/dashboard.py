"""
Dashboard read model - derived on demand, never persisted.
"""
from dataclasses import dataclass, field
from decimal import Decimal

from app.domain.task import Task, TaskSummary
from app.domain.transaction import Transaction

DASHBOARD_LIST_LIMIT = 5


@dataclass
class FinancialSummary:
    total_spent: Decimal = Decimal("0")
    transaction_count: int = 0
    average_transaction_amount: Decimal = Decimal("0")


@dataclass
class DashboardOverview:
    recent_transactions: list[Transaction] = field(default_factory=list)
    pending_tasks: list[Task] = field(default_factory=list)
    financial_summary: FinancialSummary = field(default_factory=FinancialSummary)
    task_summary: TaskSummary = field(default_factory=TaskSummary)


def summarize_transactions(transactions: list[Transaction]) -> FinancialSummary:
    """
    Totals over the complete list (not a display slice).

    Average is 0 for an empty list.
    """
    total = sum((t.amount for t in transactions), Decimal("0"))
    count = len(transactions)
    average = total / count if count else Decimal("0")
    return FinancialSummary(
        total_spent=total,
        transaction_count=count,
        average_transaction_amount=average,
    )

"""
Service wiring - one set of repositories and services per database session.
"""
from dataclasses import dataclass
from datetime import date
from typing import Callable

from sqlalchemy.orm import Session

from app.application.dashboard import DashboardService
from app.application.income import IncomeService
from app.application.tasks import TaskService
from app.application.transactions import TransactionService
from app.infrastructure.repositories.income import SqlIncomeRepository
from app.infrastructure.repositories.tasks import SqlTaskRepository
from app.infrastructure.repositories.transactions import SqlTransactionRepository
from app.utils.dates import today_local


@dataclass
class Services:
    transactions: TransactionService
    tasks: TaskService
    income: IncomeService
    dashboard: DashboardService


def build_services(db: Session, today: Callable[[], date] = today_local) -> Services:
    transactions = TransactionService(SqlTransactionRepository(db), today=today)
    tasks = TaskService(SqlTaskRepository(db), today=today)
    return Services(
        transactions=transactions,
        tasks=tasks,
        income=IncomeService(SqlIncomeRepository(db)),
        dashboard=DashboardService(transactions, tasks),
    )

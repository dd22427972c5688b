"""
Dashboard - aggregated overview of a user's money and tasks.

Pure read layer: no mutations. Steps run in order and the first failure stops
the rest:
  1. transactions   -> recent list (5) + financial summary over all of them
  2. pending_tasks  -> first 5 pending tasks in creation order
  3. task_summary   -> counts
"""
from datetime import date

from app.application.tasks import TaskService
from app.application.transactions import TransactionService
from app.domain.errors import DomainError
from app.readmodels.dashboard import DASHBOARD_LIST_LIMIT, DashboardOverview, summarize_transactions
from app.utils.result import Ok, Err, Result

ERROR_PREFIX = "Failed to get dashboard overview"


class DashboardService:
    def __init__(self, transaction_service: TransactionService, task_service: TaskService):
        self.transaction_service = transaction_service
        self.task_service = task_service

    @staticmethod
    def _fail(step: str, error: DomainError) -> Err:
        return Err(error.with_context(step, ERROR_PREFIX))

    def get_dashboard_overview(self, user_id: str, today: date | None = None) -> Result[DashboardOverview, DomainError]:
        transactions = self.transaction_service.get_transactions_by_user(user_id)
        if transactions.is_err():
            return self._fail("transactions", transactions.error)

        pending = self.task_service.get_pending_tasks(user_id)
        if pending.is_err():
            return self._fail("pending_tasks", pending.error)

        summary = self.task_service.get_task_summary(user_id, today)
        if summary.is_err():
            return self._fail("task_summary", summary.error)

        return Ok(DashboardOverview(
            recent_transactions=transactions.value[:DASHBOARD_LIST_LIMIT],
            pending_tasks=pending.value[:DASHBOARD_LIST_LIMIT],
            financial_summary=summarize_transactions(transactions.value),
            task_summary=summary.value,
        ))

"""
Tests for DashboardService
"""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

from app.application.dashboard import DashboardService
from app.domain.errors import StorageError
from app.utils.result import Ok, Err

USER = "user-1"


class TestDashboardOverview:
    def test_empty_user(self, services):
        overview = services.dashboard.get_dashboard_overview(USER).value
        assert overview.recent_transactions == []
        assert overview.pending_tasks == []
        assert overview.financial_summary.total_spent == Decimal("0")
        assert overview.financial_summary.average_transaction_amount == Decimal("0")
        assert overview.task_summary.total == 0

    def test_lists_capped_at_five(self, services):
        created = [
            services.tasks.create_task({"userId": USER, "title": f"t{i}"}).value
            for i in range(7)
        ]
        for _ in range(6):
            services.transactions.create_transaction(
                {"userId": USER, "amount": "10.00", "category": "other", "date": "2024-06-01"},
            )

        overview = services.dashboard.get_dashboard_overview(USER).value
        assert [t.id for t in overview.pending_tasks] == [t.id for t in created[:5]]
        assert overview.task_summary.total == 7
        assert len(overview.recent_transactions) == 5
        assert overview.financial_summary.transaction_count == 6
        assert overview.financial_summary.total_spent == Decimal("60.00")

    def test_overdue_counted(self, services, today):
        services.tasks.create_task({
            "userId": USER, "title": "late", "dueDate": (today - timedelta(days=1)).isoformat(),
        })
        overview = services.dashboard.get_dashboard_overview(USER).value
        assert overview.task_summary.overdue == 1


class TestDashboardFailures:
    def _services(self):
        transactions = MagicMock()
        tasks = MagicMock()
        transactions.get_transactions_by_user.return_value = Ok([])
        tasks.get_pending_tasks.return_value = Ok([])
        return transactions, tasks

    def test_task_summary_failure_is_single_error(self):
        transactions, tasks = self._services()
        tasks.get_task_summary.return_value = Err(StorageError("connection lost", operation="select"))

        result = DashboardService(transactions, tasks).get_dashboard_overview(USER)

        assert result.is_err()
        assert isinstance(result.error, StorageError)
        assert result.error.step == "task_summary"
        assert result.error.message.startswith("Failed to get dashboard overview")

    def test_first_failure_short_circuits(self):
        transactions, tasks = self._services()
        transactions.get_transactions_by_user.return_value = Err(StorageError("down"))

        result = DashboardService(transactions, tasks).get_dashboard_overview(USER)

        assert result.error.step == "transactions"
        tasks.get_pending_tasks.assert_not_called()
        tasks.get_task_summary.assert_not_called()

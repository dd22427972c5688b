"""Task domain entity - one-off tasks with an optional due date"""
from dataclasses import dataclass, replace
from datetime import date, datetime

from app.utils.dates import utc_now
from app.utils.ids import new_id


@dataclass
class Task:
    id: str
    user_id: str
    title: str
    created_at: datetime
    completed: bool = False
    due_date: date | None = None

    @staticmethod
    def create(user_id: str, title: str, due_date: date | None = None) -> "Task":
        # New tasks always start pending
        return Task(
            id=new_id(),
            user_id=user_id,
            title=title,
            completed=False,
            due_date=due_date,
            created_at=utc_now(),
        )

    def with_completion(self, completed: bool) -> "Task":
        return replace(self, completed=completed)

    def is_overdue(self, today: date) -> bool:
        return is_overdue(self.completed, self.due_date, today)


def is_overdue(completed: bool, due_date: date | None, today: date) -> bool:
    """
    Pending and due strictly before today.

    Date-only comparison: a task due today is not overdue.
    """
    return not completed and due_date is not None and due_date < today


@dataclass
class TaskSummary:
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0

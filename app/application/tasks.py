"""Task service - one-off tasks: create, edit, toggle, summarize"""
from datetime import date
from typing import Any, Callable

from pydantic import Field

from app.domain.errors import NotFoundError, StorageError, ValidationError
from app.domain.task import Task, TaskSummary
from app.infrastructure.repositories.base import FilterOptions, UNSET
from app.infrastructure.repositories.tasks import TaskChanges, TaskRepository
from app.utils.dates import today_local
from app.utils.result import Err, Result
from app.utils.validation import InputSchema, IsoDate, validate_schema


# === Input models ===

class CreateTaskInput(InputSchema):
    # no "completed" field: new tasks always start pending
    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    due_date: IsoDate | None = None


class UpdateTaskInput(InputSchema):
    """Only the keys present in the payload are applied; dueDate: null clears the date."""
    title: str | None = Field(default=None, min_length=1)
    due_date: IsoDate | None = None


class ToggleTaskCompletionInput(InputSchema):
    completed: bool


class TaskService:
    def __init__(self, repository: TaskRepository, today: Callable[[], date] = today_local):
        self.repository = repository
        self._today = today

    def create_task(self, data: CreateTaskInput | dict[str, Any]) -> Result[Task, ValidationError | StorageError]:
        validated = validate_schema(CreateTaskInput, data)
        if validated.is_err():
            return validated
        inp = validated.value

        task = Task.create(user_id=inp.user_id, title=inp.title, due_date=inp.due_date)
        return self.repository.create(task)

    def get_tasks_by_user(self, user_id: str) -> Result[list[Task], StorageError]:
        return self.repository.find_by_user_id(user_id, FilterOptions())

    def get_pending_tasks(self, user_id: str) -> Result[list[Task], StorageError]:
        return self.repository.find_pending_by_user_id(user_id, FilterOptions())

    def get_completed_tasks(self, user_id: str) -> Result[list[Task], StorageError]:
        return self.repository.find_completed_by_user_id(user_id, FilterOptions())

    def get_overdue_tasks(self, user_id: str, today: date | None = None) -> Result[list[Task], StorageError]:
        return self.repository.find_overdue(user_id, today or self._today())

    def _require_task(self, task_id: str) -> Result[Task, NotFoundError | StorageError]:
        found = self.repository.find_by_id(task_id)
        if found.is_err():
            return found
        if found.value is None:
            return Err(NotFoundError.for_entity("Task", task_id, code="task_not_found"))
        return found

    def toggle_task_completion(
        self, task_id: str, data: ToggleTaskCompletionInput | dict[str, Any]
    ) -> Result[Task, ValidationError | NotFoundError | StorageError]:
        """Set completed to the given value; setting the current value again is fine."""
        validated = validate_schema(ToggleTaskCompletionInput, data)
        if validated.is_err():
            return validated

        existing = self._require_task(task_id)
        if existing.is_err():
            return existing

        return self.repository.update_completion_status(task_id, validated.value.completed)

    def update_task(
        self, task_id: str, data: UpdateTaskInput | dict[str, Any]
    ) -> Result[Task, ValidationError | NotFoundError | StorageError]:
        validated = validate_schema(UpdateTaskInput, data)
        if validated.is_err():
            return validated
        inp = validated.value

        # explicitly given keys only; title cannot be cleared
        if "title" in inp.model_fields_set and inp.title is None:
            return Err(ValidationError("title: Title cannot be empty", field="title"))
        changes = TaskChanges(
            title=inp.title if "title" in inp.model_fields_set else UNSET,
            due_date=inp.due_date if "due_date" in inp.model_fields_set else UNSET,
        )

        existing = self._require_task(task_id)
        if existing.is_err():
            return existing
        if changes.is_empty():
            return existing

        return self.repository.update(task_id, changes)

    def get_task_summary(self, user_id: str, today: date | None = None) -> Result[TaskSummary, StorageError]:
        """Recomputed on every call: overdue depends on today's date."""
        return self.repository.get_task_summary(user_id, today or self._today())

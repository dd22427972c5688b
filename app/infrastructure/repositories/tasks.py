"""
Task repository
"""
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from app.domain.errors import StorageError
from app.domain.task import Task, TaskSummary
from app.infrastructure.db.models import TaskModel
from app.infrastructure.repositories.base import (
    UNSET, BaseRepository, FieldChanges, FilterOptions, SqlRepository,
)
from app.utils.result import Ok, Err, Result


@dataclass
class TaskChanges(FieldChanges):
    """Partial update of a task. completion is changed only via update_completion_status."""
    title: str = UNSET
    due_date: date | None = UNSET


_UPDATABLE_FIELDS = frozenset({"title", "due_date"})


class TaskRepository(BaseRepository[Task, TaskChanges], Protocol):
    def find_by_user_id(self, user_id: str, options: FilterOptions | None = None) -> Result[list[Task], StorageError]: ...

    def find_pending_by_user_id(
        self, user_id: str, options: FilterOptions | None = None
    ) -> Result[list[Task], StorageError]: ...

    def find_completed_by_user_id(
        self, user_id: str, options: FilterOptions | None = None
    ) -> Result[list[Task], StorageError]: ...

    def find_overdue(self, user_id: str, today: date) -> Result[list[Task], StorageError]: ...

    def update_completion_status(self, task_id: str, completed: bool) -> Result[Task, StorageError]: ...

    def get_task_summary(self, user_id: str, today: date) -> Result[TaskSummary, StorageError]: ...


def _to_entity(row: TaskModel) -> Task:
    return Task(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        completed=bool(row.completed),
        due_date=row.due_date,
        created_at=row.created_at,
    )


class SqlTaskRepository(SqlRepository):
    model = TaskModel

    def _get_row(self, task_id: str) -> TaskModel | None:
        return self.db.query(TaskModel).filter(TaskModel.id == task_id).first()

    def _list(self, operation_message: str, *criteria, options: FilterOptions | None = None):
        query = self.db.query(TaskModel).filter(*criteria)
        query = self._apply_options(query, options or FilterOptions())
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            return self._storage_error("select", operation_message, exc)
        return Ok([_to_entity(r) for r in rows])

    def find_by_id(self, task_id: str) -> Result[Task | None, StorageError]:
        try:
            row = self._get_row(task_id)
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to find task", exc)
        return Ok(_to_entity(row) if row else None)

    def create(self, task: Task) -> Result[Task, StorageError]:
        row = TaskModel(
            id=task.id,
            user_id=task.user_id,
            title=task.title,
            completed=task.completed,
            due_date=task.due_date,
            created_at=task.created_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("insert", "Failed to create task", exc)
        return Ok(task)

    def update(self, task_id: str, changes: TaskChanges) -> Result[Task, StorageError]:
        try:
            row = self._get_row(task_id)
            if row is None:
                return Err(StorageError(f"Task {task_id} not found for update", operation="update"))
            for name, value in changes.items():
                if name not in _UPDATABLE_FIELDS:
                    raise ValueError(f"Task field {name!r} is not updatable")
                setattr(row, name, value)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("update", "Failed to update task", exc)
        return Ok(_to_entity(row))

    def delete(self, task_id: str) -> Result[bool, StorageError]:
        try:
            deleted = self.db.query(TaskModel).filter(TaskModel.id == task_id).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("delete", "Failed to delete task", exc)
        return Ok(deleted > 0)

    def find_by_user_id(self, user_id: str, options: FilterOptions | None = None) -> Result[list[Task], StorageError]:
        return self._list("Failed to fetch tasks", TaskModel.user_id == user_id, options=options)

    def find_pending_by_user_id(
        self, user_id: str, options: FilterOptions | None = None
    ) -> Result[list[Task], StorageError]:
        return self._list(
            "Failed to fetch pending tasks",
            TaskModel.user_id == user_id,
            TaskModel.completed.is_(False),
            options=options,
        )

    def find_completed_by_user_id(
        self, user_id: str, options: FilterOptions | None = None
    ) -> Result[list[Task], StorageError]:
        return self._list(
            "Failed to fetch completed tasks",
            TaskModel.user_id == user_id,
            TaskModel.completed.is_(True),
            options=options,
        )

    def find_overdue(self, user_id: str, today: date) -> Result[list[Task], StorageError]:
        query = self.db.query(TaskModel).filter(
            TaskModel.user_id == user_id,
            TaskModel.completed.is_(False),
            TaskModel.due_date.is_not(None),
            TaskModel.due_date < today,
        ).order_by(TaskModel.due_date.asc(), TaskModel.row_id.asc())
        try:
            rows = query.all()
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to fetch overdue tasks", exc)
        return Ok([_to_entity(r) for r in rows])

    def update_completion_status(self, task_id: str, completed: bool) -> Result[Task, StorageError]:
        try:
            row = self._get_row(task_id)
            if row is None:
                return Err(StorageError(
                    f"Task {task_id} not found for completion update", operation="update",
                ))
            row.completed = completed
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._storage_error("update", "Failed to update task completion", exc)
        return Ok(_to_entity(row))

    def get_task_summary(self, user_id: str, today: date) -> Result[TaskSummary, StorageError]:
        """
        Counts in one aggregate query. overdue: pending, with due_date < today.
        """
        pending = TaskModel.completed.is_(False)
        query = self.db.query(
            func.count(TaskModel.row_id),
            func.sum(case((TaskModel.completed.is_(True), 1), else_=0)),
            func.sum(case((pending, 1), else_=0)),
            func.sum(case(
                (pending & TaskModel.due_date.is_not(None) & (TaskModel.due_date < today), 1),
                else_=0,
            )),
        ).filter(TaskModel.user_id == user_id)
        try:
            total, completed, pending_count, overdue = query.one()
        except SQLAlchemyError as exc:
            return self._storage_error("select", "Failed to get task summary", exc)
        return Ok(TaskSummary(
            total=int(total or 0),
            completed=int(completed or 0),
            pending=int(pending_count or 0),
            overdue=int(overdue or 0),
        ))

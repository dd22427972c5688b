"""
Tests for SqlTaskRepository
"""
from datetime import date, timedelta

import pytest

from app.domain.errors import StorageError
from app.domain.task import Task
from app.infrastructure.repositories.tasks import SqlTaskRepository, TaskChanges

USER = "user-1"
TODAY = date(2024, 6, 15)


@pytest.fixture
def repo(db_session):
    return SqlTaskRepository(db_session)


def _create(repo, title, due_date=None, user_id=USER):
    return repo.create(Task.create(user_id=user_id, title=title, due_date=due_date)).value


class TestTaskRepository:
    def test_create_and_find(self, repo):
        task = _create(repo, "Write report", TODAY)
        found = repo.find_by_id(task.id).value
        assert found.title == "Write report"
        assert found.completed is False
        assert found.due_date == TODAY

    def test_pending_and_completed_split(self, repo):
        a = _create(repo, "a")
        b = _create(repo, "b")
        repo.update_completion_status(a.id, True)

        assert [t.id for t in repo.find_pending_by_user_id(USER).value] == [b.id]
        assert [t.id for t in repo.find_completed_by_user_id(USER).value] == [a.id]

    def test_update_clears_due_date(self, repo):
        task = _create(repo, "a", TODAY)
        updated = repo.update(task.id, TaskChanges(due_date=None)).value
        assert updated.due_date is None
        assert updated.title == "a"

    def test_update_missing_is_storage_error(self, repo):
        assert isinstance(repo.update("nope", TaskChanges(title="x")).error, StorageError)

    def test_completion_of_missing_is_storage_error(self, repo):
        assert isinstance(repo.update_completion_status("nope", True).error, StorageError)

    def test_overdue(self, repo):
        late = _create(repo, "late", TODAY - timedelta(days=1))
        _create(repo, "today", TODAY)
        _create(repo, "no date")
        done = _create(repo, "done late", TODAY - timedelta(days=3))
        repo.update_completion_status(done.id, True)

        assert [t.id for t in repo.find_overdue(USER, TODAY).value] == [late.id]

    def test_summary(self, repo):
        _create(repo, "late", TODAY - timedelta(days=1))
        _create(repo, "today", TODAY)
        done = _create(repo, "done")
        repo.update_completion_status(done.id, True)
        _create(repo, "other user", TODAY - timedelta(days=1), user_id="user-2")

        summary = repo.get_task_summary(USER, TODAY).value
        assert (summary.total, summary.completed, summary.pending, summary.overdue) == (3, 1, 2, 1)

    def test_summary_no_tasks(self, repo):
        summary = repo.get_task_summary(USER, TODAY).value
        assert (summary.total, summary.completed, summary.pending, summary.overdue) == (0, 0, 0, 0)

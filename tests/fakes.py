from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any

from quicktask.domain.entities import AuthUser, TaskEntity
from quicktask.domain.enums import TaskPriority, TaskStatus
from quicktask.domain.errors import RemoteQueryError
from quicktask.domain.filters import ALL, TaskQuery

ALICE = AuthUser(id="user-alice", email="alice@example.com", created_at=datetime(2026, 1, 1))
BOB = AuthUser(id="user-bob", email="bob@example.com", created_at=datetime(2026, 1, 1))


def make_task(
    task_id: str,
    *,
    title: str = "Task",
    description: str | None = None,
    status: TaskStatus = TaskStatus.TODO,
    priority: TaskPriority = TaskPriority.MEDIUM,
    user_id: str = ALICE.id,
    created_at: datetime | None = None,
) -> TaskEntity:
    created = created_at or datetime(2026, 3, 1, 9, 0)
    return TaskEntity(
        id=task_id,
        title=title,
        description=description,
        status=status,
        priority=priority,
        due_date=None,
        created_at=created,
        updated_at=created,
        user_id=user_id,
    )


class FakeRepo:
    """In-memory query client recording every call it receives."""

    def __init__(self, tasks: list[TaskEntity] | None = None) -> None:
        self.tasks: list[TaskEntity] = list(tasks or [])
        self.list_calls: list[TaskQuery] = []
        self.fail = False
        self._id = 1

    def _check(self, operation: str) -> None:
        if self.fail:
            raise RemoteQueryError(operation, RuntimeError("connection refused"))

    def _owned(self, user_id: str, status=ALL) -> list[TaskEntity]:
        owned = [t for t in self.tasks if t.user_id == user_id]
        if status != ALL:
            owned = [t for t in owned if t.status == status]
        return sorted(owned, key=lambda t: t.created_at, reverse=True)

    def count_tasks(self, user_id: str, status=ALL) -> int:
        self._check("count tasks")
        return len(self._owned(user_id, status))

    def list_tasks(self, query: TaskQuery) -> list[TaskEntity]:
        self._check("list tasks")
        self.list_calls.append(query)
        owned = self._owned(query.user_id, query.status)
        return owned[query.offset:query.offset + query.limit]

    def insert_task(self, values: dict[str, Any]) -> TaskEntity:
        self._check("insert task")
        task = TaskEntity(
            id=f"task-{self._id}",
            title=values["title"],
            description=values.get("description"),
            status=TaskStatus(values["status"]),
            priority=TaskPriority(values["priority"]),
            due_date=values.get("due_date"),
            created_at=values["created_at"],
            updated_at=values["updated_at"],
            user_id=values["user_id"],
        )
        self._id += 1
        self.tasks.append(task)
        return task

    def update_task(self, user_id: str, task_id: str, values: dict[str, Any]) -> TaskEntity | None:
        self._check("update task")
        task = next((t for t in self.tasks if t.id == task_id and t.user_id == user_id), None)
        if task is None:
            return None
        updated = replace(task, **values)
        self.tasks = [updated if t.id == task_id else t for t in self.tasks]
        return updated

    def delete_task(self, user_id: str, task_id: str) -> int:
        self._check("delete task")
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if not (t.id == task_id and t.user_id == user_id)]
        return before - len(self.tasks)

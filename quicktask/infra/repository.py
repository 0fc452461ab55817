from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from quicktask.domain.entities import TaskEntity
from quicktask.domain.enums import TaskPriority, TaskStatus
from quicktask.domain.errors import RemoteQueryError, TaskValidationError
from quicktask.domain.filters import ALL, StatusFilter, TaskQuery

from .models import TaskModel

logger = logging.getLogger(__name__)


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        title=model.title,
        description=model.description,
        status=TaskStatus(model.status),
        priority=TaskPriority(model.priority),
        due_date=model.due_date,
        created_at=model.created_at,
        updated_at=model.updated_at,
        user_id=model.user_id,
    )


def parse_timestamp(value: datetime | str | None) -> Optional[datetime]:
    """Normalise a timestamp to naive UTC; accepts ISO-8601 strings."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise TaskValidationError(f"Invalid timestamp: {value!r}") from exc
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _to_row(values: dict[str, Any]) -> dict[str, Any]:
    row = dict(values)
    try:
        if "status" in row:
            row["status"] = TaskStatus(row["status"]).value
        if "priority" in row:
            row["priority"] = TaskPriority(row["priority"]).value
    except ValueError as exc:
        raise TaskValidationError(str(exc)) from exc
    if "due_date" in row:
        row["due_date"] = parse_timestamp(row["due_date"])
    return row


def _scoped(stmt, user_id: str, status: StatusFilter):
    stmt = stmt.where(TaskModel.user_id == user_id)
    if status != ALL:
        stmt = stmt.where(TaskModel.status == TaskStatus(status).value)
    return stmt


class TaskRepository:
    """Owner-scoped CRUD over the ``tasks`` table.

    Every method opens its own session. Database errors surface as
    :class:`RemoteQueryError`; rows owned by someone else are never read or
    written, the calls simply match nothing.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise RemoteQueryError(operation, exc) from exc

    def count_tasks(self, user_id: str, status: StatusFilter = ALL) -> int:
        with self._session("count tasks") as session:
            stmt = _scoped(select(func.count()).select_from(TaskModel), user_id, status)
            return session.scalar(stmt) or 0

    def list_tasks(self, query: TaskQuery) -> list[TaskEntity]:
        with self._session("list tasks") as session:
            stmt = _scoped(select(TaskModel), query.user_id, query.status)
            stmt = (
                stmt.order_by(TaskModel.created_at.desc(), TaskModel.id.desc())
                .offset(query.offset)
                .limit(query.limit)
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def get_task(self, user_id: str, task_id: str) -> Optional[TaskEntity]:
        with self._session("get task") as session:
            task = session.scalar(
                select(TaskModel).where(TaskModel.id == task_id, TaskModel.user_id == user_id)
            )
            return _to_entity(task) if task else None

    def insert_task(self, values: dict[str, Any]) -> TaskEntity:
        row = _to_row(values)
        with self._session("insert task") as session:
            task = TaskModel(**row)
            session.add(task)
            session.commit()
            session.refresh(task)
            logger.debug("Inserted task %s for user %s", task.id, task.user_id)
            return _to_entity(task)

    def update_task(self, user_id: str, task_id: str, values: dict[str, Any]) -> Optional[TaskEntity]:
        row = _to_row(values)
        with self._session("update task") as session:
            task = session.scalar(
                select(TaskModel).where(TaskModel.id == task_id, TaskModel.user_id == user_id)
            )
            if not task:
                return None
            # updated_at never moves backwards, even if the caller's clock does.
            if row.get("updated_at") is not None and row["updated_at"] < task.updated_at:
                row["updated_at"] = task.updated_at
            for key, value in row.items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    def delete_task(self, user_id: str, task_id: str) -> int:
        with self._session("delete task") as session:
            result = session.execute(
                delete(TaskModel).where(TaskModel.id == task_id, TaskModel.user_id == user_id)
            )
            session.commit()
            return result.rowcount or 0

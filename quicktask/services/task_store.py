from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

from quicktask.domain.entities import UPDATABLE_FIELDS, AuthUser, TaskDraft, TaskEntity
from quicktask.domain.enums import TaskStatus
from quicktask.domain.errors import (
    NotAuthenticatedError,
    RemoteQueryError,
    TaskStoreError,
    TaskValidationError,
)
from quicktask.domain.filters import ALL, StatusFilter, TaskQuery, filter_tasks, parse_status_filter
from quicktask.domain.pagination import DEFAULT_LIMIT, total_pages
from quicktask.infra.models import utcnow

logger = logging.getLogger(__name__)

SIGN_IN_TO_VIEW = "Please sign in to view your tasks"
SIGN_IN_TO_CREATE = "Please sign in to create tasks"
SIGN_IN_TO_UPDATE = "Please sign in to update tasks"
SIGN_IN_TO_DELETE = "Please sign in to delete tasks"
LOAD_FAILED = "Failed to load tasks. Please try again later."
CREATE_FAILED = "Failed to create task. Please try again."
UPDATE_FAILED = "Failed to update task. Please try again."
DELETE_FAILED = "Failed to delete task. Please try again."

RECENT_TASKS_LIMIT = 10


class TaskQueryClient(Protocol):
    def count_tasks(self, user_id: str, status: StatusFilter = ALL) -> int: ...

    def list_tasks(self, query: TaskQuery) -> list[TaskEntity]: ...

    def insert_task(self, values: dict[str, Any]) -> TaskEntity: ...

    def update_task(self, user_id: str, task_id: str, values: dict[str, Any]) -> Optional[TaskEntity]: ...

    def delete_task(self, user_id: str, task_id: str) -> int: ...


IdentityProvider = Callable[[], Optional[AuthUser]]
Listener = Callable[["TaskStoreState"], None]


@dataclass(frozen=True)
class TaskStoreState:
    tasks: tuple[TaskEntity, ...] = ()
    filtered_tasks: tuple[TaskEntity, ...] = ()
    selected_task: Optional[TaskEntity] = None
    is_loading: bool = False
    error: Optional[str] = None
    status_filter: StatusFilter = ALL
    search_query: str = ""
    page: int = 1
    limit: int = DEFAULT_LIMIT
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.limit)


def _clean_title(title: Any) -> str:
    cleaned = title.strip() if isinstance(title, str) else ""
    if not cleaned:
        raise TaskValidationError("Task title is required.")
    return cleaned


class TaskStore:
    """Client-side cache of one page of the signed-in user's tasks.

    The database stays authoritative. Each action resolves the current user
    through ``identity`` at call time, talks to the query client once and
    then reconciles the held page. Status and search filters on
    ``filtered_tasks`` only narrow the page already loaded; they do not
    fetch, so a filtered view may hold fewer than ``limit`` tasks while
    other pages still have matches.

    Remote failures end up as a message in ``state.error``. Fetching fails
    softly; mutations additionally raise :class:`TaskStoreError`.
    """

    def __init__(
        self,
        repository: TaskQueryClient,
        identity: IdentityProvider,
        *,
        limit: int = DEFAULT_LIMIT,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repository
        self._identity = identity
        self._clock = clock
        self._initial = TaskStoreState(limit=limit)
        self._state = self._initial
        self._listeners: list[Listener] = []

    @property
    def state(self) -> TaskStoreState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def reset(self) -> None:
        self._replace(self._initial)

    def _replace(self, state: TaskStoreState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def _set(self, **changes: Any) -> None:
        self._replace(replace(self._state, **changes))

    def _require_user(self, message: str) -> AuthUser:
        user = self._identity()
        if user is None:
            self._set(error=message)
            raise NotAuthenticatedError(message)
        return user

    # Queries

    def fetch_tasks(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[StatusFilter] = None,
    ) -> None:
        self._set(is_loading=True, error=None)
        try:
            user = self._identity()
            if user is None:
                self._set(tasks=(), filtered_tasks=(), total_count=0, error=SIGN_IN_TO_VIEW)
                return

            state = self._state
            query = TaskQuery(
                user_id=user.id,
                status=state.status_filter if status is None else parse_status_filter(status),
                page=max(1, page or state.page),
                limit=limit or state.limit,
            )
            if query.limit < 1:
                raise TaskValidationError("Page size must be positive.")

            try:
                count = self._repo.count_tasks(user.id, query.status)
                tasks = tuple(self._repo.list_tasks(query))
            except RemoteQueryError:
                logger.exception("Error fetching tasks for user %s", user.id)
                self._set(error=LOAD_FAILED)
                return

            self._set(
                tasks=tasks,
                filtered_tasks=tuple(filter_tasks(tasks, query.status, self._state.search_query)),
                page=query.page,
                limit=query.limit,
                total_count=count,
                status_filter=query.status,
            )
        finally:
            self._set(is_loading=False)

    def get_tasks_by_status(self, status: TaskStatus) -> list[TaskEntity]:
        return [task for task in self._state.tasks if task.status == status]

    def get_task_counts(self) -> dict[TaskStatus, int]:
        counts = {status: 0 for status in TaskStatus}
        for task in self._state.tasks:
            counts[task.status] += 1
        return counts

    def recent_tasks(self, count: int = RECENT_TASKS_LIMIT) -> list[TaskEntity]:
        return list(self._state.tasks[:count])

    # Mutations

    def create_task(self, draft: TaskDraft) -> TaskEntity:
        self._set(is_loading=True, error=None)
        try:
            user = self._require_user(SIGN_IN_TO_CREATE)
            now = self._clock()
            values = {
                "title": _clean_title(draft.title),
                "description": draft.description or None,
                "status": draft.status,
                "priority": draft.priority,
                "due_date": draft.due_date,
                "user_id": user.id,
                "created_at": now,
                "updated_at": now,
            }
            try:
                task = self._repo.insert_task(values)
            except RemoteQueryError:
                logger.exception("Error creating task for user %s", user.id)
                self._set(error=CREATE_FAILED)
                raise TaskStoreError(CREATE_FAILED) from None

            self._set(tasks=(task, *self._state.tasks), total_count=self._state.total_count + 1)
            self._reapply_filter()
            return task
        finally:
            self._set(is_loading=False)

    def update_task(self, task_id: str, updates: dict[str, Any]) -> Optional[TaskEntity]:
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise TaskValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        self._set(is_loading=True, error=None)
        try:
            user = self._require_user(SIGN_IN_TO_UPDATE)
            values = dict(updates)
            if "title" in values:
                values["title"] = _clean_title(values["title"])
            if "description" in values:
                values["description"] = values["description"] or None
            values["updated_at"] = self._clock()

            try:
                task = self._repo.update_task(user.id, task_id, values)
            except RemoteQueryError:
                logger.exception("Error updating task %s", task_id)
                self._set(error=UPDATE_FAILED)
                raise TaskStoreError(UPDATE_FAILED) from None

            if task is None:
                logger.info("Update of task %s matched no rows for user %s", task_id, user.id)
                return None

            state = self._state
            selected = state.selected_task
            self._set(
                tasks=tuple(task if item.id == task_id else item for item in state.tasks),
                selected_task=task if selected and selected.id == task_id else selected,
            )
            self._reapply_filter()
            return task
        finally:
            self._set(is_loading=False)

    def delete_task(self, task_id: str) -> bool:
        self._set(is_loading=True, error=None)
        try:
            user = self._require_user(SIGN_IN_TO_DELETE)
            try:
                deleted = self._repo.delete_task(user.id, task_id)
            except RemoteQueryError:
                logger.exception("Error deleting task %s", task_id)
                self._set(error=DELETE_FAILED)
                raise TaskStoreError(DELETE_FAILED) from None

            if not deleted:
                logger.info("Delete of task %s matched no rows for user %s", task_id, user.id)
                return False

            state = self._state
            selected = state.selected_task
            self._set(
                tasks=tuple(item for item in state.tasks if item.id != task_id),
                selected_task=None if selected and selected.id == task_id else selected,
                total_count=max(0, state.total_count - 1),
            )
            self._reapply_filter()
            return True
        finally:
            self._set(is_loading=False)

    # Local view state

    def select_task(self, task: Optional[TaskEntity]) -> None:
        self._set(selected_task=task)

    def set_status_filter(self, status: StatusFilter) -> None:
        status = parse_status_filter(status)
        state = self._state
        self._set(
            status_filter=status,
            filtered_tasks=tuple(filter_tasks(state.tasks, status, state.search_query)),
        )

    def set_search_query(self, query: str) -> None:
        query = query or ""
        state = self._state
        self._set(
            search_query=query,
            filtered_tasks=tuple(filter_tasks(state.tasks, state.status_filter, query)),
        )

    def _reapply_filter(self) -> None:
        self.set_status_filter(self._state.status_filter)

    # Pagination

    def set_page(self, page: int) -> None:
        self._set(page=page)
        self.fetch_tasks(page=page)

    def set_limit(self, limit: int) -> None:
        if limit < 1:
            raise TaskValidationError("Page size must be positive.")
        self._set(limit=limit, page=1)
        self.fetch_tasks(page=1, limit=limit)

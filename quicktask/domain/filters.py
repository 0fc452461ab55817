from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Union

from .entities import TaskEntity
from .enums import TaskStatus
from .pagination import DEFAULT_LIMIT

ALL = "all"

StatusFilter = Union[TaskStatus, Literal["all"]]


def parse_status_filter(value: str | TaskStatus | None) -> StatusFilter:
    if value is None or value == ALL:
        return ALL
    return TaskStatus(value)


@dataclass(frozen=True)
class TaskQuery:
    user_id: str
    status: StatusFilter = ALL
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def matches_search(task: TaskEntity, query: str) -> bool:
    needle = query.lower()
    if needle in task.title.lower():
        return True
    return bool(task.description) and needle in task.description.lower()


def filter_tasks(
    tasks: Iterable[TaskEntity],
    status: StatusFilter = ALL,
    search: Optional[str] = None,
) -> list[TaskEntity]:
    """Apply the status filter and free-text search to already loaded tasks.

    Only the tasks passed in are considered, so with server-side pagination
    this narrows the current page and nothing else.
    """
    filtered = list(tasks)
    if status != ALL:
        filtered = [task for task in filtered if task.status == status]
    if search:
        filtered = [task for task in filtered if matches_search(task, search)]
    return filtered

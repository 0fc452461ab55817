from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .enums import TaskPriority, TaskStatus

UPDATABLE_FIELDS = frozenset({"title", "description", "status", "priority", "due_date"})


def _iso(value: Optional[datetime]) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class TaskEntity:
    id: str
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    user_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": _iso(self.due_date),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "user_id": self.user_id,
        }


@dataclass(frozen=True)
class TaskDraft:
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: str
    created_at: datetime


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user: AuthUser
    expires_at: datetime

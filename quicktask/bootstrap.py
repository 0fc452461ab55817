from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.engine import Engine

from quicktask.config import Settings
from quicktask.infra.auth import AuthContext, AuthProvider, TokenStore
from quicktask.infra.db import create_db_engine, create_session_factory, init_db
from quicktask.infra.repository import TaskRepository
from quicktask.services.task_store import TaskStore


@dataclass
class AppContext:
    """Everything one running application session needs, wired once."""

    settings: Settings
    engine: Engine
    auth: AuthContext
    repository: TaskRepository
    store: TaskStore


def build_app(settings: Settings) -> AppContext:
    engine = create_db_engine(settings.database_url)
    init_db(engine, create_schema=settings.auto_create_schema)
    session_factory = create_session_factory(engine)

    provider = AuthProvider(session_factory, session_ttl=timedelta(hours=settings.session_ttl_hours))
    auth = AuthContext(provider, TokenStore(settings.session_path))
    repository = TaskRepository(session_factory)
    store = TaskStore(repository, auth.current_user, limit=settings.page_limit)
    return AppContext(settings=settings, engine=engine, auth=auth, repository=repository, store=store)

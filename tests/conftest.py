from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from quicktask.infra import models  # noqa: F401
from quicktask.infra.auth import AuthProvider
from quicktask.infra.db import Base, create_session_factory
from quicktask.infra.repository import TaskRepository


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture()
def repository(session_factory) -> TaskRepository:
    return TaskRepository(session_factory)


@pytest.fixture()
def auth_provider(session_factory) -> AuthProvider:
    return AuthProvider(session_factory, session_ttl=timedelta(hours=1), iterations=1_000)

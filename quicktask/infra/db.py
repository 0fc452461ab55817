from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(engine: Engine, create_schema: bool = False) -> None:
    # Table classes must be registered on Base before create_all.
    from . import models  # noqa: F401

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    if create_schema:
        Base.metadata.create_all(engine)

from __future__ import annotations

import pytest

from quicktask import config


def test_load_settings_reads_environment(monkeypatch) -> None:
    monkeypatch.setattr(config, "load_env", lambda: None)
    monkeypatch.setenv("DATABASE_URL", "sqlite:///quicktask.db")
    monkeypatch.setenv("TASKS_PAGE_LIMIT", "20")
    monkeypatch.setenv("AUTO_CREATE_SCHEMA", "yes")

    settings = config.load_settings()

    assert settings.database_url == "sqlite:///quicktask.db"
    assert settings.page_limit == 20
    assert settings.auto_create_schema is True
    assert settings.session_path.is_absolute()


def test_load_settings_requires_database_url(monkeypatch) -> None:
    monkeypatch.setattr(config, "load_env", lambda: None)
    monkeypatch.delenv("DATABASE_URL", raising=False)

    with pytest.raises(RuntimeError):
        config.load_settings()

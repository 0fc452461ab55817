from __future__ import annotations

import time
from datetime import datetime

import pytest

from quicktask.ui.datetimes import format_local, to_local, to_utc

pytestmark = pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")


@pytest.fixture()
def berlin(monkeypatch):
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_to_local_uses_offset_at_the_date(berlin) -> None:
    assert to_local(datetime(2026, 3, 1, 8, 0)) == datetime(2026, 3, 1, 9, 0)
    assert to_local(datetime(2026, 7, 1, 8, 0)) == datetime(2026, 7, 1, 10, 0)


def test_to_utc_reverses_to_local_across_dst(berlin) -> None:
    for stored in (datetime(2026, 1, 15, 23, 30), datetime(2026, 8, 15, 6, 45)):
        assert to_utc(to_local(stored)) == stored
    assert to_utc(datetime(2026, 3, 1, 9, 0)) == datetime(2026, 3, 1, 8, 0)


def test_format_local_renders_card_text(berlin) -> None:
    assert format_local(datetime(2026, 3, 1, 8, 0)) == "01.03.2026 09:00"
    assert format_local(None) == ""

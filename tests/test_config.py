from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from punch_clock import config
from punch_clock.config import Settings, display_zone, fixed_offset
from punch_clock.errors import TimezoneOutOfRange


def test_fixed_offset_bounds():
    assert fixed_offset(5.5).utcoffset(None) == dt.timedelta(hours=5, minutes=30)
    assert fixed_offset(-23).utcoffset(None) == dt.timedelta(hours=-23)
    with pytest.raises(TimezoneOutOfRange):
        fixed_offset(24)


def test_query_offset_wins(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config.settings, "utc_offset", 2.0)
    monkeypatch.setattr(config.settings, "timezone", "Europe/Berlin")
    assert display_zone(-4).utcoffset(None) == dt.timedelta(hours=-4)
    assert display_zone().utcoffset(None) == dt.timedelta(hours=2)


def test_timezone_name_is_used_without_offset(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config.settings, "utc_offset", None)
    monkeypatch.setattr(config.settings, "timezone", "Europe/Berlin")
    assert display_zone() == ZoneInfo("Europe/Berlin")


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path):
    monkeypatch.setenv("LEDGER_PATH", str(tmp_path / "record"))
    monkeypatch.setenv("UTC_OFFSET", "")
    monkeypatch.setenv("CALENDAR_WIDTH", "30")
    settings = Settings()
    assert settings.ledger_path == tmp_path / "record"
    assert settings.utc_offset is None
    assert settings.calendar_width == 30


def test_settings_reject_zero_width(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DAY_WIDTH", "0")
    with pytest.raises(ValueError):
        Settings()

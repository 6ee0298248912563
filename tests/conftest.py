from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from punch_clock.main import app
from punch_clock.record import Record
from punch_clock.storage import Ledger, get_ledger

UTC = dt.timezone.utc

SAMPLE_LEDGER = """\
2023-01-01T00:00:00.000000+00:00 Kickoff
2023-01-01T01:00:00.000000+00:00

2023-01-01T02:00:00.000000+00:00
2023-01-01T03:00:00.000000+00:00 Wrapped up

2023-01-01T04:00:00.000000+00:00 Evening push
"""


def at(hour: int, minute: int = 0, day: int = 1, month: int = 1, year: int = 2023) -> dt.datetime:
    return dt.datetime(year, month, day, hour, minute, tzinfo=UTC)


@pytest.fixture()
def sample_record() -> Record:
    return Record.parse(SAMPLE_LEDGER)


@pytest.fixture()
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / ".punch_clock" / "record"


@pytest.fixture()
def ledger(ledger_path: Path) -> Ledger:
    ledger = Ledger(ledger_path)
    ledger.init()
    return ledger


@pytest.fixture(scope="function")
def client(ledger_path: Path) -> Generator[TestClient, None, None]:
    def override_get_ledger():
        ledger = Ledger(ledger_path)
        try:
            yield ledger
        finally:
            ledger.discard()

    app.dependency_overrides[get_ledger] = override_get_ledger
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

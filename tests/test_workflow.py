from __future__ import annotations

import datetime as dt
from pathlib import Path

from fastapi.testclient import TestClient

from conftest import SAMPLE_LEDGER


def test_healthz(client: TestClient):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_init_clock_in_out_flow(client: TestClient, ledger_path: Path):
    init_resp = client.post("/ledger/init")
    assert init_resp.status_code == 201
    assert init_resp.json() == {"path": str(ledger_path), "entries": 0}
    assert client.post("/ledger/init").status_code == 409

    in_resp = client.post("/clock/in", json={"comment": "Kickoff"})
    assert in_resp.status_code == 201
    assert in_resp.json()["check_in"].endswith("+00:00")

    again = client.post("/clock/in", json={})
    assert again.status_code == 409
    assert again.json()["detail"] == "Already clocked-in."

    status_resp = client.get("/status")
    assert status_resp.status_code == 200
    assert status_resp.json()["state"] == "clocked_in"
    assert status_resp.json()["message"].startswith("Currently clocked in (")

    out_resp = client.post("/clock/out", json={"comment": "Done"})
    assert out_resp.status_code == 200
    data = out_resp.json()
    assert data["duration_seconds"] >= 0
    assert data["duration"].endswith("minutes")
    assert client.post("/clock/out", json={}).status_code == 409

    lines = ledger_path.read_text().splitlines()
    assert len(lines) == 2
    assert lines[0].endswith(" Kickoff")
    assert lines[1].endswith(" Done")

    dump_resp = client.get("/dump", params={"offset": 0})
    assert dump_resp.status_code == 200
    assert [(e["event"], e["comment"]) for e in dump_resp.json()] == [("in", "Kickoff"), ("out", "Done")]


def test_undo_flow(client: TestClient):
    client.post("/ledger/init")
    empty = client.post("/undo")
    assert empty.status_code == 200
    assert empty.json()["message"] == "Record is empty; nothing to undo."
    assert empty.json()["removed"] is None

    client.post("/clock/in", json={})
    undo_resp = client.post("/undo")
    assert undo_resp.status_code == 200
    assert undo_resp.json()["state"] == "empty"
    assert client.get("/status").json()["message"] == "No clock in/out records have been created."


def test_stats_calendar_and_day(client: TestClient, ledger_path: Path):
    ledger_path.parent.mkdir(parents=True)
    ledger_path.write_text(SAMPLE_LEDGER.rsplit("\n\n", 1)[0] + "\n")

    stats_resp = client.get("/stats", params={"day": "2023-01-01", "offset": 0})
    assert stats_resp.status_code == 200
    stats = stats_resp.json()
    assert stats["total_seconds"] == 7200
    assert stats["day_seconds"] == 7200
    assert stats["current_session_seconds"] is None

    calendar = client.get(
        "/calendar", params={"from_date": "2023-01-01", "to_date": "2023-01-02", "width": 24, "offset": 0}
    )
    assert calendar.status_code == 200
    assert calendar.text == (
        "Total time: 2 hours, 0 minutes\n"
        "2023-01-01 ▓░▓░▒░▒░▒░▒░▒░▒░▒░▒░▒░▒░ 2 hours, 0 minutes\n"
        "2023-01-02 ░▒░▒░▒░▒░▒░▒░▒░▒░▒░▒░▒░▒\n"
    )

    day = client.get("/day", params={"day": "2023-01-01", "offset": 0})
    assert day.status_code == 200
    day_lines = day.text.rstrip("\n").split("\n")
    assert len(day_lines) == 24
    assert day_lines[0].endswith("00:00 -> 01:00 *Kickoff")

    half_hours = client.get("/day", params={"day": "2023-01-01", "resolution": "half-hour", "offset": 0})
    assert len(half_hours.text.rstrip("\n").split("\n")) == 48


def test_offset_shifts_day_boundaries(client: TestClient, ledger_path: Path):
    ledger_path.parent.mkdir(parents=True)
    ledger_path.write_text(SAMPLE_LEDGER.rsplit("\n\n", 1)[0] + "\n")
    # At UTC-3 both entries fall on the last day of 2022.
    stats = client.get("/stats", params={"day": "2022-12-31", "offset": -3}).json()
    assert stats["day_seconds"] == 7200
    dump = client.get("/dump", params={"offset": -3}).json()
    assert dump[0]["timestamp"] == "2022-12-31T21:00:00-03:00"


def test_uninitialized_ledger(client: TestClient):
    resp = client.get("/status")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Punch Clock is not initialized"
    assert client.post("/clock/in", json={}).status_code == 404


def test_invalid_requests(client: TestClient):
    client.post("/ledger/init")
    assert client.post("/clock/in", json={"comment": "line one\nline two"}).status_code == 422
    assert client.get("/day", params={"resolution": "fortnight", "offset": 0}).status_code == 400
    assert client.get("/calendar", params={"width": 0}).status_code == 400
    out_of_range = client.get("/stats", params={"offset": 30})
    assert out_of_range.status_code == 400
    assert "out-of-bounds timezone offset" in out_of_range.json()["detail"]
    today = dt.date.today().isoformat()
    inverted = client.get("/calendar", params={"from_date": today, "to_date": "2000-01-01", "offset": 0})
    assert inverted.status_code == 400


def test_corrupt_ledger_is_reported(client: TestClient, ledger_path: Path):
    ledger_path.parent.mkdir(parents=True)
    ledger_path.write_text("2023-01-01T00:00:00+00:00\nnot a timestamp\n")
    resp = client.get("/status")
    assert resp.status_code == 422
    assert "line 2" in resp.json()["detail"]

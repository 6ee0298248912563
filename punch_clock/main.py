from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import display_zone, settings
from .errors import PunchClockError
from .schemas import (
    ClockInResponse,
    ClockOutResponse,
    ClockRequest,
    InitResponse,
    LedgerEvent,
    StatsResponse,
    StatusResponse,
    UndoResponse,
)
from .services import clock_in, clock_out, day_view, dump, init_ledger, paint_calendar, stats, undo
from .services import status as ledger_status
from .storage import Ledger, get_ledger
from .time_range import DayResolution
from .timeutil import human_readable_duration

app = FastAPI(title=settings.app_name)


@app.exception_handler(PunchClockError)
async def punch_clock_error_handler(request: Request, exc: PunchClockError) -> JSONResponse:
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/ledger/init", response_model=InitResponse, status_code=status.HTTP_201_CREATED)
def ledger_init(ledger: Ledger = Depends(get_ledger)) -> InitResponse:
    record = init_ledger(ledger)
    return InitResponse(path=str(ledger.path), entries=len(record.entries))


@app.post("/clock/in", response_model=ClockInResponse, status_code=status.HTTP_201_CREATED)
def work_clock_in(payload: ClockRequest, ledger: Ledger = Depends(get_ledger)) -> ClockInResponse:
    check_in = clock_in(ledger, payload.comment)
    return ClockInResponse(check_in=check_in)


@app.post("/clock/out", response_model=ClockOutResponse)
def work_clock_out(payload: ClockRequest, ledger: Ledger = Depends(get_ledger)) -> ClockOutResponse:
    check_out, since = clock_out(ledger, payload.comment)
    return ClockOutResponse(
        check_out=check_out,
        duration_seconds=since.total_seconds(),
        duration=human_readable_duration(since),
    )


@app.post("/undo", response_model=UndoResponse)
def work_undo(ledger: Ledger = Depends(get_ledger)) -> UndoResponse:
    return UndoResponse(**undo(ledger))


@app.get("/status", response_model=StatusResponse)
def read_status(ledger: Ledger = Depends(get_ledger)) -> StatusResponse:
    return StatusResponse(**ledger_status(ledger.record))


@app.get("/stats", response_model=StatsResponse)
def read_stats(
    day: Optional[dt.date] = None,
    offset: Optional[float] = None,
    ledger: Ledger = Depends(get_ledger),
) -> StatsResponse:
    return StatsResponse(**stats(ledger.record, display_zone(offset), day))


@app.get("/calendar", response_class=PlainTextResponse)
def read_calendar(
    from_date: Optional[dt.date] = None,
    to_date: Optional[dt.date] = None,
    width: Optional[int] = None,
    offset: Optional[float] = None,
    ledger: Ledger = Depends(get_ledger),
) -> str:
    if width is not None and width < 1:
        raise HTTPException(status_code=400, detail="Width must be at least 1")
    lines = paint_calendar(ledger.record, display_zone(offset), from_date, to_date, width)
    return "\n".join(lines) + "\n"


@app.get("/day", response_class=PlainTextResponse)
def read_day(
    day: Optional[dt.date] = None,
    resolution: str = "hour",
    offset: Optional[float] = None,
    ledger: Ledger = Depends(get_ledger),
) -> str:
    try:
        day_resolution = DayResolution.from_name(resolution)
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown resolution: {resolution}") from None
    return day_view(ledger.record, display_zone(offset), day, day_resolution) + "\n"


@app.get("/dump", response_model=list[LedgerEvent])
def read_dump(offset: Optional[float] = None, ledger: Ledger = Depends(get_ledger)) -> list[LedgerEvent]:
    return [LedgerEvent(**event) for event in dump(ledger.record, display_zone(offset))]

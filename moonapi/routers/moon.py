from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from lunar import PhaseResolver, to_zone

from ..models import DayPhaseOut, MonthCalendarOut, PhaseEventOut
from ..settings import get_resolver, settings

router = APIRouter(prefix="/v1/moon", tags=["moon"])

logger = logging.getLogger(__name__)

# resolving a day also touches the neighbouring UTC months
_MIN_YEAR = 2
_MAX_YEAR = 9998


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"ok": False, "data": None, "error": message})


def _zone_name(tz: Optional[str]) -> str:
    return (tz or settings.MOON_DEFAULT_TZ).strip()


def _day_out(day: date, tz: str, phase) -> DayPhaseOut:
    return DayPhaseOut(date=day, tz=tz, phase=phase.name.lower(), label=phase.label, asset=phase.asset)


@router.get("/phase")
def phase_for_day(
    day: date = Query(..., alias="date"),
    tz: Optional[str] = Query(None),
    resolver: PhaseResolver = Depends(get_resolver),
):
    if not _MIN_YEAR <= day.year <= _MAX_YEAR:
        return _bad_request(f"date must be between years {_MIN_YEAR} and {_MAX_YEAR}")

    zone_name = _zone_name(tz)
    try:
        zone = to_zone(zone_name)
    except ValueError as exc:
        return _bad_request(str(exc))

    phase = resolver.resolve(day, zone)
    return {"ok": True, "data": _day_out(day, zone_name, phase).model_dump(mode="json"), "error": None}


@router.get("/calendar")
def month_calendar(
    year: int = Query(..., ge=_MIN_YEAR, le=_MAX_YEAR),
    month: int = Query(..., ge=1, le=12),
    tz: Optional[str] = Query(None),
    resolver: PhaseResolver = Depends(get_resolver),
):
    zone_name = _zone_name(tz)
    try:
        zone = to_zone(zone_name)
    except ValueError as exc:
        return _bad_request(str(exc))

    days = [_day_out(day, zone_name, phase) for day, phase in resolver.resolve_month(year, month, zone)]
    events = [
        PhaseEventOut(instant=event.instant, phase=event.phase.value)
        for event in resolver.events_in_month(year, month, zone)
    ]
    logger.debug("[API] calendar %04d-%02d %s: %d events", year, month, zone_name, len(events))
    payload = MonthCalendarOut(year=year, month=month, tz=zone_name, days=days, events=events)
    return {"ok": True, "data": payload.model_dump(mode="json"), "error": None}

from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional, Tuple, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .cache import PhaseCache
from .oracle import EphemPhaseOracle, PhaseOracle
from .phases import DisplayPhase, MonthKey, PhaseEvent


logger = logging.getLogger(__name__)

ZoneLike = Union[str, tzinfo]

# A primary phase is shown for the civil day that ends less than this long after it
_PRIMARY_DISPLAY_WINDOW = timedelta(days=1)


def to_zone(zone: ZoneLike) -> tzinfo:
    """Accept a tzinfo or an IANA zone name; unknown names raise ValueError."""
    if isinstance(zone, tzinfo):
        return zone
    name = (zone or "").strip()
    if not name:
        raise ValueError("time zone is required")
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ValueError(f"unknown time zone: {zone!r}") from exc


def day_bounds_utc(day: date, zone: ZoneLike) -> Tuple[datetime, datetime]:
    """First and last representable instants of *day* in *zone*, converted to UTC.

    Each bound is localized on its own, so a DST day spans 23 or 25 hours.
    """
    tz = to_zone(zone)
    start = datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)
    end = datetime.combine(day, time.max, tzinfo=tz).astimezone(timezone.utc)
    return start, end


class PhaseResolver:
    """Maps civil dates to one of the eight displayed moon phases."""

    def __init__(
        self,
        oracle: Optional[PhaseOracle] = None,
        cache: Optional[PhaseCache] = None,
        max_months: Optional[int] = None,
    ) -> None:
        if cache is None:
            cache = PhaseCache(oracle or EphemPhaseOracle(), max_months=max_months)
        self.cache = cache

    def _events_between(self, start: datetime, end: datetime) -> List[PhaseEvent]:
        # the month before start always holds the primary event preceding the range
        first = MonthKey.from_instant(start).previous()
        last = MonthKey.from_instant(end)
        merged = set()
        key = first
        while key <= last:
            merged.update(self.cache.get_or_compute(key))
            key = key.next()
        return sorted(merged, key=lambda event: event.instant)

    def resolve(self, day: date, zone: ZoneLike) -> DisplayPhase:
        start, end = day_bounds_utc(day, zone)
        candidates = self._events_between(start, end)

        found: Optional[PhaseEvent] = None
        for event in candidates:
            if event.instant > end:
                break
            found = event

        if found is None:
            logger.error(
                "[MOON] no primary phase cached before %s (%s); cache coverage gap",
                day.isoformat(),
                zone,
            )
            return candidates[0].phase.display.previous()

        if end - found.instant < _PRIMARY_DISPLAY_WINDOW:
            return found.phase.display
        return found.phase.display.next()

    def resolve_month(self, year: int, month: int, zone: ZoneLike) -> List[Tuple[date, DisplayPhase]]:
        tz = to_zone(zone)
        days_in_month = calendar.monthrange(year, month)[1]
        return [
            (date(year, month, d), self.resolve(date(year, month, d), tz))
            for d in range(1, days_in_month + 1)
        ]

    def events_in_month(self, year: int, month: int, zone: ZoneLike) -> List[PhaseEvent]:
        """Primary events whose instant falls on a civil day of the month in *zone*."""
        tz = to_zone(zone)
        days_in_month = calendar.monthrange(year, month)[1]
        start, _ = day_bounds_utc(date(year, month, 1), tz)
        _, end = day_bounds_utc(date(year, month, days_in_month), tz)
        return [event for event in self._events_between(start, end) if start <= event.instant <= end]

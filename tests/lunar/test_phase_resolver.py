import logging
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lunar import DisplayPhase, MonthKey, PhaseEvent, PhaseResolver, PrimaryPhase, day_bounds_utc, to_zone
from tests.fakes import SynodicOracle


ZONES = ["UTC", "America/Los_Angeles", "Europe/Berlin", "Asia/Tokyo", "Pacific/Kiritimati", "Pacific/Pago_Pago"]


def _resolver(**kwargs) -> PhaseResolver:
    return PhaseResolver(oracle=SynodicOracle(**kwargs))


def test_full_moon_day_and_following_day() -> None:
    resolver = _resolver()
    assert resolver.resolve(date(2024, 1, 25), "UTC") is DisplayPhase.FULL
    assert resolver.resolve(date(2024, 1, 26), "UTC") is DisplayPhase.WANING_GIBBOUS
    assert resolver.resolve(date(2024, 1, 24), "UTC") is DisplayPhase.WAXING_GIBBOUS


def test_resolve_accepts_tzinfo_objects() -> None:
    resolver = _resolver()
    assert resolver.resolve(date(2024, 1, 25), timezone.utc) is DisplayPhase.FULL
    assert resolver.resolve(date(2024, 1, 25), ZoneInfo("Europe/London")) is DisplayPhase.FULL


def test_event_late_in_utc_day_lands_on_next_local_day_east_of_utc() -> None:
    # 17:54Z is 02:54 on the 26th in Tokyo
    resolver = _resolver()
    assert resolver.resolve(date(2024, 1, 25), "Asia/Tokyo") is DisplayPhase.WAXING_GIBBOUS
    assert resolver.resolve(date(2024, 1, 26), "Asia/Tokyo") is DisplayPhase.FULL
    assert resolver.resolve(date(2024, 1, 27), "Asia/Tokyo") is DisplayPhase.WANING_GIBBOUS


@pytest.mark.parametrize("zone", ZONES)
def test_consecutive_days_advance_at_most_one_step(zone: str) -> None:
    resolver = _resolver()
    day = date(2023, 11, 1)
    previous = resolver.resolve(day, zone)
    seen = {previous}
    for _ in range(430):
        day += timedelta(days=1)
        current = resolver.resolve(day, zone)
        assert isinstance(current, DisplayPhase)
        assert current in (previous, previous.next()), f"{zone} {day}: {previous} -> {current}"
        seen.add(current)
        previous = current
    assert seen == set(DisplayPhase)


def test_each_primary_state_shown_on_exactly_one_day_per_event() -> None:
    resolver = _resolver()
    days = resolver.resolve_month(2024, 1, "UTC")
    full_days = [d for d, phase in days if phase is DisplayPhase.FULL]
    assert full_days == [date(2024, 1, 25)]


def test_second_resolve_is_a_cache_hit() -> None:
    oracle = SynodicOracle()
    resolver = PhaseResolver(oracle=oracle)

    first = resolver.resolve(date(2024, 3, 14), "Europe/Berlin")
    calls = oracle.total_calls
    second = resolver.resolve(date(2024, 3, 14), "Europe/Berlin")

    assert first is second
    assert oracle.total_calls == calls


def test_day_spanning_two_utc_months_uses_both_months() -> None:
    # Full moon at 03:00Z on Feb 1 falls on Jan 31 in Los Angeles
    full = datetime(2024, 2, 1, 3, 0, tzinfo=timezone.utc)
    oracle = SynodicOracle(full_moon=full)
    resolver = PhaseResolver(oracle=oracle)

    start, end = day_bounds_utc(date(2024, 1, 31), "America/Los_Angeles")
    assert MonthKey.from_instant(start) == MonthKey(2024, 1)
    assert MonthKey.from_instant(end) == MonthKey(2024, 2)

    assert resolver.resolve(date(2024, 1, 31), "America/Los_Angeles") is DisplayPhase.FULL
    assert MonthKey(2024, 2) in resolver.cache
    assert resolver.resolve(date(2024, 2, 1), "America/Los_Angeles") is DisplayPhase.WANING_GIBBOUS


def test_first_day_of_month_sees_event_from_previous_month() -> None:
    # last quarter late on Dec 31; Jan 1 holds no earlier January event
    lq = datetime(2023, 12, 31, 22, 0, tzinfo=timezone.utc)
    full = lq - timedelta(days=29.530588853) / 4
    resolver = PhaseResolver(oracle=SynodicOracle(full_moon=full))
    assert resolver.resolve(date(2023, 12, 31), "UTC") is DisplayPhase.LAST_QUARTER
    assert resolver.resolve(date(2024, 1, 1), "UTC") is DisplayPhase.WANING_CRESCENT
    assert resolver.resolve(date(2024, 1, 2), "UTC") is DisplayPhase.WANING_CRESCENT
    assert MonthKey(2023, 12) in resolver.cache


def test_dst_days_are_not_fixed_length() -> None:
    spring_start, spring_end = day_bounds_utc(date(2024, 3, 10), "America/New_York")
    fall_start, fall_end = day_bounds_utc(date(2024, 11, 3), "America/New_York")
    assert spring_end - spring_start == timedelta(hours=23) - timedelta(microseconds=1)
    assert fall_end - fall_start == timedelta(hours=25) - timedelta(microseconds=1)
    assert spring_start == datetime(2024, 3, 10, 5, 0, tzinfo=timezone.utc)


def test_dst_day_resolves() -> None:
    new = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
    resolver = PhaseResolver(oracle=SynodicOracle(full_moon=new + timedelta(days=29.530588853) / 2))
    assert resolver.resolve(date(2024, 3, 9), "America/New_York") is DisplayPhase.WANING_CRESCENT
    assert resolver.resolve(date(2024, 3, 10), "America/New_York") is DisplayPhase.NEW
    assert resolver.resolve(date(2024, 3, 11), "America/New_York") is DisplayPhase.WAXING_CRESCENT


def test_unknown_zone_raises_value_error() -> None:
    resolver = _resolver()
    with pytest.raises(ValueError):
        resolver.resolve(date(2024, 1, 25), "Mars/Olympus_Mons")
    with pytest.raises(ValueError):
        to_zone("")
    # a tzdata directory rather than a zone file
    with pytest.raises(ValueError):
        to_zone("America")
    with pytest.raises(ValueError):
        resolver.resolve(date(2024, 1, 25), "Z" * 300)


def test_events_in_month_uses_local_days() -> None:
    resolver = _resolver()
    events = resolver.events_in_month(2024, 1, "UTC")
    assert PhaseEvent(datetime(2024, 1, 25, 17, 54, tzinfo=timezone.utc), PrimaryPhase.FULL) in events
    assert [e.instant for e in events] == sorted(e.instant for e in events)
    assert all(e.instant.year == 2024 and e.instant.month == 1 for e in events)


def test_resolve_month_lists_every_day() -> None:
    resolver = _resolver()
    days = resolver.resolve_month(2024, 2, "Europe/Berlin")
    assert [d for d, _ in days] == [date(2024, 2, n) for n in range(1, 30)]


class _StubCache:
    def __init__(self, events):
        self.events = tuple(events)

    def get_or_compute(self, key):
        return self.events


def test_missing_prior_event_falls_back_and_logs(caplog) -> None:
    later = PhaseEvent(datetime(2024, 1, 25, 17, 54, tzinfo=timezone.utc), PrimaryPhase.FULL)
    resolver = PhaseResolver(cache=_StubCache([later]))

    with caplog.at_level(logging.ERROR, logger="lunar.resolver"):
        phase = resolver.resolve(date(2024, 1, 10), "UTC")

    assert phase is DisplayPhase.WAXING_GIBBOUS
    assert "coverage gap" in caplog.text


def test_primary_phase_held_until_exactly_one_day_before_end_of_day() -> None:
    _, end = day_bounds_utc(date(2024, 1, 25), "UTC")

    at_cutoff = PhaseEvent(end - timedelta(days=1), PrimaryPhase.FULL)
    resolver = PhaseResolver(cache=_StubCache([at_cutoff]))
    assert resolver.resolve(date(2024, 1, 25), "UTC") is DisplayPhase.WANING_GIBBOUS

    just_inside = PhaseEvent(end - timedelta(days=1) + timedelta(microseconds=1), PrimaryPhase.FULL)
    resolver = PhaseResolver(cache=_StubCache([just_inside]))
    assert just_inside.instant == datetime(2024, 1, 25, tzinfo=timezone.utc)
    assert resolver.resolve(date(2024, 1, 25), "UTC") is DisplayPhase.FULL

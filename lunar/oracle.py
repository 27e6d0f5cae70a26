"""Primary-phase oracles.

An oracle answers two questions about one of the four primary phases: when it
next occurs at or after an instant, and when it next occurs strictly after an
instant. Everything else in :mod:`lunar` is built on those two calls, so tests
can swap in a fake without pulling in an ephemeris.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, List, Protocol

import ephem

from .phases import PrimaryPhase

# Upper bound on occurrences of a single phase in one month-sized range
_MAX_OCCURRENCES_PER_RANGE = 6


class PhaseOracle(Protocol):
    def first_occurrence_at_or_after(self, phase: PrimaryPhase, instant: datetime) -> datetime:
        ...

    def next_occurrence_after(self, phase: PrimaryPhase, instant: datetime) -> datetime:
        ...


def _as_utc(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


class EphemPhaseOracle:
    """Oracle backed by PyEphem's ``next_*_moon`` searches."""

    _SEARCHES: Dict[PrimaryPhase, Callable] = {
        PrimaryPhase.NEW: ephem.next_new_moon,
        PrimaryPhase.FIRST_QUARTER: ephem.next_first_quarter_moon,
        PrimaryPhase.FULL: ephem.next_full_moon,
        PrimaryPhase.LAST_QUARTER: ephem.next_last_quarter_moon,
    }

    @staticmethod
    def _to_ephem(instant: datetime) -> ephem.Date:
        # ephem.Date reads naive datetimes as UTC
        return ephem.Date(_as_utc(instant).replace(tzinfo=None))

    @staticmethod
    def _from_ephem(value) -> datetime:
        return ephem.Date(value).datetime().replace(tzinfo=timezone.utc)

    def next_occurrence_after(self, phase: PrimaryPhase, instant: datetime) -> datetime:
        search = self._SEARCHES[phase]
        return self._from_ephem(search(self._to_ephem(instant)))

    def first_occurrence_at_or_after(self, phase: PrimaryPhase, instant: datetime) -> datetime:
        search = self._SEARCHES[phase]
        # PyEphem only searches strictly forward; back off one second to include the instant
        found = self._from_ephem(search(self._to_ephem(instant) - ephem.second))
        if found < _as_utc(instant):
            found = self.next_occurrence_after(phase, instant)
        return found


def moments_in_range(
    oracle: PhaseOracle,
    phase: PrimaryPhase,
    start: datetime,
    end: datetime,
) -> List[datetime]:
    """Return every occurrence of *phase* in the closed range [start, end], ascending."""

    moments: List[datetime] = []
    current = oracle.first_occurrence_at_or_after(phase, start)
    while current <= end:
        moments.append(current)
        if len(moments) > _MAX_OCCURRENCES_PER_RANGE:
            raise ValueError(
                f"range {start.isoformat()}..{end.isoformat()} is too wide for a single phase scan"
            )
        current = oracle.next_occurrence_after(phase, current)
    return moments

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List


class DisplayPhase(str, Enum):
    """The eight moon states shown on a calendar day, in lunar order."""

    NEW = "new_moon"
    WAXING_CRESCENT = "waxing_crescent"
    FIRST_QUARTER = "first_quarter_moon"
    WAXING_GIBBOUS = "waxing_gibbous"
    FULL = "full_moon"
    WANING_GIBBOUS = "waning_gibbous"
    LAST_QUARTER = "last_quarter_moon"
    WANING_CRESCENT = "waning_crescent"

    @classmethod
    def cycle(cls) -> List["DisplayPhase"]:
        return list(cls)

    def _shift(self, steps: int) -> "DisplayPhase":
        members = self.cycle()
        return members[(members.index(self) + steps) % len(members)]

    def next(self) -> "DisplayPhase":
        return self._shift(1)

    def previous(self) -> "DisplayPhase":
        return self._shift(-1)

    @property
    def asset(self) -> str:
        """Identifier of the image the display layer binds to this state."""
        return self.value

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_primary(self) -> bool:
        return self in _PRIMARY_TO_DISPLAY.values()


_LABELS = {
    DisplayPhase.NEW: "New Moon",
    DisplayPhase.WAXING_CRESCENT: "Waxing Crescent",
    DisplayPhase.FIRST_QUARTER: "First Quarter",
    DisplayPhase.WAXING_GIBBOUS: "Waxing Gibbous",
    DisplayPhase.FULL: "Full Moon",
    DisplayPhase.WANING_GIBBOUS: "Waning Gibbous",
    DisplayPhase.LAST_QUARTER: "Last Quarter",
    DisplayPhase.WANING_CRESCENT: "Waning Crescent",
}


class PrimaryPhase(str, Enum):
    """Instantaneous lunar events reported by a phase oracle."""

    NEW = "new"
    FIRST_QUARTER = "first_quarter"
    FULL = "full"
    LAST_QUARTER = "last_quarter"

    @property
    def display(self) -> DisplayPhase:
        return _PRIMARY_TO_DISPLAY[self]


_PRIMARY_TO_DISPLAY = {
    PrimaryPhase.NEW: DisplayPhase.NEW,
    PrimaryPhase.FIRST_QUARTER: DisplayPhase.FIRST_QUARTER,
    PrimaryPhase.FULL: DisplayPhase.FULL,
    PrimaryPhase.LAST_QUARTER: DisplayPhase.LAST_QUARTER,
}


@dataclass(frozen=True, order=True)
class PhaseEvent:
    """An exact occurrence of a primary phase. ``instant`` is an aware UTC datetime."""

    instant: datetime
    phase: PrimaryPhase

    def as_dict(self) -> dict:
        return {"instant": self.instant.isoformat(), "phase": self.phase.value}


@dataclass(frozen=True, order=True)
class MonthKey:
    """A UTC calendar month, used to partition cached phase events."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month out of range: {self.month}")

    @classmethod
    def from_instant(cls, instant: datetime) -> "MonthKey":
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        utc = instant.astimezone(timezone.utc)
        return cls(utc.year, utc.month)

    def start(self) -> datetime:
        return datetime(self.year, self.month, 1, tzinfo=timezone.utc)

    def end(self) -> datetime:
        # last representable microsecond of the month
        return self.next().start() - timedelta(microseconds=1)

    def next(self) -> "MonthKey":
        if self.month == 12:
            return MonthKey(self.year + 1, 1)
        return MonthKey(self.year, self.month + 1)

    def previous(self) -> "MonthKey":
        if self.month == 1:
            return MonthKey(self.year - 1, 12)
        return MonthKey(self.year, self.month - 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

from .phases import DisplayPhase, MonthKey, PhaseEvent, PrimaryPhase
from .oracle import EphemPhaseOracle, PhaseOracle, moments_in_range
from .cache import PhaseCache
from .resolver import PhaseResolver, day_bounds_utc, to_zone

__all__ = [
    "DisplayPhase",
    "PrimaryPhase",
    "PhaseEvent",
    "MonthKey",
    "PhaseOracle",
    "EphemPhaseOracle",
    "moments_in_range",
    "PhaseCache",
    "PhaseResolver",
    "day_bounds_utc",
    "to_zone",
]

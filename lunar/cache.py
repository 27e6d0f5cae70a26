"""Month-partitioned cache of primary-phase events.

Phase searches are the expensive part of resolving a day, so events are
computed once per UTC calendar month and kept for the lifetime of the cache.
By default nothing is evicted; pass ``max_months`` to keep only the most
recently used months.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Optional, Tuple

from .oracle import PhaseOracle, moments_in_range
from .phases import MonthKey, PhaseEvent, PrimaryPhase


logger = logging.getLogger(__name__)


class PhaseCache:
    def __init__(self, oracle: PhaseOracle, max_months: Optional[int] = None) -> None:
        if max_months is not None and max_months < 1:
            raise ValueError("max_months must be positive or None")
        self.oracle = oracle
        self.max_months = max_months
        self.hits = 0
        self.misses = 0
        self._data: "OrderedDict[MonthKey, Tuple[PhaseEvent, ...]]" = OrderedDict()
        self._lock = threading.Lock()

    def __contains__(self, key: MonthKey) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def stats(self) -> dict:
        with self._lock:
            return {"months": len(self._data), "hits": self.hits, "misses": self.misses}

    def get_or_compute(self, key: MonthKey) -> Tuple[PhaseEvent, ...]:
        """Return the month's events, computing them on first use.

        The computation runs under the table lock, so concurrent callers asking
        for the same month observe a single set of oracle queries.
        """
        with self._lock:
            events = self._data.get(key)
            if events is not None:
                self.hits += 1
                self._data.move_to_end(key, last=True)
                return events

            self.misses += 1
            events = self._compute(key)
            self._data[key] = events
            if self.max_months is not None and len(self._data) > self.max_months:
                evicted, _ = self._data.popitem(last=False)
                logger.debug("[CACHE] evicted month %s", evicted)
            return events

    def _compute(self, key: MonthKey) -> Tuple[PhaseEvent, ...]:
        start, end = key.start(), key.end()
        events = [
            PhaseEvent(instant, phase)
            for phase in PrimaryPhase
            for instant in moments_in_range(self.oracle, phase, start, end)
        ]
        events.sort(key=lambda event: event.instant)
        logger.debug("[CACHE] computed %d phase events for %s", len(events), key)
        return tuple(events)

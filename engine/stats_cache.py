"""Per-resource yearly statistics, memoised on the resource object's identity."""

import logging
import weakref
from typing import Callable, Dict, Tuple

from engine.aggregator import aggregate_year
from models.resource import Resource
from models.stats import ResourceStats

logger = logging.getLogger(__name__)


class StatsCache:
    """Memoises ``aggregate_year`` per resource reference.

    Resources are immutable, so an edit yields a new object and the old entry
    is simply never hit again. Entries are tied to the lifetime of the
    resource: a finalizer drops them once the object is garbage collected.
    Keys are never derived from field values.
    """

    def __init__(self, aggregate: Callable = aggregate_year):
        self._aggregate = aggregate
        self._entries: Dict[int, Tuple[weakref.ref, ResourceStats]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self, resource: Resource, year: int) -> ResourceStats:
        key = id(resource)
        entry = self._entries.get(key)
        if entry is not None:
            ref, cached = entry
            if ref() is resource and cached.year == year:
                self.hits += 1
                return cached

        self.misses += 1
        period = self._aggregate(resource, year)
        stats = ResourceStats(days=period.days, cost=period.cost, year=year)

        if entry is None or entry[0]() is not resource:
            weakref.finalize(resource, self._evict, key)
        self._entries[key] = (weakref.ref(resource), stats)
        return stats

    def subscribe(self, resource: Resource, year: int) -> ResourceStats:
        """Stats for views that re-render on every interaction.

        Streamlit reruns the whole script, so a view asks again each time; the
        same object comes back until the resource is replaced or the year moves.
        """
        return self.get_stats(resource, year)

    def clear(self) -> None:
        self._entries.clear()

    def _evict(self, key: int) -> None:
        entry = self._entries.get(key)
        if entry is not None and entry[0]() is None:
            del self._entries[key]
            logger.debug("Evicted stats for collected resource %s", key)

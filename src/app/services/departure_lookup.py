from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from src.app.ports.output import IDepartureProvider
from src.domain.models import Departure

logger = logging.getLogger(__name__)

_NO_TIME = datetime.max.replace(tzinfo=timezone.utc)


def merge_departures(*feeds: tuple[Departure, ...]) -> tuple[Departure, ...]:
    """Merge feeds, drop duplicates by identity, order by event time."""

    seen: set[tuple] = set()
    merged: list[Departure] = []
    for feed in feeds:
        for dep in feed:
            key = dep.identity
            if key in seen:
                continue
            seen.add(key)
            merged.append(dep)

    merged.sort(key=lambda d: d.event_time or _NO_TIME)
    return tuple(merged)


@dataclass(slots=True)
class DepartureLookup:
    """Per-planning-call view of the departure feeds.

    Results (including failures) are memoized per stop for the lifetime of the
    instance; create one per planning call. `all_feeds_failed` reports whether
    every feed request made through this instance failed.
    """

    provider: IDepartureProvider
    limit: int = 20
    _cache: dict[str, tuple[Departure, ...]] = field(
        default_factory=dict, init=False, repr=False
    )
    _requests: int = field(default=0, init=False, repr=False)
    _failures: int = field(default=0, init=False, repr=False)

    async def __call__(self, stop_id: str) -> tuple[Departure, ...]:
        return await self.departures_for(stop_id)

    async def departures_for(self, stop_id: str) -> tuple[Departure, ...]:
        cached = self._cache.get(stop_id)
        if cached is not None:
            return cached

        departing, arriving = await asyncio.gather(
            self.provider.departures(stop_id, limit=self.limit),
            self.provider.arrivals(stop_id, limit=self.limit),
            return_exceptions=True,
        )

        feeds: list[tuple[Departure, ...]] = []
        failures: list[BaseException] = []
        for name, result in (("departures", departing), ("arrivals", arriving)):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures.append(result)
                logger.warning(
                    "%s feed failed for stop %s: %s", name, stop_id, result
                )
                continue
            feeds.append(tuple(result))

        self._requests += 2
        self._failures += len(failures)

        if len(failures) == 2:
            logger.error(
                "Both passage feeds failed for stop %s; using fallback timing",
                stop_id,
            )

        merged = merge_departures(*feeds)
        self._cache[stop_id] = merged
        return merged

    @property
    def all_feeds_failed(self) -> bool:
        return self._requests > 0 and self._failures == self._requests

    @property
    def fetched_stop_ids(self) -> tuple[str, ...]:
        return tuple(self._cache)

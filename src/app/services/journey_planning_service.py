from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from src.app.ports.output import IDepartureProvider, IRoutePatternRepository
from src.domain.algorithms.astar import time_dependent_astar
from src.domain.algorithms.itinerary import build_itinerary
from src.domain.algorithms.network import TravelTimePolicy, build_network
from src.domain.exceptions import (
    DepartureFeedUnavailable,
    NoPathFound,
    StopNotInNetwork,
    UnknownStop,
)
from src.domain.models import Itinerary, JourneyNotFound, RoutePattern, Stop

from .departure_lookup import DepartureLookup

logger = logging.getLogger(__name__)

JourneyResult = Itinerary | JourneyNotFound


def coerce_start_time(value: datetime | str | None) -> datetime:
    """Return a timezone-aware start instant; "now" for missing/invalid input."""

    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.info("Unparsable start time %r; using now", value)

    if parsed is None:
        return datetime.now().astimezone()
    if parsed.tzinfo is None:
        # Naive values are local wall-clock time.
        return parsed.astimezone()
    return parsed


@dataclass(slots=True)
class JourneyPlanningService:
    """Time-dependent journey planning over compiled route patterns.

    Every call builds its own network view and departure cache; nothing
    mutable is shared between calls. A call whose departure feed requests all
    failed raises DepartureFeedUnavailable rather than returning a timetable
    made only of fallback estimates.
    """

    departure_provider: IDepartureProvider
    pattern_repository: IRoutePatternRepository | None = None
    policy: TravelTimePolicy = field(default_factory=TravelTimePolicy)
    departure_limit: int = 20

    async def plan_journey(
        self,
        *,
        start_stop: Stop,
        end_stop: Stop,
        patterns: Sequence[RoutePattern],
        start_time: datetime | str | None = None,
    ) -> JourneyResult:
        start_at = coerce_start_time(start_time)

        if start_stop.id == end_stop.id:
            return JourneyNotFound(reason="Start and destination are the same stop")

        network = build_network(patterns, policy=self.policy)
        lookup = DepartureLookup(provider=self.departure_provider, limit=self.departure_limit)

        try:
            path = await time_dependent_astar(
                network,
                lookup,
                start_id=start_stop.id,
                end_id=end_stop.id,
                start_time=start_at,
                policy=self.policy,
            )
        except StopNotInNetwork as exc:
            logger.info("Journey %s -> %s: %s", start_stop.id, end_stop.id, exc)
            return JourneyNotFound(reason=str(exc))
        except NoPathFound as exc:
            logger.info("Journey %s -> %s: %s", start_stop.id, end_stop.id, exc)
            return JourneyNotFound(reason="No route found between the selected stops")

        if lookup.all_feeds_failed:
            logger.error(
                "Journey %s -> %s: no departure feed answered for %d stop(s)",
                start_stop.id,
                end_stop.id,
                len(lookup.fetched_stop_ids),
            )
            raise DepartureFeedUnavailable("Departure data is currently unavailable")

        return build_itinerary(path, start_time=start_at)

    async def plan_journey_by_ids(
        self,
        *,
        start_stop_id: str,
        end_stop_id: str,
        start_time: datetime | str | None = None,
    ) -> JourneyResult:
        if self.pattern_repository is None:
            raise RuntimeError("Route pattern repository not configured")

        stops_by_id = await self.pattern_repository.load_stops()
        patterns = await self.pattern_repository.load_patterns()

        # Pattern stops may be known only through stop points.
        known: dict[str, Stop] = dict(stops_by_id)
        for pattern in patterns:
            for stop in pattern.stops:
                known.setdefault(stop.id, stop)

        missing = [sid for sid in (start_stop_id, end_stop_id) if sid not in known]
        if missing:
            raise UnknownStop(f"Unknown stop id(s): {', '.join(missing)}")

        return await self.plan_journey(
            start_stop=known[start_stop_id],
            end_stop=known[end_stop_id],
            patterns=patterns,
            start_time=start_time,
        )

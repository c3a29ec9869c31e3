from __future__ import annotations

from dataclasses import dataclass

from src.app.ports.output import IRoutePatternRepository
from src.domain.exceptions import UnknownStop
from src.domain.models import Stop

MIN_QUERY_LENGTH = 3
MAX_SEARCH_RESULTS = 12


@dataclass(slots=True)
class StopCatalogService:
    """Looks up stops by name or id so callers can pick journey endpoints."""

    pattern_repository: IRoutePatternRepository
    max_results: int = MAX_SEARCH_RESULTS

    async def search_stops(self, query: str) -> tuple[Stop, ...]:
        """Case-insensitive substring match on stop names, in repository order.

        Queries shorter than three characters return nothing.
        """

        needle = (query or "").strip().casefold()
        if len(needle) < MIN_QUERY_LENGTH:
            return ()

        stops = await self.pattern_repository.load_stops()
        hits = [s for s in stops.values() if needle in (s.name or "").casefold()]
        return tuple(hits[: self.max_results])

    async def get_stop(self, stop_id: str) -> Stop:
        stops = await self.pattern_repository.load_stops()
        stop = stops.get(stop_id)
        if stop is None:
            raise UnknownStop(f"Unknown stop id: {stop_id}")
        return stop

from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import RoutePattern, Stop


class IRoutePatternRepository(ABC):
    """Port for loading stop base data and compiled route patterns."""

    @abstractmethod
    async def load_stops(self) -> dict[str, Stop]:
        raise NotImplementedError

    @abstractmethod
    async def load_patterns(self) -> tuple[RoutePattern, ...]:
        raise NotImplementedError

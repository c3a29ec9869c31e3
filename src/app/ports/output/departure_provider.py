from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import Departure


class IDepartureProvider(ABC):
    """Port for the transit operator's per-stop passage feeds."""

    @abstractmethod
    async def departures(self, stop_id: str, *, limit: int) -> tuple[Departure, ...]:
        """Vehicles departing from the stop, as reported by the operator."""

    @abstractmethod
    async def arrivals(self, stop_id: str, *, limit: int) -> tuple[Departure, ...]:
        """Vehicles arriving at the stop, as reported by the operator."""

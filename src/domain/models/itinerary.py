from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .pattern import RoutePattern
from .stop import Stop


@dataclass(frozen=True, slots=True)
class Segment:
    """One continuous ride on a single trip."""

    pattern: RoutePattern
    start_stop: Stop
    end_stop: Stop
    stops: tuple[Stop, ...]
    depart_at: datetime
    arrive_at: datetime
    travel_time_min: float
    wait_time_min: float
    distance_km: float
    trip_id: str
    is_fallback: bool = False
    delay_s: int = 0


@dataclass(frozen=True, slots=True)
class Itinerary:
    id: str
    start_time: datetime
    segments: tuple[Segment, ...] = field(default_factory=tuple)

    @property
    def total_travel_time_min(self) -> float:
        return float(sum(s.travel_time_min for s in self.segments))

    @property
    def total_duration_min(self) -> float:
        # Wall-clock from the requested start, waits included.
        return float(sum(s.travel_time_min + s.wait_time_min for s in self.segments))

    @property
    def total_distance_km(self) -> float:
        return float(sum(s.distance_km for s in self.segments))

    @property
    def transfers(self) -> int:
        return max(0, len(self.segments) - 1)

    @property
    def arrive_at(self) -> datetime | None:
        if not self.segments:
            return None
        return self.segments[-1].arrive_at


@dataclass(frozen=True, slots=True)
class JourneyNotFound:
    """No itinerary exists for the request; a normal, expected outcome."""

    reason: str

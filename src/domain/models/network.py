from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .departure import Departure
from .pattern import RoutePattern
from .stop import Stop


@dataclass(frozen=True, slots=True)
class Edge:
    """Directed hop between two adjacent stops of a route pattern."""

    from_stop_id: str
    to_stop_id: str
    pattern: RoutePattern
    distance_km: float
    travel_time_min: float


@dataclass(frozen=True, slots=True)
class Connection:
    """How the search reached `edge.to_stop_id`.

    `ready_at` is the best arrival time at the departure stop when the
    connection was costed; the wait before boarding is depart_at - ready_at.
    """

    edge: Edge
    ready_at: datetime
    depart_at: datetime
    arrive_at: datetime
    trip_id: str
    is_fallback: bool = False
    departure: Departure | None = None

    @property
    def from_stop_id(self) -> str:
        return self.edge.from_stop_id

    @property
    def to_stop_id(self) -> str:
        return self.edge.to_stop_id


@dataclass(frozen=True, slots=True)
class PathStep:
    stop: Stop
    connection: Connection | None = None

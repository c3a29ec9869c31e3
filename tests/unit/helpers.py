from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from src.domain.models import Departure, GeoPoint, RoutePattern, Stop, VehicleCategory

T0 = datetime(2026, 1, 8, 8, 0, 0, tzinfo=timezone.utc)


def stop(stop_id: str, lat: float, lon: float, name: str | None = None) -> Stop:
    return Stop(id=stop_id, name=name or f"Stop {stop_id}", location=GeoPoint(lat=lat, lon=lon))


def pattern(
    route_number: str,
    direction: str,
    *stops: Stop,
    code: str = "1",
    category: VehicleCategory = VehicleCategory.TRAM,
) -> RoutePattern:
    return RoutePattern(
        route_number=route_number,
        direction_code=code,
        name=f"Line {route_number}",
        category=category,
        direction_name=direction,
        stops=tuple(stops),
    )


@dataclass(slots=True)
class FakeDepartureProvider:
    """Serves fixed departures per stop and records every request."""

    departures_by_stop: dict[str, tuple[Departure, ...]] = field(default_factory=dict)
    arrivals_by_stop: dict[str, tuple[Departure, ...]] = field(default_factory=dict)
    fail_departures: bool = False
    fail_arrivals: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def departures(self, stop_id: str, *, limit: int) -> tuple[Departure, ...]:
        self.calls.append(("departures", stop_id))
        if self.fail_departures:
            raise RuntimeError("departures feed down")
        return self.departures_by_stop.get(stop_id, ())[:limit]

    async def arrivals(self, stop_id: str, *, limit: int) -> tuple[Departure, ...]:
        self.calls.append(("arrivals", stop_id))
        if self.fail_arrivals:
            raise RuntimeError("arrivals feed down")
        return self.arrivals_by_stop.get(stop_id, ())[:limit]


@dataclass(slots=True)
class FakePatternRepository:
    stops: dict[str, Stop]
    patterns: tuple[RoutePattern, ...] = ()

    async def load_stops(self) -> dict[str, Stop]:
        return dict(self.stops)

    async def load_patterns(self) -> tuple[RoutePattern, ...]:
        return self.patterns


def departure(
    route_number: str,
    direction: str,
    minutes_after_t0: float,
    *,
    vehicle: str | None = "V1",
    deviation_s: int = 0,
) -> Departure:
    when = T0 + timedelta(minutes=minutes_after_t0)
    return Departure(
        route_number=route_number,
        direction_text=direction,
        vehicle_number=vehicle,
        departure_scheduled=when,
        departure_actual=when + timedelta(seconds=deviation_s),
        deviation_s=deviation_s,
    )

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Mapping, Sequence

from src.domain.exceptions import NoPathFound, StopNotInNetwork
from src.domain.models import Connection, Departure, Edge, PathStep

from .geo_utils import haversine_distance_km
from .network import TransitNetwork, TravelTimePolicy
from .priority_queue import MinPriorityQueue

logger = logging.getLogger(__name__)

FetchDepartures = Callable[[str], Awaitable[Sequence[Departure]]]

FALLBACK_TRIP_PREFIX = "fallback:"


def direction_matches(direction_text: str | None, direction_label: str | None) -> bool:
    """Lenient containment match in either direction, case-insensitive."""

    a = (direction_text or "").strip().casefold()
    b = (direction_label or "").strip().casefold()
    return a in b or b in a


def trip_id_for(departure: Departure) -> str:
    when = departure.departure_time
    stamp = when.isoformat() if when is not None else "?"
    return f"{departure.route_number}:{departure.vehicle_number or '?'}:{stamp}"


def fallback_trip_id(edge: Edge) -> str:
    return f"{FALLBACK_TRIP_PREFIX}{edge.pattern.id}:{edge.from_stop_id}:{edge.to_stop_id}"


def earliest_matching_departure(
    departures: Sequence[Departure],
    edge: Edge,
    *,
    ready_at: datetime,
    tolerance: timedelta,
) -> Departure | None:
    earliest = ready_at - tolerance
    best: Departure | None = None
    for dep in departures:
        when = dep.departure_time
        if when is None or when < earliest:
            continue
        if str(dep.route_number) != str(edge.pattern.route_number):
            continue
        if not direction_matches(dep.direction_text, edge.pattern.direction_name):
            continue
        if best is None or when < best.departure_time:
            best = dep
    return best


def continues_ride(
    incoming: Connection | None,
    dep: Departure,
    edge: Edge,
    *,
    tolerance: timedelta,
) -> bool:
    """True when `dep` is the vehicle the rider reached `edge.from_stop_id` on.

    `incoming` is the last real-time connection of the ride so far. A known
    vehicle number must match. Without one, the departure must leave the stop
    the rider was just carried to, within `tolerance` of the arrival there.
    """

    if incoming is None or incoming.is_fallback or incoming.departure is None:
        return False
    if str(incoming.departure.route_number) != str(dep.route_number):
        return False

    prev_vehicle = incoming.departure.vehicle_number
    if prev_vehicle is not None or dep.vehicle_number is not None:
        return prev_vehicle == dep.vehicle_number

    if incoming.to_stop_id != edge.from_stop_id:
        return False
    return abs(dep.departure_time - incoming.arrive_at) <= tolerance


def connect(
    edge: Edge,
    departures: Sequence[Departure],
    *,
    ready_at: datetime,
    incoming: Connection | None,
    policy: TravelTimePolicy,
) -> Connection:
    """Cost one edge traversal starting no earlier than `ready_at`."""

    travel = timedelta(minutes=edge.travel_time_min)
    tolerance = timedelta(seconds=policy.departure_tolerance_s)
    dep = earliest_matching_departure(
        departures,
        edge,
        ready_at=ready_at,
        tolerance=tolerance,
    )

    if dep is None:
        depart_at = ready_at + timedelta(minutes=policy.fallback_wait_minutes)
        return Connection(
            edge=edge,
            ready_at=ready_at,
            depart_at=depart_at,
            arrive_at=depart_at + travel,
            trip_id=fallback_trip_id(edge),
            is_fallback=True,
        )

    depart_at = dep.departure_time
    trip_id = trip_id_for(dep)
    # Staying aboard keeps the trip id of the boarding stop.
    if continues_ride(incoming, dep, edge, tolerance=tolerance):
        trip_id = incoming.trip_id

    return Connection(
        edge=edge,
        ready_at=ready_at,
        depart_at=depart_at,
        arrive_at=depart_at + travel,
        trip_id=trip_id,
        is_fallback=False,
        departure=dep,
    )


def last_real_connection(
    came_from: Mapping[str, Connection], stop_id: str
) -> Connection | None:
    """Walk back over fallback hops of one pattern to the ride's last real hop."""

    conn = came_from.get(stop_id)
    pattern_id = conn.edge.pattern.id if conn is not None else None
    seen: set[str] = set()
    while conn is not None and conn.is_fallback:
        if conn.edge.pattern.id != pattern_id or conn.from_stop_id in seen:
            return None
        seen.add(conn.from_stop_id)
        conn = came_from.get(conn.from_stop_id)
    if conn is None or conn.edge.pattern.id != pattern_id:
        return None
    return conn


async def time_dependent_astar(
    network: TransitNetwork,
    fetch_departures: FetchDepartures,
    *,
    start_id: str,
    end_id: str,
    start_time: datetime,
    policy: TravelTimePolicy | None = None,
    queue_factory: Callable[[], MinPriorityQueue[str]] = MinPriorityQueue,
) -> list[PathStep]:
    """Earliest-arrival A* where edge cost depends on the arrival time.

    Returns the path as PathSteps, the first one without a connection.
    Raises StopNotInNetwork or NoPathFound.
    """

    policy = policy or TravelTimePolicy()

    if not network.has_stop(start_id) or not network.has_stop(end_id):
        missing = [s for s in (start_id, end_id) if not network.has_stop(s)]
        raise StopNotInNetwork(f"Stop not in network: {', '.join(map(str, missing))}")

    goal = network.stop(end_id).location

    def heuristic_min(stop_id: str) -> float:
        d = haversine_distance_km(network.stop(stop_id).location, goal)
        return policy.heuristic_minutes(d)

    def priority(arrival: datetime, stop_id: str) -> float:
        elapsed = (arrival - start_time).total_seconds() / 60.0
        return elapsed + heuristic_min(stop_id)

    best_arrival: dict[str, datetime] = {start_id: start_time}
    came_from: dict[str, Connection] = {}

    open_set = queue_factory()
    open_set.update(start_id, priority(start_time, start_id))

    expansions = 0
    while open_set:
        current = open_set.pop()
        expansions += 1

        if current == end_id:
            logger.debug("A* reached %s after %d expansions", end_id, expansions)
            return _reconstruct(network, came_from, end_id)

        ready_at = best_arrival[current]
        edges = network.edges_from(current)
        if not edges:
            continue

        departures = await fetch_departures(current)
        incoming = last_real_connection(came_from, current)

        for edge in edges:
            conn = connect(
                edge,
                departures,
                ready_at=ready_at,
                incoming=incoming,
                policy=policy,
            )
            neighbor = edge.to_stop_id
            known = best_arrival.get(neighbor)
            if known is not None and conn.arrive_at >= known:
                continue

            best_arrival[neighbor] = conn.arrive_at
            came_from[neighbor] = conn
            open_set.update(neighbor, priority(conn.arrive_at, neighbor))

    logger.info("A* exhausted the open set without reaching %s", end_id)
    raise NoPathFound(f"No path from {start_id} to {end_id}")


def _reconstruct(
    network: TransitNetwork, came_from: dict[str, Connection], end_id: str
) -> list[PathStep]:
    out: list[PathStep] = []
    cur: str | None = end_id
    seen: set[str] = set()
    while cur is not None:
        if cur in seen:
            # Back-pointers only ever point to strictly earlier arrivals.
            raise NoPathFound(f"Back-pointer cycle at {cur}")
        seen.add(cur)
        conn = came_from.get(cur)
        out.append(PathStep(stop=network.stop(cur), connection=conn))
        cur = conn.from_stop_id if conn is not None else None
    out.reverse()
    return out

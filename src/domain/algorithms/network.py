from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable

import networkx as nx

from src.domain.models import Edge, RoutePattern, Stop

from .geo_utils import haversine_distance_km

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TravelTimePolicy:
    """Replaceable estimate of vehicle running time and waiting.

    True running times are not known ahead of live data, so a hop is costed
    from its great-circle length at an assumed commercial speed.
    """

    speed_kmh: float = 20.0
    min_hop_minutes: float = 2.0
    fallback_wait_minutes: float = 3.0
    departure_tolerance_s: float = 90.0

    def hop_minutes(self, distance_km: float) -> float:
        return max(self.min_hop_minutes, distance_km / self.speed_kmh * 60.0)

    def heuristic_minutes(self, distance_km: float) -> float:
        # No floor here: the estimate must not exceed the real remaining time.
        if not math.isfinite(distance_km):
            return 0.0
        return distance_km / self.speed_kmh * 60.0


@dataclass(slots=True)
class TransitNetwork:
    """Stop registry plus a directed multigraph of pattern hops.

    Every physical hop is stored in both directions, one parallel edge per
    pattern serving it.
    """

    stops_by_id: dict[str, Stop]
    graph: nx.MultiDiGraph

    def has_stop(self, stop_id: str) -> bool:
        return stop_id in self.stops_by_id

    def stop(self, stop_id: str) -> Stop:
        return self.stops_by_id[stop_id]

    def edges_from(self, stop_id: str) -> tuple[Edge, ...]:
        if stop_id not in self.graph:
            return ()
        return tuple(
            data["edge"] for _, _, data in self.graph.out_edges(stop_id, data=True)
        )

    @property
    def edge_count(self) -> int:
        return self.graph.number_of_edges()


def build_network(
    patterns: Iterable[RoutePattern], *, policy: TravelTimePolicy | None = None
) -> TransitNetwork:
    policy = policy or TravelTimePolicy()
    patterns = tuple(patterns)

    # 1) Registry: first occurrence of a stop id wins.
    stops_by_id: dict[str, Stop] = {}
    for pattern in patterns:
        for stop in pattern.stops:
            if stop is None or stop.id is None or stop.location is None:
                continue
            if stop.id not in stops_by_id:
                stops_by_id[stop.id] = stop

    graph = nx.MultiDiGraph()
    for stop_id, stop in stops_by_id.items():
        graph.add_node(stop_id, stop=stop)

    # 2) Edges for every adjacent pair, both directions.
    for pattern in patterns:
        for a, b in zip(pattern.stops, pattern.stops[1:]):
            if a is None or b is None:
                continue
            stop_a = stops_by_id.get(a.id)
            stop_b = stops_by_id.get(b.id)
            if stop_a is None or stop_b is None:
                continue

            dist_km = haversine_distance_km(stop_a.location, stop_b.location)
            if not math.isfinite(dist_km):
                logger.warning(
                    "Skipping hop %s -> %s on %s: unusable coordinates",
                    stop_a.id,
                    stop_b.id,
                    pattern.id,
                )
                continue

            minutes = policy.hop_minutes(dist_km)
            for u, v in ((stop_a.id, stop_b.id), (stop_b.id, stop_a.id)):
                graph.add_edge(
                    u,
                    v,
                    edge=Edge(
                        from_stop_id=u,
                        to_stop_id=v,
                        pattern=pattern,
                        distance_km=dist_km,
                        travel_time_min=minutes,
                    ),
                )

    logger.debug(
        "Built network: %d stops, %d directed edges from %d patterns",
        len(stops_by_id),
        graph.number_of_edges(),
        len(patterns),
    )
    return TransitNetwork(stops_by_id=stops_by_id, graph=graph)

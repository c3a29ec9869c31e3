from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from src.app.services.departure_lookup import DepartureLookup
from src.domain.algorithms.astar import (
    direction_matches,
    earliest_matching_departure,
    time_dependent_astar,
)
from src.domain.algorithms.network import TravelTimePolicy, build_network
from src.domain.exceptions import NoPathFound, StopNotInNetwork

from .helpers import T0, FakeDepartureProvider, departure, pattern, stop


def _run(network, provider, start_id, end_id, **kwargs):
    lookup = DepartureLookup(provider=provider)
    return asyncio.run(
        time_dependent_astar(
            network, lookup, start_id=start_id, end_id=end_id, start_time=T0, **kwargs
        )
    )


@pytest.mark.parametrize(
    ("text", "label", "expected"),
    [
        ("North", "North", True),
        ("Ulm Hbf", "Hbf", True),
        ("Hbf", "Richtung Ulm Hbf", True),
        ("north", "NORTH", True),
        ("South", "North", False),
    ],
)
def test_direction_matching_is_lenient(text: str, label: str, expected: bool) -> None:
    assert direction_matches(text, label) is expected


def test_matching_departure_respects_backward_tolerance() -> None:
    a = stop("A", 48.40, 9.98)
    b = stop("B", 48.41, 9.99)
    edge = build_network([pattern("5", "North", a, b)]).edges_from("A")[0]
    ready = T0 + timedelta(minutes=10)
    too_early = departure("5", "North", 8)
    within = departure("5", "North", 9)  # 60s before ready
    later = departure("5", "North", 12)

    got = earliest_matching_departure(
        (too_early, later, within), edge, ready_at=ready, tolerance=timedelta(seconds=90)
    )
    assert got is within


def test_path_starts_at_start_stop_without_connection() -> None:
    a = stop("A", 48.40, 9.98)
    b = stop("B", 48.41, 9.99)
    c = stop("C", 48.42, 10.00)
    net = build_network([pattern("5", "North", a, b, c)])

    path = _run(net, FakeDepartureProvider(), "A", "C")

    assert [s.stop.id for s in path] == ["A", "B", "C"]
    assert path[0].connection is None
    assert all(s.connection is not None for s in path[1:])


def test_live_departure_sets_connection_times_and_trip() -> None:
    a = stop("S1", 48.40, 9.98)
    b = stop("S2", 48.41, 9.99)
    net = build_network([pattern("5", "North", a, b)])
    edge = net.edges_from("S1")[0]
    provider = FakeDepartureProvider(
        departures_by_stop={"S1": (departure("5", "North", 2, vehicle="V9"),)}
    )

    path = _run(net, provider, "S1", "S2")
    conn = path[1].connection

    assert not conn.is_fallback
    assert conn.depart_at == T0 + timedelta(minutes=2)
    assert conn.arrive_at == conn.depart_at + timedelta(minutes=edge.travel_time_min)
    assert "V9" in conn.trip_id


def test_fallback_used_when_no_departure_matches() -> None:
    a = stop("S1", 48.40, 9.98)
    b = stop("S2", 48.41, 9.99)
    net = build_network([pattern("5", "North", a, b)])
    provider = FakeDepartureProvider(
        departures_by_stop={"S1": (departure("5", "South", 2), departure("6", "North", 1))}
    )
    policy = TravelTimePolicy(fallback_wait_minutes=3.0)

    path = _run(net, provider, "S1", "S2", policy=policy)
    conn = path[1].connection

    assert conn.is_fallback
    assert conn.trip_id.startswith("fallback:")
    assert conn.depart_at == T0 + timedelta(minutes=3)


def test_prefers_route_with_earlier_arrival() -> None:
    a = stop("S1", 48.40, 9.98)
    b = stop("S2", 48.41, 9.99)
    net = build_network([pattern("5", "North", a, b), pattern("7", "East", a, b)])
    provider = FakeDepartureProvider(
        departures_by_stop={"S1": (departure("7", "East", 1, vehicle="V7"),)}
    )

    path = _run(net, provider, "S1", "S2")

    assert path[1].connection.edge.pattern.route_number == "7"
    assert not path[1].connection.is_fallback


def test_time_dependence_picks_the_faster_detour() -> None:
    # Direct hop A-C only runs much later; A-B-C on another line leaves now.
    a = stop("A", 48.400, 9.980)
    b = stop("B", 48.405, 9.985)
    c = stop("C", 48.410, 9.990)
    net = build_network(
        [pattern("1", "North", a, c), pattern("2", "East", a, b, c)]
    )
    provider = FakeDepartureProvider(
        departures_by_stop={
            "A": (departure("1", "North", 40, vehicle="L1"), departure("2", "East", 0, vehicle="L2")),
            "B": (departure("2", "East", 2, vehicle="L2"),),
        }
    )

    path = _run(net, provider, "A", "C")

    assert [s.stop.id for s in path] == ["A", "B", "C"]
    assert {s.connection.edge.pattern.route_number for s in path[1:]} == {"2"}


def test_same_vehicle_keeps_trip_id_across_stops() -> None:
    a = stop("A", 48.400, 9.980)
    b = stop("B", 48.410, 9.990)
    c = stop("C", 48.420, 10.000)
    net = build_network([pattern("5", "North", a, b, c)])
    hop = net.edges_from("A")[0].travel_time_min
    provider = FakeDepartureProvider(
        departures_by_stop={
            "A": (departure("5", "North", 1, vehicle="V1"),),
            "B": (departure("5", "North", 1 + hop, vehicle="V1"),),
        }
    )

    path = _run(net, provider, "A", "C")

    assert path[1].connection.trip_id == path[2].connection.trip_id


def test_unknown_stop_raises_stop_not_in_network() -> None:
    a = stop("A", 48.40, 9.98)
    b = stop("B", 48.41, 9.99)
    net = build_network([pattern("5", "North", a, b)])

    with pytest.raises(StopNotInNetwork):
        _run(net, FakeDepartureProvider(), "A", "Z")


def test_disconnected_components_raise_no_path_found() -> None:
    net = build_network(
        [
            pattern("5", "North", stop("A", 48.40, 9.98), stop("B", 48.41, 9.99)),
            pattern("6", "South", stop("C", 48.50, 9.90), stop("D", 48.51, 9.91)),
        ]
    )

    with pytest.raises(NoPathFound):
        _run(net, FakeDepartureProvider(), "A", "D")


def test_departures_fetched_once_per_expanded_stop() -> None:
    a = stop("A", 48.40, 9.98)
    b = stop("B", 48.41, 9.99)
    c = stop("C", 48.42, 10.00)
    net = build_network(
        [pattern("5", "North", a, b, c), pattern("7", "East", a, b, c)]
    )
    provider = FakeDepartureProvider()

    _run(net, provider, "A", "C")

    assert provider.calls.count(("departures", "A")) == 1
    assert ("departures", "C") not in provider.calls


def test_trip_id_survives_a_fallback_hop_on_the_same_vehicle() -> None:
    a = stop("A", 48.400, 9.980)
    b = stop("B", 48.410, 9.990)
    c = stop("C", 48.420, 10.000)
    d = stop("D", 48.430, 10.010)
    net = build_network([pattern("5", "North", a, b, c, d)])
    provider = FakeDepartureProvider(
        departures_by_stop={
            "A": (departure("5", "North", 1, vehicle="V1"),),
            "C": (departure("5", "North", 30, vehicle="V1"),),
        }
    )

    path = _run(net, provider, "A", "D")

    assert [s.stop.id for s in path] == ["A", "B", "C", "D"]
    assert path[2].connection.is_fallback
    assert path[3].connection.trip_id == path[1].connection.trip_id


def test_unknown_vehicle_keeps_trip_id_when_departure_follows_arrival() -> None:
    a = stop("A", 48.400, 9.980)
    b = stop("B", 48.410, 9.990)
    c = stop("C", 48.420, 10.000)
    net = build_network([pattern("5", "North", a, b, c)])
    hop = net.edges_from("A")[0].travel_time_min
    provider = FakeDepartureProvider(
        departures_by_stop={
            "A": (departure("5", "North", 1, vehicle=None),),
            "B": (departure("5", "North", 1 + hop, vehicle=None),),
        }
    )

    path = _run(net, provider, "A", "C")

    assert path[1].connection.trip_id == path[2].connection.trip_id


def test_unknown_vehicle_far_later_departure_is_a_new_trip() -> None:
    a = stop("A", 48.400, 9.980)
    b = stop("B", 48.410, 9.990)
    c = stop("C", 48.420, 10.000)
    net = build_network([pattern("5", "North", a, b, c)])
    hop = net.edges_from("A")[0].travel_time_min
    provider = FakeDepartureProvider(
        departures_by_stop={
            "A": (departure("5", "North", 1, vehicle=None),),
            "B": (departure("5", "North", 1 + hop + 10, vehicle=None),),
        }
    )

    path = _run(net, provider, "A", "C")

    assert not path[2].connection.is_fallback
    assert path[1].connection.trip_id != path[2].connection.trip_id

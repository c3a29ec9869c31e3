from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import uuid4

from src.domain.exceptions import NoPathFound
from src.domain.models import Connection, Itinerary, PathStep, Segment, Stop


@dataclass(slots=True)
class _OpenSegment:
    first: Connection
    last: Connection
    stops: list[Stop]
    real_trip_id: str | None = None
    travel_time_min: float = 0.0
    distance_km: float = 0.0

    def extend(self, stop: Stop, conn: Connection) -> None:
        if conn is not self.first:
            # Dwell between hops of one ride is ride time, not a boarding wait.
            gap_s = (conn.depart_at - self.last.arrive_at).total_seconds()
            self.travel_time_min += max(0.0, gap_s / 60.0)
        if not conn.is_fallback:
            self.real_trip_id = conn.trip_id
        self.stops.append(stop)
        self.last = conn
        self.travel_time_min += conn.edge.travel_time_min
        self.distance_km += conn.edge.distance_km

    def close(self) -> Segment:
        first = self.first
        wait_s = (first.depart_at - first.ready_at).total_seconds()
        return Segment(
            pattern=first.edge.pattern,
            start_stop=self.stops[0],
            end_stop=self.stops[-1],
            stops=tuple(self.stops),
            depart_at=first.depart_at,
            arrive_at=self.last.arrive_at,
            travel_time_min=float(self.travel_time_min),
            wait_time_min=max(0.0, wait_s / 60.0),
            distance_km=float(self.distance_km),
            trip_id=first.trip_id,
            is_fallback=first.is_fallback,
            delay_s=first.departure.deviation_s if first.departure is not None else 0,
        )


def _starts_new_segment(current: _OpenSegment | None, conn: Connection) -> bool:
    if current is None:
        return True
    if conn.edge.pattern.id != current.first.edge.pattern.id:
        return True
    # Fallback ids are unique per hop and never signal a vehicle change.
    if conn.is_fallback:
        return False
    return conn.trip_id != (current.real_trip_id or current.first.trip_id)


def build_itinerary(path: list[PathStep], *, start_time: datetime) -> Itinerary:
    """Group consecutive same-trip hops of a search path into ride segments.

    A new segment (and a transfer) begins when the route pattern changes, or
    when a real-time hop belongs to a different trip than the last real-time
    hop of the current segment. Fallback hops on one pattern stay in the
    segment they follow. Waits between hops of one segment count as ride
    time, so a segment's `travel_time_min` spans its depart_at to arrive_at.
    """

    if len(path) < 2:
        raise NoPathFound("Path has no connections")

    segments: list[Segment] = []
    current: _OpenSegment | None = None
    prev_stop = path[0].stop

    for step in path[1:]:
        conn = step.connection
        if conn is None:
            raise NoPathFound(f"Missing connection into stop {step.stop.id}")

        if _starts_new_segment(current, conn):
            if current is not None:
                segments.append(current.close())
            current = _OpenSegment(first=conn, last=conn, stops=[prev_stop])
        current.extend(step.stop, conn)
        prev_stop = step.stop

    segments.append(current.close())

    return Itinerary(id=str(uuid4()), start_time=start_time, segments=tuple(segments))

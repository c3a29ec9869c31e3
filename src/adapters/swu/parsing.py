from __future__ import annotations

import logging
from datetime import datetime
from numbers import Real
from typing import Any, Iterable, Mapping

from src.domain.models import Departure, GeoPoint, RoutePattern, Stop, VehicleCategory

logger = logging.getLogger(__name__)

TRAM_CATEGORY = 1


def as_list(raw: Any) -> list[Any]:
    """The operator returns single objects where a list has one element."""

    if raw is None:
        return []
    if isinstance(raw, list):
        return raw
    return [raw]


def parse_timestamp(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        dt = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return dt if dt.tzinfo is not None else dt.astimezone()


def _number(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, Real):
        return None
    return float(raw)


def _location(coords: Mapping[str, Any] | None) -> GeoPoint | None:
    if not isinstance(coords, Mapping):
        return None
    lat = _number(coords.get("Latitude"))
    lon = _number(coords.get("Longitude"))
    if lat is None or lon is None:
        return None
    try:
        return GeoPoint(lat=lat, lon=lon)
    except ValueError:
        return None


def _id(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    return str(raw)


def parse_passages(payload: Mapping[str, Any], *, kind: str) -> tuple[Departure, ...]:
    """Parse a StopPassage response; `kind` is "Departure" or "Arrival"."""

    passage = payload.get("StopPassage") or {}
    out: list[Departure] = []
    for row in as_list(passage.get(f"{kind}Data")):
        if not isinstance(row, Mapping):
            continue
        route_number = _id(row.get("RouteNumber"))
        if route_number is None:
            continue

        direction = (
            row.get(f"{kind}DirectionText")
            or row.get("DepartureDirectionText")
            or row.get("DirectionText")
            or ""
        )
        deviation = row.get(f"{kind}Deviation")
        try:
            deviation_s = int(deviation or 0)
        except (TypeError, ValueError):
            deviation_s = 0

        out.append(
            Departure(
                route_number=route_number,
                direction_text=str(direction),
                vehicle_number=_id(row.get("VehicleNumber")),
                departure_scheduled=parse_timestamp(row.get("DepartureTimeScheduled")),
                departure_actual=parse_timestamp(row.get("DepartureTimeActual")),
                arrival_scheduled=parse_timestamp(row.get("ArrivalTimeScheduled")),
                arrival_actual=parse_timestamp(row.get("ArrivalTimeActual")),
                deviation_s=deviation_s,
            )
        )
    return tuple(out)


def parse_stops(payload: Mapping[str, Any]) -> dict[str, Stop]:
    stops: dict[str, Stop] = {}
    for row in as_list((payload.get("StopAttributes") or {}).get("StopData")):
        if not isinstance(row, Mapping):
            continue
        stop_id = _id(row.get("StopNumber"))
        location = _location(row.get("StopCoordinates"))
        if stop_id is None or location is None:
            continue
        stops[stop_id] = Stop(
            id=stop_id, name=str(row.get("StopName") or stop_id), location=location
        )
    return stops


def parse_stop_points(payload: Mapping[str, Any]) -> dict[str, GeoPoint]:
    points: dict[str, GeoPoint] = {}
    for row in as_list(
        (payload.get("StopPointAttributes") or {}).get("StopPointData")
    ):
        if not isinstance(row, Mapping):
            continue
        point_id = _id(row.get("StopPointNumber"))
        location = _location(row.get("StopPointCoordinates"))
        if point_id is None or location is None:
            continue
        points[point_id] = location
    return points


def compile_route_patterns(
    routes: Iterable[Mapping[str, Any]],
    *,
    stops_by_id: Mapping[str, Stop],
    stop_points_by_id: Mapping[str, GeoPoint],
) -> tuple[RoutePattern, ...]:
    """Turn Route BaseData into RoutePatterns ready for the graph builder.

    Stops resolve their coordinates from the stop point first, then the
    parent stop. Patterns with fewer than two resolvable stops are dropped.
    """

    compiled: list[RoutePattern] = []
    for route in routes:
        if not isinstance(route, Mapping):
            continue
        route_number = _id(route.get("RouteNumber"))
        if route_number is None:
            continue
        category = (
            VehicleCategory.TRAM
            if route.get("RouteCategory") == TRAM_CATEGORY
            else VehicleCategory.BUS
        )
        directions = [d for d in as_list(route.get("RouteDirections")) if isinstance(d, Mapping)]

        patterns = as_list(route.get("RoutePattern"))
        if not patterns:
            logger.warning("Route %s has no RoutePattern; skipping", route_number)
            continue

        for pattern in patterns:
            if not isinstance(pattern, Mapping):
                continue
            dir_code = pattern.get("PatternDirection")
            dir_name = next(
                (
                    d.get("DirectionName")
                    for d in directions
                    if d.get("Direction") == dir_code and d.get("DirectionName")
                ),
                None,
            ) or f"Direction {dir_code if dir_code is not None else '?'}"

            stops: list[Stop] = []
            for sp in as_list(pattern.get("StopPoints")):
                if not isinstance(sp, Mapping):
                    continue
                stop_id = _id(sp.get("StopNumber"))
                if stop_id is None:
                    continue
                parent = stops_by_id.get(stop_id)
                location = stop_points_by_id.get(_id(sp.get("StopPointNumber")) or "")
                if location is None and parent is not None:
                    location = parent.location
                if location is None:
                    logger.debug(
                        "Stop point %s/%s has no coordinates",
                        sp.get("StopPointNumber"),
                        stop_id,
                    )
                    continue
                name = (
                    sp.get("StopName")
                    or (parent.name if parent is not None else None)
                    or sp.get("StopPointName")
                    or stop_id
                )
                stops.append(Stop(id=stop_id, name=str(name), location=location))

            if len(stops) < 2:
                logger.warning(
                    "Pattern %s-%s has fewer than 2 usable stops; skipping",
                    route_number,
                    dir_code,
                )
                continue

            compiled.append(
                RoutePattern(
                    route_number=route_number,
                    direction_code=str(dir_code if dir_code is not None else "?"),
                    name=route.get("RouteName"),
                    category=category,
                    direction_name=str(dir_name),
                    stops=tuple(stops),
                )
            )

    logger.info("Compiled %d route patterns", len(compiled))
    return tuple(compiled)

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.api.dependencies import get_journey_planning_service, get_runtime_config
from src.adapters.api.schemas.journeys import (
    GeoPointSchema,
    ItinerarySchema,
    JourneyRequestSchema,
    JourneyResponseSchema,
    RoutePatternSchema,
    SegmentSchema,
    StopSchema,
)
from src.adapters.config import PlannerRuntimeConfig
from src.app.services.journey_planning_service import JourneyPlanningService
from src.domain.exceptions import DepartureFeedUnavailable, UnknownStop
from src.domain.models import Itinerary, RoutePattern, Stop

router = APIRouter(tags=["journeys"])


def stop_to_schema(stop: Stop) -> StopSchema:
    return StopSchema(
        id=stop.id,
        name=stop.name,
        location=(
            GeoPointSchema(lat=stop.location.lat, lon=stop.location.lon)
            if stop.location is not None
            else None
        ),
    )


def _pattern_to_schema(pattern: RoutePattern) -> RoutePatternSchema:
    return RoutePatternSchema(
        id=pattern.id,
        route_number=pattern.route_number,
        name=pattern.name,
        category=pattern.category.value,
        direction_name=pattern.direction_name,
    )


def _itinerary_to_schema(itinerary: Itinerary) -> ItinerarySchema:
    return ItinerarySchema(
        id=itinerary.id,
        start_time=itinerary.start_time,
        segments=[
            SegmentSchema(
                route=_pattern_to_schema(seg.pattern),
                start_stop=stop_to_schema(seg.start_stop),
                end_stop=stop_to_schema(seg.end_stop),
                stops=[stop_to_schema(s) for s in seg.stops],
                depart_at=seg.depart_at,
                arrive_at=seg.arrive_at,
                travel_time_min=seg.travel_time_min,
                wait_time_min=seg.wait_time_min,
                distance_km=seg.distance_km,
                trip_id=seg.trip_id,
                is_fallback=seg.is_fallback,
                delay_s=seg.delay_s,
            )
            for seg in itinerary.segments
        ],
        total_duration_min=itinerary.total_duration_min,
        total_travel_time_min=itinerary.total_travel_time_min,
        total_distance_km=itinerary.total_distance_km,
        transfers=itinerary.transfers,
    )


@router.post("/journeys", response_model=JourneyResponseSchema)
async def plan_journey(
    req: JourneyRequestSchema,
    service: JourneyPlanningService = Depends(get_journey_planning_service),
    config: PlannerRuntimeConfig = Depends(get_runtime_config),
) -> JourneyResponseSchema:
    try:
        result = await asyncio.wait_for(
            service.plan_journey_by_ids(
                start_stop_id=req.start_stop_id,
                end_stop_id=req.end_stop_id,
                start_time=req.depart_at,
            ),
            timeout=config.plan_timeout_s,
        )
    except UnknownStop as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except DepartureFeedUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except asyncio.TimeoutError as exc:
        raise HTTPException(status_code=504, detail="Journey planning timed out") from exc

    if isinstance(result, Itinerary):
        return JourneyResponseSchema(found=True, itinerary=_itinerary_to_schema(result))
    return JourneyResponseSchema(found=False, reason=result.reason)

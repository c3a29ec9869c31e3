from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class GeoPointSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


class StopSchema(BaseModel):
    id: str
    name: str
    location: GeoPointSchema | None = None


class RoutePatternSchema(BaseModel):
    id: str
    route_number: str
    name: str | None = None
    category: Literal["TRAM", "BUS"]
    direction_name: str


class SegmentSchema(BaseModel):
    route: RoutePatternSchema
    start_stop: StopSchema
    end_stop: StopSchema
    stops: list[StopSchema] = []
    depart_at: datetime
    arrive_at: datetime
    travel_time_min: float
    wait_time_min: float
    distance_km: float
    trip_id: str
    is_fallback: bool = False
    delay_s: int = 0


class ItinerarySchema(BaseModel):
    id: str
    start_time: datetime
    segments: list[SegmentSchema] = []

    total_duration_min: float
    total_travel_time_min: float
    total_distance_km: float
    transfers: int


class JourneyRequestSchema(BaseModel):
    start_stop_id: str = Field(..., min_length=1)
    end_stop_id: str = Field(..., min_length=1)
    depart_at: datetime | None = None


class JourneyResponseSchema(BaseModel):
    found: bool
    reason: str | None = None
    itinerary: ItinerarySchema | None = None

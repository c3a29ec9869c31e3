from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.controllers.journeys import stop_to_schema
from src.adapters.api.dependencies import get_stop_catalog_service
from src.adapters.api.schemas.journeys import StopSchema
from src.app.services.stop_catalog_service import StopCatalogService
from src.domain.exceptions import UnknownStop

router = APIRouter(tags=["stops"])


@router.get("/stops", response_model=list[StopSchema])
async def search_stops(
    q: str = Query("", description="Part of the stop name, at least 3 characters"),
    service: StopCatalogService = Depends(get_stop_catalog_service),
) -> list[StopSchema]:
    stops = await service.search_stops(q)
    return [stop_to_schema(s) for s in stops]


@router.get("/stops/{stop_id}", response_model=StopSchema)
async def get_stop(
    stop_id: str,
    service: StopCatalogService = Depends(get_stop_catalog_service),
) -> StopSchema:
    try:
        stop = await service.get_stop(stop_id)
    except UnknownStop as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return stop_to_schema(stop)

from __future__ import annotations

from functools import lru_cache

from src.adapters.config import PlannerRuntimeConfig
from src.adapters.swu import HttpSwuDepartureProvider, HttpSwuRoutePatternRepository
from src.app.services.journey_planning_service import JourneyPlanningService
from src.app.services.stop_catalog_service import StopCatalogService


def get_runtime_config() -> PlannerRuntimeConfig:
    return PlannerRuntimeConfig.from_env()


@lru_cache(maxsize=1)
def get_route_pattern_repository() -> HttpSwuRoutePatternRepository:
    # Shared across requests so the base-data TTL cache is effective.
    cfg = get_runtime_config()
    return HttpSwuRoutePatternRepository(
        base_url=cfg.swu_api_base,
        headers=cfg.swu_headers,
        timeout_s=cfg.swu_timeout_s,
        cache_ttl_s=cfg.pattern_cache_ttl_s,
    )


def get_journey_planning_service() -> JourneyPlanningService:
    cfg = get_runtime_config()
    return JourneyPlanningService(
        departure_provider=HttpSwuDepartureProvider(
            base_url=cfg.swu_api_base,
            headers=cfg.swu_headers,
            timeout_s=cfg.swu_timeout_s,
        ),
        pattern_repository=get_route_pattern_repository(),
        policy=cfg.policy,
        departure_limit=cfg.departure_limit,
    )


def get_stop_catalog_service() -> StopCatalogService:
    return StopCatalogService(pattern_repository=get_route_pattern_repository())

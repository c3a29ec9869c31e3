from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from src.adapters.config import DEFAULT_SWU_API_BASE
from src.app.ports.output import IRoutePatternRepository
from src.domain.models import RoutePattern, Stop

from .parsing import as_list, compile_route_patterns, parse_stop_points, parse_stops

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpSwuRoutePatternRepository(IRoutePatternRepository):
    """Loads stop and route base data and compiles route patterns.

    Notes:
      - Base data changes rarely; results are cached per instance for
        `cache_ttl_s` seconds.
      - Failures propagate; a planning request cannot proceed without a network.
    """

    base_url: str = DEFAULT_SWU_API_BASE
    headers: dict[str, str] = field(default_factory=dict)
    timeout_s: float = 10.0
    cache_ttl_s: float = 3600.0
    client: httpx.AsyncClient | None = None

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _cached_at_monotonic: float = field(default=0.0, init=False, repr=False)
    _stops: dict[str, Stop] | None = field(default=None, init=False, repr=False)
    _patterns: tuple[RoutePattern, ...] | None = field(
        default=None, init=False, repr=False
    )

    async def load_stops(self) -> dict[str, Stop]:
        await self._refresh()
        return dict(self._stops or {})

    async def load_patterns(self) -> tuple[RoutePattern, ...]:
        await self._refresh()
        return self._patterns or ()

    async def _refresh(self) -> None:
        async with self._lock:
            now_mono = time.monotonic()
            if (
                self._patterns is not None
                and (now_mono - self._cached_at_monotonic) < self.cache_ttl_s
            ):
                return

            params = {"ContentScope": "extended"}
            stops_raw, points_raw, routes_raw = await asyncio.gather(
                self._get("/stop/attributes/BaseData", params),
                self._get("/stoppoint/attributes/BaseData", params),
                self._get("/route/attributes/BaseData", params),
            )

            stops = parse_stops(stops_raw)
            routes = as_list((routes_raw.get("RouteAttributes") or {}).get("RouteData"))
            if not routes:
                logger.warning("RouteData empty in Route BaseData response")

            self._patterns = compile_route_patterns(
                routes,
                stops_by_id=stops,
                stop_points_by_id=parse_stop_points(points_raw),
            )
            self._stops = stops
            self._cached_at_monotonic = time.monotonic()

    async def _get(self, path: str, params: Mapping[str, Any]) -> Mapping[str, Any]:
        url = f"{self.base_url.rstrip('/')}{path}"
        if self.client is not None:
            resp = await self.client.get(url, params=dict(params), headers=self.headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                resp = await client.get(url, params=dict(params), headers=self.headers)
        resp.raise_for_status()
        data = resp.json()
        return data if isinstance(data, Mapping) else {}

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from src.adapters.config import DEFAULT_SWU_API_BASE
from src.app.ports.output import IDepartureProvider
from src.domain.models import Departure

from .parsing import parse_passages


@dataclass(slots=True)
class HttpSwuDepartureProvider(IDepartureProvider):
    """Reads the operator's stop passage feeds over HTTP.

    No caching happens here; per-call memoization is the caller's job.
    HTTP and decoding errors propagate.
    """

    base_url: str = DEFAULT_SWU_API_BASE
    headers: dict[str, str] = field(default_factory=dict)
    timeout_s: float = 10.0
    client: httpx.AsyncClient | None = None

    async def departures(self, stop_id: str, *, limit: int) -> tuple[Departure, ...]:
        payload = await self._get(
            "/stop/passage/Departures", {"StopNumber": stop_id, "Limit": limit}
        )
        return parse_passages(payload, kind="Departure")

    async def arrivals(self, stop_id: str, *, limit: int) -> tuple[Departure, ...]:
        payload = await self._get(
            "/stop/passage/Arrivals", {"StopNumber": stop_id, "Limit": limit}
        )
        return parse_passages(payload, kind="Arrival")

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

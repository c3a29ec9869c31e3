from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.algorithms.network import TravelTimePolicy

DEFAULT_SWU_API_BASE = "https://api.swu.de/mobility/v1"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


def parse_headers(raw: str | None) -> dict[str, str]:
    """Parse 'Key:Value;Key2:Value2' into a header dict."""

    headers: dict[str, str] = {}
    for part in (raw or "").split(";"):
        part = part.strip()
        if not part or ":" not in part:
            continue
        k, v = part.split(":", 1)
        k = k.strip()
        if k:
            headers[k] = v.strip()
    return headers


@dataclass(frozen=True, slots=True)
class PlannerRuntimeConfig:
    swu_api_base: str
    swu_headers: dict[str, str]
    swu_timeout_s: float
    pattern_cache_ttl_s: float
    departure_limit: int
    plan_timeout_s: float
    reveal_errors: bool
    policy: TravelTimePolicy

    @staticmethod
    def from_env() -> "PlannerRuntimeConfig":
        base = (os.getenv("SWU_API_BASE") or "").strip() or DEFAULT_SWU_API_BASE
        defaults = TravelTimePolicy()

        return PlannerRuntimeConfig(
            swu_api_base=base.rstrip("/"),
            swu_headers=parse_headers(os.getenv("SWU_API_HEADERS")),
            swu_timeout_s=_env_float("SWU_TIMEOUT_S", 10.0),
            pattern_cache_ttl_s=_env_float("PATTERN_CACHE_TTL_S", 3600.0),
            departure_limit=_env_int("DEPARTURE_LIMIT", 20),
            plan_timeout_s=_env_float("PLAN_TIMEOUT_S", 10.0),
            reveal_errors=_env_bool("JOURNEY_PLANNER_REVEAL_ERRORS", False),
            policy=TravelTimePolicy(
                speed_kmh=_env_float("PLANNER_SPEED_KMH", defaults.speed_kmh),
                min_hop_minutes=_env_float(
                    "PLANNER_MIN_HOP_MINUTES", defaults.min_hop_minutes
                ),
                fallback_wait_minutes=_env_float(
                    "PLANNER_FALLBACK_WAIT_MINUTES", defaults.fallback_wait_minutes
                ),
                departure_tolerance_s=_env_float(
                    "PLANNER_DEPARTURE_TOLERANCE_S", defaults.departure_tolerance_s
                ),
            ),
        )

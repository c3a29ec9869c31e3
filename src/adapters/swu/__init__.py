from .http_departure_provider import HttpSwuDepartureProvider
from .http_route_pattern_repository import HttpSwuRoutePatternRepository

__all__ = [
    "HttpSwuDepartureProvider",
    "HttpSwuRoutePatternRepository",
]

from .departure_provider import IDepartureProvider
from .route_pattern_repository import IRoutePatternRepository

__all__ = [
    "IDepartureProvider",
    "IRoutePatternRepository",
]

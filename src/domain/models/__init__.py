from .departure import Departure
from .geo import GeoPoint
from .itinerary import Itinerary, JourneyNotFound, Segment
from .network import Connection, Edge, PathStep
from .pattern import RoutePattern, VehicleCategory
from .stop import Stop

__all__ = [
    "Connection",
    "Departure",
    "Edge",
    "GeoPoint",
    "Itinerary",
    "JourneyNotFound",
    "PathStep",
    "RoutePattern",
    "Segment",
    "Stop",
    "VehicleCategory",
]

from .routing import (
    DepartureFeedUnavailable,
    NoPathFound,
    RoutingError,
    StopNotInNetwork,
    UnknownStop,
)

__all__ = [
    "DepartureFeedUnavailable",
    "NoPathFound",
    "RoutingError",
    "StopNotInNetwork",
    "UnknownStop",
]

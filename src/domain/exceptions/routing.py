class RoutingError(Exception):
    """Base exception for journey planning failures."""


class StopNotInNetwork(RoutingError):
    """Raised when the start or end stop is absent from the built network."""


class NoPathFound(RoutingError):
    """Raised when no feasible path exists for the given request."""


class UnknownStop(RoutingError):
    """Raised when a stop id is not present in any known stop data."""


class DepartureFeedUnavailable(RoutingError):
    """Raised when every departure feed request of a planning call failed."""

from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Stop:
    """A transit stop.

    `location` is None when upstream data carried no usable coordinates; such
    stops never enter the network graph.
    """

    id: str
    name: str
    location: GeoPoint | None = None

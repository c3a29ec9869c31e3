from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .stop import Stop


class VehicleCategory(str, Enum):
    TRAM = "TRAM"
    BUS = "BUS"


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """One direction of one numbered line, as an ordered stop sequence.

    The direction label is descriptive metadata used for display and for
    matching live departures; it does not restrict traversal.
    """

    route_number: str
    direction_code: str
    name: str | None = None
    category: VehicleCategory = VehicleCategory.BUS
    direction_name: str = ""
    stops: tuple[Stop, ...] = ()

    @property
    def id(self) -> str:
        return f"{self.route_number}-{self.direction_code}"

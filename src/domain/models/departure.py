from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, slots=True)
class Departure:
    """A vehicle departure (or arrival) event at one stop.

    Timestamps are timezone-aware. `deviation_s` follows the
    "positive = late" convention: a vehicle 60 seconds behind schedule has
    deviation_s == 60 and an actual time one minute after the scheduled one.
    Feeds may omit `vehicle_number`; ride continuity then falls back to
    matching the route and the arrival time at the previous stop.
    """

    route_number: str
    direction_text: str = ""
    vehicle_number: str | None = None
    departure_scheduled: datetime | None = None
    departure_actual: datetime | None = None
    arrival_scheduled: datetime | None = None
    arrival_actual: datetime | None = None
    deviation_s: int = 0

    @property
    def departure_time(self) -> datetime | None:
        """Best known departure instant: actual, else scheduled + deviation."""

        if self.departure_actual is not None:
            return self.departure_actual
        if self.departure_scheduled is not None:
            return self.departure_scheduled + timedelta(seconds=self.deviation_s)
        return None

    @property
    def arrival_time(self) -> datetime | None:
        if self.arrival_actual is not None:
            return self.arrival_actual
        if self.arrival_scheduled is not None:
            return self.arrival_scheduled + timedelta(seconds=self.deviation_s)
        return None

    @property
    def event_time(self) -> datetime | None:
        # Arrival-feed records may only carry arrival timestamps.
        return self.departure_time or self.arrival_time

    @property
    def identity(self) -> tuple[str, str | None, datetime | None]:
        return (self.route_number, self.vehicle_number, self.event_time)

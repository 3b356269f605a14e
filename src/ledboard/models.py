"""Data models for the LED arrival board."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


class DayType(str, Enum):
    """Schedule bucket a departure belongs to."""
    WEEKDAY = "weekday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


@dataclass(frozen=True)
class DepartureRecord:
    """A historical departure at a stop."""
    route_id: str
    direction_id: str  # "0" or "1" in published data
    destination_name: str
    departure_seconds: int  # Seconds since midnight
    trip_id: str
    day_type: Union[DayType, str]  # Unknown day codes are kept as plain strings


@dataclass
class Station:
    """Represents a station, or a station complex when it has children."""
    stop_id: str
    name: str
    latitude: float
    longitude: float
    north_label: str = ""
    south_label: str = ""
    routes: List[str] = field(default_factory=list)  # Route IDs served at this station
    children: List[str] = field(default_factory=list)  # Child stop IDs merged into predictions


@dataclass
class Prediction:
    """An upcoming train derived from historical departures."""
    route_id: str
    direction_id: str
    destination_name: str
    wait_seconds: int
    rank: int  # Position in the sorted list
    trip_id: str = ""
    is_express: bool = False

    @property
    def minutes(self) -> int:
        """Wait time in whole minutes, rounded half up."""
        return (self.wait_seconds + 30) // 60


@dataclass
class RotationState:
    """Rank of the prediction last shown in the secondary slot."""
    last_rank: Optional[int] = None


@dataclass
class BoardFrame:
    """What the sign shows after one refresh."""
    station: Optional[Station]
    direction: Optional[int]
    direction_label: str
    predictions: List[Prediction]
    primary: Optional[Prediction]
    secondary: Optional[Prediction]
    last_updated: datetime

    def displayed(self) -> List[Prediction]:
        """Return the rows to draw, top row first."""
        return [p for p in (self.primary, self.secondary) if p is not None]

"""Main arrival board class."""

import logging
import time
from datetime import datetime
from typing import Callable, List, Optional

from .dataset_store import HistoricalDataStore
from .models import BoardFrame, Station
from .prediction_engine import MAX_NUM_PREDICTIONS, PredictionEngine
from .rotation import RotationSelector

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 5  # seconds
DEFAULT_STATION = "A20"  # 86 St (B, C)


class ArrivalBoard:
    """
    Simulates a two-row LED arrival sign for one station.

    This class provides methods to:
    - Load the station and departures dataset
    - Select a station and direction
    - Produce the rows shown on each refresh, rotating the secondary row
    """

    def __init__(
        self,
        store: Optional[HistoricalDataStore] = None,
        station_id: str = DEFAULT_STATION,
        direction: Optional[int] = None,
        capacity: int = MAX_NUM_PREDICTIONS,
    ):
        """
        Initialize the board.

        Args:
            store: Dataset store to read from. A new empty store is created if None;
                   call load_from_files() or load_from_url() before refreshing.
            station_id: Stop ID of the station to show.
            direction: 0 (north), 1 (south) or None for both directions.
            capacity: Maximum number of predictions kept per refresh.
        """
        self._check_direction(direction)
        self.store = store if store is not None else HistoricalDataStore()
        self.engine = PredictionEngine(self.store, capacity=capacity)
        self.selector = RotationSelector()
        self.station_id = station_id
        self.direction = direction

    def load_from_files(self, stations_path: str, departures_path: str) -> None:
        """
        Load the dataset from local files.

        Args:
            stations_path: Path to the stations JSON document
            departures_path: Path to the departures JSON document
        """
        self.store.load_from_files(stations_path, departures_path)

    def load_from_url(self, stations_url: str, departures_url: str) -> None:
        """Download and load the dataset."""
        self.store.load_from_url(stations_url, departures_url)

    def get_station(self, station_input: str) -> Station:
        """
        Get a station by ID or name.

        Args:
            station_input: Either a stop ID (e.g., "A20") or station name (e.g., "86 St").

        Returns:
            Station object.

        Raises:
            ValueError: If station not found.
        """
        station = self.store.get_station(station_input)
        if station is not None:
            return station

        stations = self.store.find_stations_by_name(station_input)
        if not stations:
            raise ValueError(f"No station found matching '{station_input}'")

        return stations[0]

    def list_stations(self) -> List[Station]:
        """Return the selectable stations sorted by name."""
        return sorted(self.store.stations_for_display(), key=lambda s: s.name)

    def set_station(self, station_id: str) -> None:
        """Switch the board to another station."""
        if station_id != self.station_id:
            self.station_id = station_id
            logger.info(f"Board switched to station {station_id}")

    def set_direction(self, direction: Optional[int]) -> None:
        """
        Switch the direction filter.

        Args:
            direction: 0, 1 or None for both.

        Raises:
            ValueError: If direction is not 0, 1 or None.
        """
        self._check_direction(direction)
        if direction != self.direction:
            self.direction = direction
            logger.info(f"Board switched to direction {direction}")

    @staticmethod
    def _check_direction(direction: Optional[int]) -> None:
        if direction is not None and direction not in (0, 1):
            raise ValueError(f"Direction must be 0, 1 or None, got {direction!r}")

    @staticmethod
    def direction_label(station: Optional[Station], direction: Optional[int]) -> str:
        """
        Get the rider-facing label for a direction at a station.

        Args:
            station: Station whose labels to use, if any
            direction: 0, 1 or None

        Returns:
            Direction label (e.g., "Uptown & The Bronx", "Downtown", "Both")
        """
        if direction == 0:
            return (station.north_label if station else "") or "Uptown"
        if direction == 1:
            return (station.south_label if station else "") or "Downtown"
        return "Both"

    def refresh(self, now: Optional[datetime] = None) -> BoardFrame:
        """
        Compute what the sign shows right now.

        Args:
            now: Current instant. Defaults to datetime.now().

        Returns:
            BoardFrame with the next train in the primary row and the
            rotating pick in the secondary row.
        """
        if now is None:
            now = datetime.now()

        station = self.store.get_station(self.station_id)
        predictions = self.engine.predict(self.station_id, self.direction, now)

        primary = predictions[0] if predictions else None
        secondary = self.selector.second_slot(predictions)

        if station is None:
            logger.debug(f"Station {self.station_id} not in dataset")

        return BoardFrame(
            station=station,
            direction=self.direction,
            direction_label=self.direction_label(station, self.direction),
            predictions=predictions,
            primary=primary,
            secondary=secondary,
            last_updated=now,
        )

    def run(
        self,
        callback: Callable[[BoardFrame], None],
        interval: float = REFRESH_INTERVAL,
        iterations: Optional[int] = None,
    ) -> None:
        """
        Refresh the board on a fixed interval.

        Args:
            callback: Called with each new frame.
            interval: Seconds between refreshes.
            iterations: Number of refreshes before returning. None runs forever.
        """
        count = 0
        while iterations is None or count < iterations:
            callback(self.refresh())
            count += 1
            if iterations is not None and count >= iterations:
                break
            time.sleep(interval)

    def cleanup(self) -> None:
        """Release the loaded dataset and rotation memory."""
        self.selector.reset()
        self.store.clear()
        logger.info("Cleaned up board resources")

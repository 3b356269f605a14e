"""Historical departure dataset and station topology store."""

import json
import logging
from typing import Dict, List, Optional, Set, Union

import requests

from .day_classifier import SECONDS_PER_DAY
from .exceptions import LoadError
from .models import DayType, DepartureRecord, Station

logger = logging.getLogger(__name__)

# Single-character day codes used by the compacted departures document
DAY_CODES = {
    "w": DayType.WEEKDAY,
    "s": DayType.SATURDAY,
    "u": DayType.SUNDAY,
}

REQUEST_TIMEOUT = 10  # seconds

Payload = Union[str, bytes]


class HistoricalDataStore:
    """Holds decoded departures per stop and the station topology."""

    def __init__(self):
        """Initialize an empty store."""
        self.stations: Dict[str, Station] = {}
        self.station_order: List[str] = []  # stop_ids in document order
        self.departures: Dict[str, List[DepartureRecord]] = {}
        self.child_stop_ids: Set[str] = set()
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load_from_url(self, stations_url: str, departures_url: str) -> None:
        """Download both documents and load them."""
        logger.info(f"Downloading stations from {stations_url}")
        logger.info(f"Downloading departures from {departures_url}")
        try:
            stations_response = requests.get(stations_url, timeout=REQUEST_TIMEOUT)
            stations_response.raise_for_status()
            departures_response = requests.get(departures_url, timeout=REQUEST_TIMEOUT)
            departures_response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to download dataset: {e}")
            raise LoadError(f"Failed to download dataset: {e}") from e

        self.load(stations_response.content, departures_response.content)

    def load_from_files(self, stations_path: str, departures_path: str) -> None:
        """Load both documents from local JSON files."""
        logger.info("Loading dataset from local files")
        try:
            with open(stations_path, "rb") as f:
                stations_payload = f.read()
            with open(departures_path, "rb") as f:
                departures_payload = f.read()
        except OSError as e:
            logger.error(f"Failed to read dataset files: {e}")
            raise LoadError(f"Failed to read dataset files: {e}") from e

        self.load(stations_payload, departures_payload)

    def load(self, stations_payload: Payload, departures_payload: Payload) -> None:
        """
        Parse and install a station document and a departures document.

        Nothing is replaced unless both documents parse and validate.

        Raises:
            LoadError: If either document is malformed or the topology has a cycle.
        """
        stations_doc = self._parse_json(stations_payload, "stations")
        departures_doc = self._parse_json(departures_payload, "departures")

        try:
            stations, station_order = self._load_stations(stations_doc)
            departures = self._load_departures(departures_doc)
            self._validate_topology(stations)
        except LoadError as e:
            logger.error(f"Rejected dataset: {e}")
            raise

        child_stop_ids = set()
        for station in stations.values():
            for child_id in station.children:
                child_stop_ids.add(child_id)
                if child_id not in stations and child_id not in departures:
                    logger.warning(f"Station {station.stop_id} lists unknown child {child_id}")

        self.stations = stations
        self.station_order = station_order
        self.departures = departures
        self.child_stop_ids = child_stop_ids
        self._loaded = True

        record_count = sum(len(records) for records in departures.values())
        logger.info(
            f"Loaded {len(stations)} stations and {record_count} departures "
            f"for {len(departures)} stops"
        )

    @staticmethod
    def _parse_json(payload: Payload, label: str):
        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            return json.loads(payload)
        except (UnicodeDecodeError, ValueError) as e:
            logger.error(f"Failed to parse {label} document: {e}")
            raise LoadError(f"Malformed {label} document: {e}") from e

    def _load_stations(self, doc) -> tuple:
        """Build Station objects from the stations document."""
        if not isinstance(doc, list):
            raise LoadError("Stations document must be a JSON array")

        stations: Dict[str, Station] = {}
        order: List[str] = []

        for index, row in enumerate(doc):
            if not isinstance(row, dict):
                raise LoadError(f"Station entry {index} is not an object")
            try:
                stop_id = str(row["stop_id"])
                station = Station(
                    stop_id=stop_id,
                    name=str(row["stop_name"]),
                    latitude=float(row.get("latitude") or 0.0),
                    longitude=float(row.get("longitude") or 0.0),
                    north_label=row.get("north_direction_label") or "",
                    south_label=row.get("south_direction_label") or "",
                    routes=[str(r) for r in row.get("routes") or []],
                    children=[str(c) for c in row.get("children") or []],
                )
            except (KeyError, TypeError, ValueError) as e:
                raise LoadError(f"Invalid station entry {index}: {e}") from e

            if stop_id in stations:
                raise LoadError(f"Duplicate station {stop_id}")
            stations[stop_id] = station
            order.append(stop_id)

        return stations, order

    def _load_departures(self, doc) -> Dict[str, List[DepartureRecord]]:
        """Decode either the compacted or the direct departures form."""
        if not isinstance(doc, dict):
            raise LoadError("Departures document must be a JSON object")

        if "names" in doc and "data" in doc:
            return self._decompress(doc["names"], doc["data"])

        departures: Dict[str, List[DepartureRecord]] = {}
        for stop_id, rows in doc.items():
            if not isinstance(rows, list):
                raise LoadError(f"Departures for stop {stop_id} must be an array")
            records = []
            for row in rows:
                try:
                    day_type = row["day_type"]
                    records.append(
                        DepartureRecord(
                            route_id=str(row["route_id"]),
                            direction_id=str(row["direction_id"]),
                            destination_name=str(row["long_name"]),
                            departure_seconds=self._departure_seconds(row["departure_time"]),
                            trip_id=str(row.get("trip_id") or ""),
                            day_type=self._day_type(day_type),
                        )
                    )
                except (KeyError, TypeError, AttributeError) as e:
                    raise LoadError(f"Invalid departure for stop {stop_id}: {e}") from e
            departures[stop_id] = records

        return departures

    def _decompress(self, names, data) -> Dict[str, List[DepartureRecord]]:
        """
        Expand the compacted form.

        Each row is [route_id, direction_id, name_index, departure_time, day_code]
        with an optional trailing trip_id.
        """
        if not isinstance(names, list) or not isinstance(data, dict):
            raise LoadError("Compacted departures need a 'names' array and a 'data' object")

        departures: Dict[str, List[DepartureRecord]] = {}
        for stop_id, rows in data.items():
            if not isinstance(rows, list):
                raise LoadError(f"Departures for stop {stop_id} must be an array")
            records = []
            for row in rows:
                if not isinstance(row, list) or len(row) not in (5, 6):
                    raise LoadError(f"Invalid compacted row for stop {stop_id}: {row!r}")

                route_id, direction_id, name_index, departure_time, day_code = row[:5]
                trip_id = row[5] if len(row) == 6 else ""

                if isinstance(name_index, bool) or not isinstance(name_index, int):
                    raise LoadError(f"Invalid name index for stop {stop_id}: {name_index!r}")
                if not 0 <= name_index < len(names):
                    raise LoadError(f"Name index {name_index} out of range for stop {stop_id}")
                if not isinstance(day_code, str):
                    raise LoadError(f"Invalid day code for stop {stop_id}: {day_code!r}")

                records.append(
                    DepartureRecord(
                        route_id=str(route_id),
                        direction_id=str(direction_id),
                        destination_name=str(names[name_index]),
                        departure_seconds=self._departure_seconds(departure_time),
                        trip_id=str(trip_id or ""),
                        day_type=DAY_CODES.get(day_code, day_code),
                    )
                )
            departures[stop_id] = records

        return departures

    @staticmethod
    def _departure_seconds(value) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise LoadError(f"Departure time must be an integer, got {value!r}")
        # GTFS allows times past 24:00:00 for trips that run after midnight
        return value % SECONDS_PER_DAY

    @staticmethod
    def _day_type(value):
        try:
            return DayType(value)
        except ValueError:
            return value

    @staticmethod
    def _validate_topology(stations: Dict[str, Station]) -> None:
        """Reject station graphs where a station is its own descendant."""
        done: Set[str] = set()

        for root_id in stations:
            if root_id in done:
                continue
            # Depth-first walk keeping the current path to spot back edges
            path: List[str] = [root_id]
            on_path: Set[str] = {root_id}
            iterators = [iter(stations[root_id].children)]

            while iterators:
                child_id = next(iterators[-1], None)
                if child_id is None:
                    iterators.pop()
                    finished = path.pop()
                    on_path.discard(finished)
                    done.add(finished)
                    continue
                if child_id in on_path:
                    cycle = " -> ".join(path[path.index(child_id):] + [child_id])
                    raise LoadError(f"Station topology has a cycle: {cycle}")
                if child_id in done or child_id not in stations:
                    continue
                path.append(child_id)
                on_path.add(child_id)
                iterators.append(iter(stations[child_id].children))

    def stations_for_display(self) -> List[Station]:
        """Return stations that are not a child of another station."""
        return [
            self.stations[stop_id]
            for stop_id in self.station_order
            if stop_id not in self.child_stop_ids
        ]

    def get_station(self, stop_id: str) -> Optional[Station]:
        """Get station by stop_id, or None if unknown."""
        return self.stations.get(stop_id)

    def find_stations_by_name(self, name: str) -> List[Station]:
        """Find displayable stations by name (partial match)."""
        name_lower = name.lower()
        return [s for s in self.stations_for_display() if name_lower in s.name.lower()]

    def children_of(self, stop_id: str) -> List[str]:
        """Return the ordered child stop IDs of a station complex."""
        station = self.stations.get(stop_id)
        if station is None:
            return []
        return list(station.children)

    def departures_for(self, stop_id: str) -> List[DepartureRecord]:
        """Return the historical departures recorded at a stop."""
        return self.departures.get(stop_id, [])

    def clear(self) -> None:
        """Clear all loaded data to free memory."""
        self.stations = {}
        self.station_order = []
        self.departures = {}
        self.child_stop_ids = set()
        self._loaded = False
        logger.info("Cleared dataset from memory")

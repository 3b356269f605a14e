"""Builds ranked arrival predictions from historical departures."""

import logging
from datetime import datetime
from typing import List, Optional

from .dataset_store import HistoricalDataStore
from .day_classifier import SECONDS_PER_DAY, classify_day, seconds_since_midnight
from .models import Prediction

logger = logging.getLogger(__name__)

MAX_NUM_PREDICTIONS = 6
DISPLAY_HORIZON_SECONDS = 3600

# Only these routes run express service
EXPRESS_ROUTES = {"4", "6"}
EXPRESS_MARKERS = ("_X", "EXPRESS")


def is_express_train(route_id: str, trip_id: str) -> bool:
    """Check whether a trip is an express run on an express-capable route."""
    if route_id not in EXPRESS_ROUTES:
        return False
    return any(marker in trip_id for marker in EXPRESS_MARKERS)


class PredictionEngine:
    """
    Turns the historical departures of a stop into an upcoming-trains list.

    The engine keeps no state between calls: the same stop, direction and
    instant always give the same predictions.
    """

    def __init__(
        self,
        store: HistoricalDataStore,
        capacity: int = MAX_NUM_PREDICTIONS,
        horizon_seconds: int = DISPLAY_HORIZON_SECONDS,
    ):
        """
        Initialize the engine.

        Args:
            store: Dataset store supplying stations and departures.
            capacity: Maximum number of predictions returned.
            horizon_seconds: Departures further away than this are dropped.
        """
        self.store = store
        self.capacity = capacity
        self.horizon_seconds = horizon_seconds

    def predict(self, stop_id: str, direction: Optional[int], now: datetime) -> List[Prediction]:
        """
        Get upcoming trains for a stop and its child stops.

        Args:
            stop_id: Stop ID of the station (e.g., "A20").
            direction: 0 or 1 to keep a single direction, None for both.
            now: Current instant, in the local time of the schedule.

        Returns:
            Predictions sorted by wait time, ranked from 0, at most ``capacity`` long.
        """
        stop_ids = [stop_id] + self.store.children_of(stop_id)

        day_type = classify_day(now)
        now_seconds = seconds_since_midnight(now)
        direction_key = None if direction is None else str(direction)

        candidates: List[Prediction] = []
        for current_stop in stop_ids:
            for record in self.store.departures_for(current_stop):
                if record.day_type != day_type:
                    continue
                if direction_key is not None and record.direction_id != direction_key:
                    continue

                wait = record.departure_seconds - now_seconds
                # Departures earlier in the day are tomorrow's, past midnight
                if wait < 0:
                    wait += SECONDS_PER_DAY
                if wait > self.horizon_seconds or wait < 0:
                    continue

                candidates.append(
                    Prediction(
                        route_id=record.route_id,
                        direction_id=record.direction_id,
                        destination_name=record.destination_name,
                        wait_seconds=wait,
                        rank=0,
                        trip_id=record.trip_id,
                        is_express=is_express_train(record.route_id, record.trip_id),
                    )
                )

        # sort() is stable, so equal waits keep stop and record order
        candidates.sort(key=lambda p: p.wait_seconds)
        for rank, prediction in enumerate(candidates):
            prediction.rank = rank

        logger.debug(
            f"{len(candidates)} departures within {self.horizon_seconds}s "
            f"for {stop_id} (direction={direction}, day={day_type.value})"
        )
        return candidates[: self.capacity]

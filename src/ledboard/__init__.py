"""ledboard - LED arrival sign simulator driven by historical departures."""

__version__ = "0.1.0"

from .models import (
    BoardFrame,
    DayType,
    DepartureRecord,
    Prediction,
    RotationState,
    Station,
)
from .exceptions import LoadError
from .dataset_store import HistoricalDataStore
from .day_classifier import classify_day, seconds_since_midnight
from .prediction_engine import PredictionEngine, is_express_train
from .rotation import RotationSelector
from .arrival_board import ArrivalBoard

__all__ = [
    "ArrivalBoard",
    "HistoricalDataStore",
    "PredictionEngine",
    "RotationSelector",
    "LoadError",
    "BoardFrame",
    "DayType",
    "DepartureRecord",
    "Prediction",
    "RotationState",
    "Station",
    "classify_day",
    "seconds_since_midnight",
    "is_express_train",
]

"""Chooses which prediction occupies the secondary row of the sign."""

import logging
import threading
from typing import List, Optional

from .models import Prediction, RotationState

logger = logging.getLogger(__name__)


class RotationSelector:
    """
    Steps the secondary row through ranks 1..N-1, one per refresh.

    The top row always shows rank 0, so the secondary row never does. Each
    display owns its own selector and rotation memory.
    """

    def __init__(self, state: Optional[RotationState] = None):
        self.state = state if state is not None else RotationState()
        self._lock = threading.Lock()

    @property
    def last_rank(self) -> Optional[int]:
        return self.state.last_rank

    def second_slot(self, predictions: List[Prediction]) -> Optional[Prediction]:
        """
        Pick the prediction for the secondary row and remember its rank.

        Args:
            predictions: Ranked predictions from PredictionEngine.predict().

        Returns:
            The selected Prediction, or None when there are fewer than two.
        """
        if not predictions or len(predictions) < 2:
            return None

        with self._lock:
            selected = self._select(predictions)
            self.state.last_rank = selected.rank

        logger.debug(f"Secondary row shows rank {selected.rank}")
        return selected

    def _select(self, predictions: List[Prediction]) -> Prediction:
        last_rank = self.state.last_rank
        if last_rank is None:
            return predictions[1]

        for i, prediction in enumerate(predictions):
            if prediction.rank == last_rank:
                next_index = i + 1
                if next_index >= len(predictions):
                    next_index = 1  # Wrap to the second train, never the first
                return predictions[next_index]

        # Last shown rank is gone from this list
        return predictions[1]

    def reset(self) -> None:
        """Forget the last shown rank."""
        with self._lock:
            self.state.last_rank = None

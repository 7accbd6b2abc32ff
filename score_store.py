import threading
from abc import ABC, abstractmethod
from typing import Dict


class ScoreStore(ABC):
    """Base class for receipt score storage."""

    @abstractmethod
    def put(self, receipt_id: str, points: int) -> None:
        """Save the points computed for a newly processed receipt."""
        pass

    @abstractmethod
    def get(self, receipt_id: str) -> int:
        """Retrieve the points for a receipt id, 0 if the id is unknown."""
        pass


class InMemoryScoreStore(ScoreStore):
    """Keeps the (receipt id -> reward points) mapping in process memory."""

    def __init__(self):
        self._scores: Dict[str, int] = {}
        self._lock = threading.Lock()

    def put(self, receipt_id: str, points: int) -> None:
        with self._lock:
            self._scores[receipt_id] = points

    def get(self, receipt_id: str) -> int:
        with self._lock:
            return self._scores.get(receipt_id, 0)

    def __contains__(self, receipt_id) -> bool:
        with self._lock:
            return receipt_id in self._scores

    def __len__(self) -> int:
        with self._lock:
            return len(self._scores)

"""
Key-value storage backends for library data.
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

BOOKS_KEY = "bookTrackerData"
READING_GOALS_KEY = "readingGoals"
API_KEY_KEY = "googleBooksApiKey"


class StorageBackend(ABC):
    """
    Whole-value blob store keyed by string.

    ``load`` returns None for a missing or unreadable key; ``save`` returns
    False instead of raising when the write fails.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> bool:
        pass


class MemoryStorage(StorageBackend):
    """In-process storage; values are deep-copied through JSON on the way in and out"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        super().__init__()
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            self.logger.error(f"Error saving {key}: {e}")
            return False
        return True

    def snapshot(self) -> Dict[str, Any]:
        return {key: copy.deepcopy(self.load(key)) for key in self._data}

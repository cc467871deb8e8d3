from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional

from .models import TaskEntity
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "RN_TASKS_V1"


def encode_tasks(tasks: Iterable[TaskEntity]) -> str:
    return json.dumps(list(tasks), ensure_ascii=False)


def decode_tasks(raw: Optional[str]) -> List[TaskEntity]:
    """
    Decode the stored JSON array. Missing data yields an empty list; entries
    that are not JSON objects are dropped.
    """
    if not raw:
        return []
    data: Any = json.loads(raw)
    if not isinstance(data, list):
        logger.warning("Stored tasks are not a JSON array (got %s); ignoring", type(data).__name__)
        return []
    tasks = [item for item in data if isinstance(item, dict)]
    if len(tasks) != len(data):
        logger.warning("Dropped %d malformed task record(s)", len(data) - len(tasks))
    return tasks  # type: ignore[return-value]


# PUBLIC_INTERFACE
class TaskStorage(ABC):
    """
    Key-value storage contract for the task list.

    The whole list is stored as one JSON array under `storage_key`. `load` and
    `save` never raise: failures are logged and reported as an empty list or
    False, respectively.
    """

    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        self.storage_key = storage_key

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the raw value stored under key, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store the raw value under key, replacing any previous value."""

    def load(self) -> List[TaskEntity]:
        try:
            return decode_tasks(self.get_item(self.storage_key))
        except Exception:
            logger.warning("Failed to load tasks key=%s", self.storage_key, exc_info=True)
            return []

    def save(self, tasks: Iterable[TaskEntity]) -> bool:
        try:
            self.set_item(self.storage_key, encode_tasks(tasks))
        except Exception:
            logger.warning("Failed to save tasks key=%s", self.storage_key, exc_info=True)
            return False
        return True


class InMemoryStorage(TaskStorage):
    """
    Thread-safe in-memory storage suitable for testing and default runtime.

    Values are kept serialized, so a loaded list never aliases a saved one.
    """

    def __init__(self, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        super().__init__(storage_key)
        self._lock = RLock()
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value


# PUBLIC_INTERFACE
def get_storage(settings: Optional[Settings] = None) -> TaskStorage:
    """
    Factory to return the configured storage based on settings.
    - memory: InMemoryStorage
    - sqlite: SQLiteStorage
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteStorage

        return SQLiteStorage(settings.sqlite_db_path, storage_key=settings.storage_key)
    return InMemoryStorage(storage_key=settings.storage_key)

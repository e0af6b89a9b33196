from __future__ import annotations

import copy
import threading
from typing import Dict, Iterable, Optional, Tuple

from projects_api.domain.models import ProjectRecord


class ProjectCache:
    """
    Process-wide in-memory copy of the project records.

    Every access holds a lock; records go in and come out as deep copies so
    request handlers never share mutable state with the cache.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, ProjectRecord] = {}

    def get(self, key: str) -> Optional[ProjectRecord]:
        with self._lock:
            record = self._records.get(key)
            return copy.deepcopy(record) if record is not None else None

    def set(self, key: str, record: ProjectRecord) -> None:
        stored = copy.deepcopy(record)
        with self._lock:
            self._records[key] = stored

    def snapshot(self) -> Dict[str, ProjectRecord]:
        with self._lock:
            return copy.deepcopy(self._records)

    def replace_all(self, items: Iterable[Tuple[str, ProjectRecord]]) -> None:
        fresh = {key: copy.deepcopy(record) for key, record in items}
        with self._lock:
            self._records = fresh

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

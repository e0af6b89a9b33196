from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

from projects_api.domain.models import PACKAGE_NAME_FIELD, ProjectRecord, SaveOutcome
from projects_api.storage.cache import ProjectCache

logger = logging.getLogger(__name__)


def with_identity(key: str, record: ProjectRecord) -> ProjectRecord:
    """Return a copy of ``record`` whose ``packageName`` is the store key."""
    stored = dict(record)
    stored[PACKAGE_NAME_FIELD] = key
    return stored


class ProjectStore(ABC):
    """
    Abstract base class for project record storage.

    Reads are served from the in-memory cache. Writes update the cache first
    and then the durable backend; a durable failure is reported through
    SaveOutcome.CACHE_ONLY instead of an exception.
    """

    backend: str = "abstract"

    def __init__(self, cache: Optional[ProjectCache] = None):
        self.cache = cache if cache is not None else ProjectCache()
        self._connected = False

    @property
    def connected(self) -> bool:
        """Whether the durable backend was reachable at its last operation."""
        return self._connected

    @abstractmethod
    async def initialize(self) -> None:
        """Connect to the durable backend and seed the cache. Must not raise on unavailability."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        pass

    async def get(self, key: str) -> Optional[ProjectRecord]:
        record = self.cache.get(key)
        if record is None:
            record = await self._fetch(key)
            if record is not None:
                self.cache.set(key, record)
        return record

    async def get_all(self) -> Dict[str, ProjectRecord]:
        return self.cache.snapshot()

    async def put(self, key: str, record: ProjectRecord) -> SaveOutcome:
        stored = with_identity(key, record)
        try:
            self.cache.set(key, stored)
        except Exception as e:
            logger.error(f"Failed to cache project {key}: {e}", exc_info=True)
            return SaveOutcome.FAILED
        return await self._persist(key, stored)

    def count(self) -> int:
        return len(self.cache)

    async def _fetch(self, key: str) -> Optional[ProjectRecord]:
        """Read a record missing from the cache straight from the backend."""
        return None

    @abstractmethod
    async def _persist(self, key: str, record: ProjectRecord) -> SaveOutcome:
        """Write an already cached record to the durable backend."""
        pass

from typing import Mapping, Optional

from projects_api.domain.models import ProjectRecord, SaveOutcome
from projects_api.storage.base import ProjectStore, with_identity
from projects_api.storage.cache import ProjectCache


class MemoryProjectStore(ProjectStore):
    """Cache-only store for tests and throwaway local runs."""

    backend = "memory"

    def __init__(
        self,
        records: Optional[Mapping[str, ProjectRecord]] = None,
        cache: Optional[ProjectCache] = None,
    ):
        super().__init__(cache)
        if records:
            self.cache.replace_all(
                (key, with_identity(key, record)) for key, record in records.items()
            )

    async def initialize(self) -> None:
        self._connected = True

    async def _persist(self, key: str, record: ProjectRecord) -> SaveOutcome:
        return SaveOutcome.STORED

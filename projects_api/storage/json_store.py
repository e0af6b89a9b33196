import asyncio
import json
import os
from pathlib import Path
from typing import Optional
import logging

import aiofiles

from projects_api.domain.models import ProjectRecord, SaveOutcome
from projects_api.storage.base import ProjectStore, with_identity
from projects_api.storage.cache import ProjectCache

logger = logging.getLogger(__name__)


class JsonProjectStore(ProjectStore):
    """
    Keeps every record in a single pretty-printed JSON file.

    The file maps packageName -> record. Each write rewrites the whole file
    from the cache, through a temporary file that replaces the original.
    """

    backend = "json"

    def __init__(self, path: Path, cache: Optional[ProjectCache] = None):
        super().__init__(cache)
        self._path = path
        self._write_lock = asyncio.Lock()
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    async def initialize(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create data directory {self._path.parent}: {e}")
            self._connected = False
            return

        if not self._path.exists():
            logger.info(f"No project file at {self._path}, starting empty")
            self.cache.replace_all([])
            self._connected = True
            self._loaded = True
            return

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load project file {self._path}: {e}")
            self._connected = False
            return

        if not isinstance(raw, dict):
            logger.error(f"Project file {self._path} does not contain a JSON object; ignoring it")
            self._connected = False
            return

        records = []
        for key, record in raw.items():
            if not isinstance(record, dict):
                logger.warning(f"Skipping malformed project entry {key!r} in {self._path}")
                continue
            records.append((key, with_identity(key, record)))

        self.cache.replace_all(records)
        self._connected = True
        self._loaded = True
        logger.info(f"Loaded {len(records)} projects from {self._path}")

    async def _persist(self, key: str, record: ProjectRecord) -> SaveOutcome:
        if not self._loaded:
            # Never overwrite a file whose contents never made it into the cache.
            logger.error(f"Project {key} kept in memory only: {self._path} was not loaded")
            return SaveOutcome.CACHE_ONLY

        tmp_path = self._path.with_name(self._path.name + ".tmp")
        async with self._write_lock:
            payload = json.dumps(self.cache.snapshot(), indent=2, ensure_ascii=False)
            try:
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(payload)
                os.replace(tmp_path, self._path)
            except OSError as e:
                logger.error(f"Failed to save project {key} to {self._path}: {e}")
                self._connected = False
                return SaveOutcome.CACHE_ONLY

        self._connected = True
        logger.info(f"Project {key} saved")
        return SaveOutcome.STORED

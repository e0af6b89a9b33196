from typing import Any, Dict, Optional
import logging
import time

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from projects_api.domain.models import PACKAGE_NAME_FIELD, ProjectRecord, SaveOutcome
from projects_api.storage.base import ProjectStore
from projects_api.storage.cache import ProjectCache

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT_MS = 5000
SOCKET_TIMEOUT_MS = 30000
SERVER_SELECTION_TIMEOUT_MS = 5000

# Minimum delay between read attempts while the startup load is missing.
RETRY_INTERVAL_SECONDS = 30.0


def _to_record(document: Dict[str, Any]) -> ProjectRecord:
    record = dict(document)
    record.pop("_id", None)
    return record


class MongoProjectStore(ProjectStore):
    """
    Project records in a MongoDB collection, one document per record.

    Documents are looked up by their ``packageName`` field rather than by
    ``_id``. The whole collection is loaded into the cache at startup. When
    MongoDB is unreachable the store keeps serving and accepting writes from
    the cache only; reads retry the database at most once per
    ``retry_interval`` seconds until the full load succeeds.
    """

    backend = "mongo"

    def __init__(
        self,
        url: Optional[str],
        db_name: str = "projectsDB",
        collection_name: str = "projects",
        cache: Optional[ProjectCache] = None,
        client: Optional[Any] = None,
        retry_interval: float = RETRY_INTERVAL_SECONDS,
    ):
        super().__init__(cache)
        self._url = url
        self._db_name = db_name
        self._collection_name = collection_name
        self._client = client
        self._collection = None
        self._loaded = False
        self._retry_interval = retry_interval
        self._last_failure: Optional[float] = None

    async def initialize(self) -> None:
        if self._client is None:
            if not self._url:
                logger.error(
                    "No MongoDB connection configured (set MONGOPASSWORD or MONGO_URL); "
                    "projects will only be kept in memory"
                )
                return
            try:
                self._client = AsyncIOMotorClient(
                    self._url,
                    connectTimeoutMS=CONNECT_TIMEOUT_MS,
                    socketTimeoutMS=SOCKET_TIMEOUT_MS,
                    serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS,
                )
            except (PyMongoError, ValueError) as e:
                logger.error(
                    f"Invalid MongoDB connection settings, projects will only be kept in memory: {e}"
                )
                return

        db = self._client[self._db_name]
        self._collection = db[self._collection_name]

        logger.info("Connecting to MongoDB...")
        try:
            await db.command({"ping": 1})
        except PyMongoError as e:
            logger.error(f"MongoDB connection failed, continuing with in-memory cache: {e}")
            self._mark_failure()
            return

        logger.info("MongoDB connection established")
        await self._load()

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")
        self._client = None
        self._collection = None
        self._connected = False

    async def get_all(self) -> Dict[str, ProjectRecord]:
        if self._should_retry():
            await self._load()
        return await super().get_all()

    def _mark_failure(self) -> None:
        self._connected = False
        self._last_failure = time.monotonic()

    def _should_retry(self) -> bool:
        if self._loaded or self._collection is None:
            return False
        if self._last_failure is None:
            return True
        return time.monotonic() - self._last_failure >= self._retry_interval

    async def _load(self) -> None:
        try:
            documents = await self._collection.find({}).to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Failed to load projects from MongoDB: {e}")
            self._mark_failure()
            return

        records = []
        for document in documents:
            package_name = document.get(PACKAGE_NAME_FIELD)
            if not isinstance(package_name, str) or not package_name:
                logger.warning(
                    f"Skipping MongoDB document {document.get('_id')!r} with invalid packageName {package_name!r}"
                )
                continue
            records.append((package_name, _to_record(document)))

        # Writes accepted while degraded win over what the database holds.
        cached = self.cache.snapshot()
        merged = dict(records)
        merged.update(cached)

        self.cache.replace_all(merged.items())
        self._connected = True
        self._loaded = True
        self._last_failure = None
        logger.info(f"Loaded {len(records)} projects from MongoDB")

    async def _fetch(self, key: str) -> Optional[ProjectRecord]:
        if not self._should_retry():
            return None
        try:
            document = await self._collection.find_one({PACKAGE_NAME_FIELD: key})
        except PyMongoError as e:
            logger.error(f"Failed to read project {key} from MongoDB: {e}")
            self._mark_failure()
            return None
        self._connected = True
        self._last_failure = None
        return _to_record(document) if document else None

    async def _persist(self, key: str, record: ProjectRecord) -> SaveOutcome:
        if self._collection is None:
            logger.error(f"Project {key} kept in memory only: MongoDB is not configured")
            return SaveOutcome.CACHE_ONLY
        try:
            await self._collection.replace_one(
                {PACKAGE_NAME_FIELD: key},
                record,
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"Failed to save project {key}: {e}")
            self._mark_failure()
            return SaveOutcome.CACHE_ONLY

        self._connected = True
        logger.info(f"Project {key} saved")
        return SaveOutcome.STORED

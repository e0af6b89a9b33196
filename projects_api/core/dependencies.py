from typing import Optional

from fastapi import Request

from projects_api.core.config import Settings
from projects_api.services.geolocation import GeoLocator
from projects_api.storage.base import ProjectStore
from projects_api.storage.json_store import JsonProjectStore
from projects_api.storage.memory_store import MemoryProjectStore
from projects_api.storage.mongo_store import MongoProjectStore


def build_store(settings: Settings) -> ProjectStore:
    if settings.store_backend == "json":
        return JsonProjectStore(settings.projects_path)
    if settings.store_backend == "memory":
        return MemoryProjectStore()
    return MongoProjectStore(
        settings.mongo_url,
        db_name=settings.mongo_db,
        collection_name=settings.mongo_collection,
    )


def get_store(request: Request) -> ProjectStore:
    return request.app.state.store


def get_geolocator(request: Request) -> GeoLocator:
    return request.app.state.geolocator


def get_client_ip(request: Request) -> Optional[str]:
    """First address of ``x-forwarded-for``, or None when the header is absent or empty."""
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded:
        return None
    return forwarded.split(",")[0].strip() or None

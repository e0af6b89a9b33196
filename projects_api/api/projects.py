from __future__ import annotations

from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from projects_api.core.dependencies import get_client_ip, get_geolocator, get_store
from projects_api.domain.models import SaveOutcome
from projects_api.domain.visibility import is_exposed, needs_country
from projects_api.services.geolocation import GeoLocator
from projects_api.storage.base import ProjectStore

logger = logging.getLogger(__name__)
router = APIRouter()


# ---------------------------------------------------------------------------
# GET /p/all
# ---------------------------------------------------------------------------

@router.get("/p/all")
async def list_projects(store: ProjectStore = Depends(get_store)) -> dict:
    """Every stored project, keyed by package name."""
    return await store.get_all()


# ---------------------------------------------------------------------------
# GET /pp/{key}
# ---------------------------------------------------------------------------

@router.get("/pp/{key}")
async def get_project(key: str, store: ProjectStore = Depends(get_store)):
    record = await store.get(key)
    if record is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Project not found"},
        )
    return record


# ---------------------------------------------------------------------------
# GET /br/{key}
# ---------------------------------------------------------------------------

@router.get("/br/{key}")
async def get_project_for_region(
    key: str,
    client_ip: Optional[str] = Depends(get_client_ip),
    store: ProjectStore = Depends(get_store),
    geolocator: GeoLocator = Depends(get_geolocator),
) -> dict:
    """
    Region-gated lookup.

    Answers 200 in every case; a missing record and a hidden one both come
    back as ``{}`` so callers cannot probe which keys exist.
    """
    record = await store.get(key)
    if record is None:
        return {}

    country = None
    if needs_country(record):
        country = await geolocator.resolve_country(client_ip)

    if is_exposed(record, country):
        return record
    return {}


# ---------------------------------------------------------------------------
# POST /p/update/{key}
# ---------------------------------------------------------------------------

@router.post("/p/update/{key}")
async def update_project(
    key: str,
    data: Dict[str, Any] = Body(...),
    store: ProjectStore = Depends(get_store),
):
    """
    Create or replace a project.

    A write that only reached the in-memory cache still answers 200; the
    durable failure is logged by the store.
    """
    outcome = await store.put(key, data)
    if outcome is SaveOutcome.CACHE_ONLY:
        logger.warning(f"Project {key} accepted without durable storage")
    if not outcome.ok:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to save project"},
        )
    return {}

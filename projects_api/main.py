import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from projects_api.api.projects import router as projects_router
from projects_api.core.config import Settings
from projects_api.core.dependencies import build_store
from projects_api.domain.models import HealthStatus
from projects_api.services.geolocation import GeoLocator
from projects_api.storage.base import ProjectStore

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"
WELCOME_PAGE = "index.html"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ProjectStore] = None,
    geolocator: Optional[GeoLocator] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    The record store and the geolocation client are created from settings
    unless passed in; tests inject in-memory versions.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Projects API",
        version="0.1.0",
        description="Project records with region-gated visibility.",
    )
    app.state.settings = settings
    app.state.store = store if store is not None else build_store(settings)
    app.state.geolocator = geolocator if geolocator is not None else GeoLocator.from_settings(settings)

    has_welcome_page = (STATIC_DIR / WELCOME_PAGE).is_file()
    if has_welcome_page:
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.on_event("startup")
    async def startup_event() -> None:
        """
        Load the record store. An unreachable backend leaves the store in
        cache-only mode; the HTTP surface starts regardless.
        """
        project_store: ProjectStore = app.state.store
        await project_store.initialize()
        logger.info(
            f"Store '{project_store.backend}' ready with {project_store.count()} projects "
            f"(connected={project_store.connected})"
        )

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        logger.info("Shutting down...")
        await app.state.store.close()
        await app.state.geolocator.aclose()

    @app.get("/")
    async def index():
        if has_welcome_page:
            return RedirectResponse(url=f"/static/{WELCOME_PAGE}")
        return {
            "message": "",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/health", response_model=HealthStatus, response_model_by_alias=True)
    async def health() -> HealthStatus:
        """
        Lightweight health check endpoint.
        """
        project_store: ProjectStore = app.state.store
        return HealthStatus(
            status="ok" if project_store.connected else "degraded",
            store=project_store.backend,
            store_connected=project_store.connected,
            project_count=project_store.count(),
        )

    app.include_router(projects_router, tags=["projects"])
    return app


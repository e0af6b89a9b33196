from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import quote_plus

from pydantic import BaseModel, Field


_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"

STORE_BACKENDS = ("mongo", "json", "memory")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

PRO_GEOIP_HOST = "pro.ip-api.com"


class ConfigurationError(Exception):
    """Raised when the process environment cannot produce usable settings."""


class Settings(BaseModel):
    """
    Process configuration for the projects service.

    Built once from environment variables by ``Settings.from_env()``; tests
    construct it directly.
    """

    host: str = Field(default="0.0.0.0", description="Bind address for uvicorn.")
    port: int = Field(default=3000, ge=1, le=65535, description="Bind port for uvicorn.")
    log_level: str = Field(default="INFO", description="Root logging level.")

    store_backend: str = Field(
        default="mongo",
        description="Record store backend: 'mongo', 'json' or 'memory'.",
    )
    data_dir: Path = Field(
        default=_DEFAULT_DATA_DIR,
        description="Directory holding the JSON record file.",
    )
    projects_file: str = Field(default="projects.json", description="JSON record file name.")

    mongo_url: Optional[str] = Field(
        default=None,
        description="Resolved MongoDB connection string, or None when none is configured.",
    )
    mongo_db: str = Field(default="projectsDB")
    mongo_collection: str = Field(default="projects")

    geoip_url: str = Field(
        default=f"https://{PRO_GEOIP_HOST}/json",
        description="Base URL of the ip-api compatible lookup endpoint.",
    )
    geoip_api_key: Optional[str] = Field(default=None, repr=False)
    geoip_lang: str = Field(default="zh-CN")
    geoip_timeout: float = Field(default=5.0, gt=0)

    @property
    def projects_path(self) -> Path:
        return self.data_dir / self.projects_file

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Read settings from the environment.

        Malformed values raise ConfigurationError. A missing MongoDB
        connection is not an error here: the store runs cache-only.
        """
        env = os.environ if environ is None else environ

        backend = env.get("PROJECTS_STORE", "mongo").strip().lower()
        if backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"PROJECTS_STORE must be one of {', '.join(STORE_BACKENDS)}, got {backend!r}"
            )

        port = _parse_int(env, "PORT", 3000)
        if not 1 <= port <= 65535:
            raise ConfigurationError(f"PORT out of range: {port}")

        timeout = _parse_float(env, "GEOIP_TIMEOUT", 5.0)
        if timeout <= 0:
            raise ConfigurationError(f"GEOIP_TIMEOUT must be positive, got {timeout}")

        log_level = env.get("LOG_LEVEL", "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}"
            )

        data_dir = env.get("PROJECTS_DATA_DIR")

        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=port,
            log_level=log_level,
            store_backend=backend,
            data_dir=Path(data_dir).expanduser() if data_dir else _DEFAULT_DATA_DIR,
            projects_file=env.get("PROJECTS_FILE", "projects.json"),
            mongo_url=resolve_mongo_url(env),
            mongo_db=env.get("MONGO_DB", "projectsDB"),
            mongo_collection=env.get("MONGO_COLLECTION", "projects"),
            geoip_url=env.get("GEOIP_URL", f"https://{PRO_GEOIP_HOST}/json").rstrip("/"),
            geoip_api_key=env.get("GEOIP_API_KEY") or None,
            geoip_lang=env.get("GEOIP_LANG", "zh-CN"),
            geoip_timeout=timeout,
        )


def resolve_mongo_url(env: Mapping[str, str]) -> Optional[str]:
    """
    Build the MongoDB connection string.

    Priority:
    1. MONGOHOST / MONGOPORT / MONGOUSER / MONGOPASSWORD (internal network,
       only when a password is set)
    2. MONGO_URL
    """
    host = env.get("MONGOHOST") or "mongodb.railway.internal"
    port = env.get("MONGOPORT") or "27017"
    user = env.get("MONGOUSER") or "mongo"
    password = env.get("MONGOPASSWORD")

    if password:
        return f"mongodb://{quote_plus(user)}:{quote_plus(password)}@{host}:{port}"

    return env.get("MONGO_URL") or None


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None

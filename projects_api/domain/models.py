"""
Data models for the projects service.

Project records themselves are free-form JSON objects and are carried as
plain dictionaries (``ProjectRecord``). Only the fields the service
interprets are named here:

- ``packageName``: the store key
- ``code``: visibility code, ``"2"`` means visible
- ``ip``: region gate (absent, empty, or a country code)

The models below describe outcomes and API responses.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


ProjectRecord = Dict[str, Any]

PACKAGE_NAME_FIELD = "packageName"
CODE_FIELD = "code"
IP_FIELD = "ip"


class SaveOutcome(str, Enum):
    """
    Result of a record store write.

    CACHE_ONLY still counts as success for the HTTP layer: readers see the
    new record even though the durable write did not happen.
    """

    STORED = "stored"
    CACHE_ONLY = "cache_only"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is not SaveOutcome.FAILED


class VisibilityDecision(str, Enum):
    """Outcome of evaluating a record against a resolved client country."""

    EXPOSED = "exposed"
    HIDDEN_CODE = "hidden_code"
    REGION_MISMATCH = "region_mismatch"


class HealthStatus(BaseModel):
    """
    Response body of ``GET /health``.

    ``status`` is ``degraded`` while the durable store is unreachable; the
    service keeps answering from its cache in that state.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(description="'ok' or 'degraded'.")
    store: str = Field(description="Name of the record store backend.")
    store_connected: bool = Field(
        alias="storeConnected",
        description="Whether the durable store was reachable at its last operation.",
    )
    project_count: int = Field(
        alias="projectCount",
        description="Number of records currently held in the cache.",
    )

"""
Shared test fixtures: in-memory store, stub geolocation, FastAPI client.
"""

from __future__ import annotations

import asyncio
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from projects_api.core.config import Settings
from projects_api.main import create_app
from projects_api.storage.memory_store import MemoryProjectStore


class StubGeoLocator:
    """Maps IPs to countries from a dict; unknown IPs resolve to None."""

    def __init__(self, countries: Optional[Dict[str, str]] = None, fail: bool = False):
        self.countries = countries or {}
        self.fail = fail
        self.calls = []
        self.closed = False

    async def resolve_country(self, ip: Optional[str]) -> Optional[str]:
        self.calls.append(ip)
        if not ip or self.fail:
            return None
        return self.countries.get(ip)

    async def aclose(self) -> None:
        self.closed = True


BRAZIL_IP = "200.147.35.149"
GERMANY_IP = "85.214.132.117"
FRANCE_IP = "90.84.1.1"


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(store_backend="memory", data_dir=tmp_path)


@pytest.fixture
def geolocator() -> StubGeoLocator:
    return StubGeoLocator({BRAZIL_IP: "BR", GERMANY_IP: "DE", FRANCE_IP: "FR"})


@pytest.fixture
def store() -> MemoryProjectStore:
    return MemoryProjectStore()


@pytest.fixture
def client(settings, store, geolocator):
    app = create_app(settings, store=store, geolocator=geolocator)
    with TestClient(app) as test_client:
        yield test_client

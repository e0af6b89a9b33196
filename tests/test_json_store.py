"""
Tests for the JSON file record store.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from projects_api.domain.models import SaveOutcome
from projects_api.storage.json_store import JsonProjectStore
from tests.conftest import run


@pytest.fixture
def path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "projects.json"


class TestLoad:
    def test_missing_file_starts_empty(self, path: Path):
        store = JsonProjectStore(path)
        run(store.initialize())
        assert store.connected
        assert run(store.get_all()) == {}
        assert path.parent.is_dir()

    def test_loads_existing_records(self, path: Path):
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({
            "a": {"packageName": "a", "code": "2", "ip": ""},
            "b": {"code": "1", "extra": {"nested": [1, 2]}},
        }), encoding="utf-8")

        store = JsonProjectStore(path)
        run(store.initialize())

        assert store.count() == 2
        assert run(store.get("a")) == {"packageName": "a", "code": "2", "ip": ""}
        assert run(store.get("b")) == {"packageName": "b", "code": "1", "extra": {"nested": [1, 2]}}

    def test_skips_malformed_entries(self, path: Path):
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"a": {"code": "2"}, "b": "not a record"}), encoding="utf-8")

        store = JsonProjectStore(path)
        run(store.initialize())

        assert set(run(store.get_all())) == {"a"}

    def test_unreadable_file_degrades(self, path: Path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        store = JsonProjectStore(path)
        run(store.initialize())

        assert not store.connected
        assert run(store.get_all()) == {}


class TestPut:
    def test_put_persists_pretty_printed(self, path: Path):
        store = JsonProjectStore(path)
        run(store.initialize())

        outcome = run(store.put("a", {"code": "2", "name": "Ação"}))

        assert outcome is SaveOutcome.STORED
        text = path.read_text(encoding="utf-8")
        assert json.loads(text) == {"a": {"code": "2", "name": "Ação", "packageName": "a"}}
        assert '\n  "a": {' in text

    def test_put_replaces_wholesale(self, path: Path):
        store = JsonProjectStore(path)
        run(store.initialize())

        run(store.put("a", {"code": "2", "ip": "FR"}))
        run(store.put("a", {"code": "1"}))

        assert run(store.get("a")) == {"code": "1", "packageName": "a"}

    def test_records_survive_reload(self, path: Path):
        store = JsonProjectStore(path)
        run(store.initialize())
        run(store.put("a", {"code": "2"}))
        run(store.put("b", {"code": "1", "ip": ""}))

        reloaded = JsonProjectStore(path)
        run(reloaded.initialize())

        assert run(reloaded.get_all()) == run(store.get_all())

    def test_corrupt_file_is_never_overwritten(self, path: Path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        store = JsonProjectStore(path)
        run(store.initialize())

        outcome = run(store.put("a", {"code": "2"}))

        assert outcome is SaveOutcome.CACHE_ONLY
        assert run(store.get("a")) == {"code": "2", "packageName": "a"}
        assert path.read_text(encoding="utf-8") == "{not json"

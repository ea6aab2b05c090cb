"""Tests for the SQLite profile store."""

from pathlib import Path

import pytest

from learnplan.store.base import StoreError
from learnplan.store.sqlite import SQLiteProfileStore, path_from_url


@pytest.fixture
def store(tmp_path, fixed_clock):
    return SQLiteProfileStore(tmp_path / "db" / "profiles.db", clock=fixed_clock)


class TestPathFromUrl:
    def test_relative_and_absolute(self):
        assert path_from_url("sqlite:///db/profiles.db") == Path("db/profiles.db")
        assert path_from_url("sqlite:////var/lib/profiles.db") == Path("/var/lib/profiles.db")

    def test_rejects_other_urls(self):
        with pytest.raises(ValueError):
            path_from_url("postgresql://localhost/profiles")


class TestSQLiteProfileStore:
    """Tests for SQLiteProfileStore."""

    def test_creates_database_file(self, store):
        assert store.db_path.exists()

    def test_create_and_get(self, store, alex_data):
        record = store.create(alex_data)

        assert record["id"].startswith("db-")
        fetched = store.get(record["id"])
        assert fetched == record
        assert fetched["interests"] == "dinosaurs, space"

    def test_persists_across_instances(self, tmp_path, alex_data):
        path = tmp_path / "profiles.db"
        record = SQLiteProfileStore(path).create(alex_data)

        assert SQLiteProfileStore(path).get(record["id"])["name"] == "Alex"

    def test_update_unknown_id_creates_record(self, store):
        store.update("student-42", {"name": "Sam"})
        assert store.get("student-42")["name"] == "Sam"

    def test_update_keeps_created_at(self, tmp_path):
        times = iter(["t1", "t2"])
        store = SQLiteProfileStore(tmp_path / "p.db", clock=lambda: next(times))
        record = store.create({"name": "Sam"})

        updated = store.update(record["id"], {"name": "Sam", "grade": 3})

        assert updated["createdAt"] == "t1"
        assert store.get(record["id"])["updatedAt"] == "t2"

    def test_delete(self, store, alex_data):
        record = store.create(alex_data)
        assert store.delete(record["id"]) is True
        assert store.get(record["id"]) is None
        assert store.delete(record["id"]) is False

    def test_list_and_search(self, store):
        store.create({"name": "Alex"})
        store.create({"name": "Sam"})

        assert [s["name"] for s in store.list()] == ["Alex", "Sam"]
        assert [s["name"] for s in store.search("sA")] == ["Sam"]

    def test_search_treats_wildcards_literally(self, store):
        store.create({"name": "Alex"})
        store.create({"name": "Sam_100%"})

        assert [s["name"] for s in store.search("%")] == ["Sam_100%"]
        assert [s["name"] for s in store.search("_1")] == ["Sam_100%"]
        assert store.search("a_e") == []

    def test_unopenable_database_raises_store_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file")

        with pytest.raises(StoreError):
            SQLiteProfileStore(blocker / "profiles.db")

"""Tests for the Mem0 document store, against an in-process fake server."""

import json

import httpx
import pytest

from learnplan.config import StoreSettings
from learnplan.store.base import StoreError
from learnplan.store.remote import RemoteProfileStore


@pytest.fixture
def store(server, remote_settings, fixed_clock):
    return RemoteProfileStore(remote_settings, transport=httpx.MockTransport(server), clock=fixed_clock)


def _failing_store(settings, handler) -> RemoteProfileStore:
    return RemoteProfileStore(settings, transport=httpx.MockTransport(handler))


class TestRemoteProfileStore:
    """Tests for RemoteProfileStore."""

    def test_requires_key_and_collection(self):
        with pytest.raises(ValueError):
            RemoteProfileStore(StoreSettings(api_key="m0-key"))

    def test_create(self, store, server, alex_data):
        record = store.create(alex_data)

        assert record["id"] == "doc-1"
        request = server.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1/collections/c1/documents"
        assert request.headers["Authorization"] == "Bearer m0-key"
        body = json.loads(request.content)
        assert json.loads(body["content"])["name"] == "Alex"
        assert body["metadata"]["studentName"] == "Alex"
        assert body["metadata"]["diagnosis"] == "ADHD"

    def test_get(self, store, alex_data):
        record = store.create(alex_data)

        fetched = store.get(record["id"])

        assert fetched["id"] == "doc-1"
        assert fetched["name"] == "Alex"
        assert fetched["createdAt"] == "2025-01-06T09:00:00+00:00"

    def test_get_unknown(self, store):
        assert store.get("doc-404") is None

    def test_update_keeps_created_at(self, server, remote_settings, alex_data):
        times = iter(["t1", "t2"])
        store = RemoteProfileStore(
            remote_settings, transport=httpx.MockTransport(server), clock=lambda: next(times)
        )
        record = store.create(alex_data)

        updated = store.update(record["id"], {**record, "grade": 6})

        assert updated["createdAt"] == "t1"
        assert updated["updatedAt"] == "t2"
        assert store.get(record["id"])["grade"] == 6

    def test_update_unknown_id_raises(self, store):
        """Documents cannot be created under client-chosen ids."""
        with pytest.raises(StoreError):
            store.update("student-42", {"name": "Sam"})

    def test_delete(self, store, alex_data):
        record = store.create(alex_data)
        assert store.delete(record["id"]) is True
        assert store.delete(record["id"]) is False

    def test_list(self, store, server):
        store.create({"name": "Alex"})
        server.documents["doc-bad"] = {"id": "doc-bad", "content": "not json", "created_at": "t0"}

        summaries = store.list()

        assert summaries[0]["name"] == "Alex"
        assert summaries[1] == {"id": "doc-bad", "name": "Unknown Student", "createdAt": "t0"}

    def test_server_error_raises_store_error(self, remote_settings):
        store = _failing_store(remote_settings, lambda request: httpx.Response(500))
        with pytest.raises(StoreError, match="HTTP 500"):
            store.get("doc-1")

    def test_network_error_raises_store_error(self, remote_settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = _failing_store(remote_settings, handler)
        with pytest.raises(StoreError, match="unreachable"):
            store.create({"name": "Sam"})

    @pytest.mark.parametrize(
        "body",
        [{"text": "<html>gateway</html>"}, {"json": ["doc-1"]}],
    )
    def test_unexpected_body_raises_store_error(self, remote_settings, body):
        store = _failing_store(remote_settings, lambda request: httpx.Response(200, **body))

        with pytest.raises(StoreError):
            store.create({"name": "Sam"})
        with pytest.raises(StoreError):
            store.get("doc-1")
        with pytest.raises(StoreError):
            store.list()

    def test_list_skips_non_object_documents(self, remote_settings):
        store = _failing_store(
            remote_settings,
            lambda request: httpx.Response(
                200,
                json={"documents": ["oops", {"id": "doc-1", "content": json.dumps({"name": "Alex"})}]},
            ),
        )

        assert [s["name"] for s in store.list()] == ["Alex"]

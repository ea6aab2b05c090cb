"""Fixtures for profile store tests."""

import json

import httpx
import pytest

from learnplan.config import StoreSettings


class FakeDocumentServer:
    """Minimal document API: collections/{id}/documents and documents/{id}."""

    def __init__(self, collection_id: str):
        self.collection_id = collection_id
        self.documents: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        self._next_id = 1

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.removeprefix("/v1").strip("/").split("/")

        if parts[0] == "collections":
            if parts[1] != self.collection_id:
                return httpx.Response(404, json={"detail": "collection not found"})
            if request.method == "POST":
                doc_id = f"doc-{self._next_id}"
                self._next_id += 1
                self.documents[doc_id] = {"id": doc_id, **json.loads(request.content)}
                return httpx.Response(201, json={"id": doc_id})
            return httpx.Response(200, json={"documents": list(self.documents.values())})

        doc_id = parts[1]
        if doc_id not in self.documents:
            return httpx.Response(404, json={"detail": "not found"})
        if request.method == "GET":
            return httpx.Response(200, json=self.documents[doc_id])
        if request.method == "PUT":
            self.documents[doc_id].update(json.loads(request.content))
            return httpx.Response(200, json=self.documents[doc_id])
        del self.documents[doc_id]
        return httpx.Response(204)


@pytest.fixture
def remote_settings() -> StoreSettings:
    return StoreSettings(api_key="m0-key", collection_id="c1")


@pytest.fixture
def server(remote_settings) -> FakeDocumentServer:
    return FakeDocumentServer(remote_settings.collection_id)

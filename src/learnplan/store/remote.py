"""Profile store backed by the Mem0 document API.

Each profile is one document in a collection: the full record is stored as
a JSON string in ``content`` and a few searchable fields in ``metadata``.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from learnplan.config import StoreSettings
from learnplan.store.base import ProfileStore, Record, StoreError, summarize

logger = structlog.get_logger(__name__)


def _metadata(record: Record) -> dict[str, Any]:
    return {
        "studentName": record.get("name"),
        "studentAge": record.get("age"),
        "studentGrade": record.get("grade"),
        "diagnosis": record.get("diagnosis"),
        "lastUpdated": record.get("updatedAt"),
    }


class RemoteProfileStore(ProfileStore):
    """Mem0 collection store. Every failure raises ``StoreError``."""

    backend = "remote"

    def __init__(
        self,
        settings: StoreSettings,
        transport: httpx.BaseTransport | None = None,
        clock=None,
    ):
        """Initialize the remote store.

        Args:
            settings: Store settings (API key and collection id required)
            transport: Optional httpx transport (used by tests)
            clock: Timestamp provider
        """
        super().__init__(clock)
        if not settings.remote_configured:
            raise ValueError("Remote store requires an API key and a collection id")
        self.settings = settings
        self._client = httpx.Client(
            base_url=settings.base_url,
            timeout=settings.timeout,
            headers={"Authorization": f"Bearer {settings.api_key}"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response | None:
        """Send a request; returns None on 404.

        Raises:
            StoreError: On network errors or any other non-2xx status
        """
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"Document store unreachable: {e}") from e

        if response.status_code == 404:
            return None
        if response.is_error:
            raise StoreError(f"Document store returned HTTP {response.status_code} for {method} {path}")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        """Decoded JSON object body.

        Raises:
            StoreError: If the body is not JSON or not an object
        """
        try:
            body = response.json()
        except ValueError as e:
            raise StoreError(f"Document store returned a non-JSON body for {response.request.url.path}") from e
        if not isinstance(body, dict):
            raise StoreError(f"Document store returned an unexpected body for {response.request.url.path}")
        return body

    @staticmethod
    def _decode(document: dict[str, Any]) -> Record:
        try:
            record = json.loads(document.get("content") or "{}")
        except (TypeError, ValueError) as e:
            raise StoreError(f"Invalid document content for {document.get('id')}") from e
        if not isinstance(record, dict):
            raise StoreError(f"Invalid document content for {document.get('id')}")
        record["id"] = document.get("id", record.get("id"))
        return record

    def create(self, data: Record) -> Record:
        record = self._stamp(data, "")
        record.pop("id")
        response = self._request(
            "POST",
            f"/collections/{self.settings.collection_id}/documents",
            json={"content": json.dumps(record), "metadata": _metadata(record)},
        )
        if response is None:
            raise StoreError(f"Collection not found: {self.settings.collection_id}")
        record["id"] = self._json(response).get("id")
        if not record["id"]:
            raise StoreError("Document store did not return an id")
        logger.info("remote_store_created", profile_id=record["id"])
        return record

    def get(self, profile_id: str) -> Record | None:
        response = self._request("GET", f"/documents/{profile_id}")
        if response is None:
            return None
        return self._decode(self._json(response))

    def update(self, profile_id: str, data: Record) -> Record:
        existing = self.get(profile_id)
        record = self._stamp(data, profile_id, existing)
        response = self._request(
            "PUT",
            f"/documents/{profile_id}",
            json={"content": json.dumps(record), "metadata": _metadata(record)},
        )
        if response is None:
            # Documents can only be created under server-assigned ids
            raise StoreError(f"Document {profile_id} does not exist in the remote store")
        logger.info("remote_store_updated", profile_id=profile_id)
        return record

    def delete(self, profile_id: str) -> bool:
        return self._request("DELETE", f"/documents/{profile_id}") is not None

    def list(self) -> list[Record]:
        response = self._request("GET", f"/collections/{self.settings.collection_id}/documents")
        if response is None:
            return []
        summaries = []
        documents = self._json(response).get("documents") or []
        if not isinstance(documents, list):
            raise StoreError("Document store returned an unexpected document list")
        for document in documents:
            if not isinstance(document, dict):
                logger.warning("remote_store_bad_document", document=str(document)[:80])
                continue
            try:
                summaries.append(summarize(self._decode(document)))
            except StoreError:
                logger.warning("remote_store_bad_document", document_id=document.get("id"))
                summaries.append(
                    {"id": document.get("id"), "name": "Unknown Student", "createdAt": document.get("created_at")}
                )
        return summaries

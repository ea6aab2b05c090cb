"""Profile store interface.

A store persists whole student profile records (camelCase dictionaries as
sent by the UI). Implementations differ only in where records live; the
semantics below are shared:

- ``create`` assigns a new id.
- ``update`` is an upsert: an unknown id materializes a new record under
  that id.
- ``delete`` of an unknown id is a no-op.
- Every write stamps ``updatedAt``; ``createdAt`` is set once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from learnplan.core.models import utc_now_iso
from learnplan.errors import UpstreamError

Record = dict[str, Any]

SUMMARY_FIELDS = ("id", "name", "age", "grade", "diagnosis", "createdAt", "updatedAt")


class StoreError(UpstreamError):
    """The backing store failed (network, HTTP status or database error)."""

    pass


def summarize(record: Record) -> Record:
    """Listing view of a profile record."""
    return {key: record.get(key) for key in SUMMARY_FIELDS}


class ProfileStore(ABC):
    """Upsert/get/list/delete over student profile records."""

    backend: str = "unknown"

    def __init__(self, clock: Callable[[], str] | None = None):
        self._clock = clock or utc_now_iso

    def _stamp(self, data: Record, profile_id: str, existing: Record | None = None) -> Record:
        """Copy of ``data`` with id and timestamps applied."""
        record = dict(data)
        now = self._clock()
        record["id"] = profile_id
        record["createdAt"] = (existing or {}).get("createdAt") or record.get("createdAt") or now
        record["updatedAt"] = now
        return record

    @abstractmethod
    def create(self, data: Record) -> Record:
        """Store a new profile and return it with its assigned id."""

    @abstractmethod
    def get(self, profile_id: str) -> Record | None:
        """Return the profile, or None if unknown."""

    @abstractmethod
    def update(self, profile_id: str, data: Record) -> Record:
        """Replace (or create) the profile stored under ``profile_id``."""

    @abstractmethod
    def delete(self, profile_id: str) -> bool:
        """Delete a profile. Returns False if it did not exist."""

    @abstractmethod
    def list(self) -> list[Record]:
        """Summaries of all stored profiles."""

    def search(self, name: str) -> list[Record]:
        """Summaries whose name contains ``name`` (case-insensitive)."""
        needle = (name or "").strip().lower()
        return [s for s in self.list() if needle in str(s.get("name") or "").lower()]

    def close(self) -> None:
        """Release network clients or connections held by the store."""

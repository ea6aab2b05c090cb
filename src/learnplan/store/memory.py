"""Process-local profile store.

Used in mock mode and as the failover target of the persistent stores. Each
instance owns its records; concurrent writes to one id are last-write-wins.
"""

from __future__ import annotations

import copy
import uuid

import structlog

from learnplan.store.base import ProfileStore, Record, summarize

logger = structlog.get_logger(__name__)


class InMemoryProfileStore(ProfileStore):
    backend = "memory"

    def __init__(self, clock=None):
        super().__init__(clock)
        self._records: dict[str, Record] = {}

    def create(self, data: Record) -> Record:
        profile_id = f"mem-{uuid.uuid4().hex[:12]}"
        record = self._stamp(data, profile_id)
        self._records[profile_id] = record
        logger.debug("memory_store_created", profile_id=profile_id)
        return copy.deepcopy(record)

    def get(self, profile_id: str) -> Record | None:
        record = self._records.get(profile_id)
        return copy.deepcopy(record) if record is not None else None

    def update(self, profile_id: str, data: Record) -> Record:
        existing = self._records.get(profile_id)
        record = self._stamp(data, profile_id, existing)
        self._records[profile_id] = record
        logger.debug("memory_store_updated", profile_id=profile_id, created=existing is None)
        return copy.deepcopy(record)

    def delete(self, profile_id: str) -> bool:
        return self._records.pop(profile_id, None) is not None

    def list(self) -> list[Record]:
        return [summarize(r) for r in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)

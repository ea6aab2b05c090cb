"""Primary store with in-memory failover.

Any ``StoreError`` from the primary store is logged and the operation is
repeated on the in-memory store, so profile operations keep working (without
durability) while the primary is unavailable.
"""

from __future__ import annotations

from typing import Callable, TypeVar

import structlog

from learnplan.store.base import ProfileStore, Record, StoreError
from learnplan.store.memory import InMemoryProfileStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class FailoverProfileStore(ProfileStore):
    def __init__(self, primary: ProfileStore, fallback: InMemoryProfileStore | None = None):
        super().__init__()
        self.primary = primary
        self.fallback = fallback if fallback is not None else InMemoryProfileStore()
        self.backend = f"{primary.backend}+memory"

    def _call(self, operation: str, primary: Callable[[], T], fallback: Callable[[], T]) -> T:
        try:
            return primary()
        except StoreError as e:
            logger.warning(
                "store_failover",
                operation=operation,
                backend=self.primary.backend,
                error=str(e),
            )
            return fallback()

    def create(self, data: Record) -> Record:
        return self._call(
            "create", lambda: self.primary.create(data), lambda: self.fallback.create(data)
        )

    def get(self, profile_id: str) -> Record | None:
        record = self._call(
            "get", lambda: self.primary.get(profile_id), lambda: None
        )
        if record is None:
            # May have been written while the primary was down
            record = self.fallback.get(profile_id)
        return record

    def update(self, profile_id: str, data: Record) -> Record:
        if self.fallback.get(profile_id) is not None:
            return self.fallback.update(profile_id, data)
        return self._call(
            "update",
            lambda: self.primary.update(profile_id, data),
            lambda: self.fallback.update(profile_id, data),
        )

    def delete(self, profile_id: str) -> bool:
        deleted_fallback = self.fallback.delete(profile_id)
        deleted_primary = self._call(
            "delete", lambda: self.primary.delete(profile_id), lambda: False
        )
        return deleted_primary or deleted_fallback

    def list(self) -> list[Record]:
        summaries = self._call("list", self.primary.list, list)
        seen = {s.get("id") for s in summaries}
        summaries.extend(s for s in self.fallback.list() if s.get("id") not in seen)
        return summaries

    def close(self) -> None:
        self.primary.close()
        self.fallback.close()

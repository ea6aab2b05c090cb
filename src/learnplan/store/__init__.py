"""Student profile persistence."""

from learnplan.store.base import ProfileStore, StoreError, summarize
from learnplan.store.factory import create_profile_store
from learnplan.store.failover import FailoverProfileStore
from learnplan.store.memory import InMemoryProfileStore
from learnplan.store.remote import RemoteProfileStore
from learnplan.store.sqlite import SQLiteProfileStore

__all__ = [
    "FailoverProfileStore",
    "InMemoryProfileStore",
    "ProfileStore",
    "RemoteProfileStore",
    "SQLiteProfileStore",
    "StoreError",
    "create_profile_store",
    "summarize",
]

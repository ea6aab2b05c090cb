"""Select the profile store from configuration."""

from __future__ import annotations

import structlog

from learnplan.config import AppConfig
from learnplan.store.base import ProfileStore
from learnplan.store.failover import FailoverProfileStore
from learnplan.store.memory import InMemoryProfileStore
from learnplan.store.remote import RemoteProfileStore
from learnplan.store.sqlite import SQLITE_PREFIX, SQLiteProfileStore, path_from_url

logger = structlog.get_logger(__name__)


def create_profile_store(config: AppConfig) -> ProfileStore:
    """Build the store for this process.

    Order: mock mode -> in-memory; Mem0 key + collection -> remote with
    in-memory failover; ``sqlite:///`` database URL -> SQLite with in-memory
    failover; otherwise in-memory.
    """
    if config.mock_mode:
        store: ProfileStore = InMemoryProfileStore()
    elif config.store.remote_configured:
        store = FailoverProfileStore(RemoteProfileStore(config.store))
    elif config.store.database_url and config.store.database_url.startswith(SQLITE_PREFIX):
        store = FailoverProfileStore(SQLiteProfileStore(path_from_url(config.store.database_url)))
    else:
        if config.store.database_url:
            logger.warning("unsupported_database_url", url=config.store.database_url)
        store = InMemoryProfileStore()

    logger.info("profile_store_selected", backend=store.backend)
    return store

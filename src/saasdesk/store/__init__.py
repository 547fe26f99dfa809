"""
Data store backends.

The billing services depend on the repository interfaces only; the backend
is chosen by ``STORE__BACKEND`` (``memory`` or ``sql``).
"""

import structlog

from saasdesk.settings import Settings, get_settings
from saasdesk.store.interfaces import (
    DataStore,
    EmailContentRepository,
    PlanRepository,
    SubscriptionRepository,
    UserRepository,
)
from saasdesk.store.memory import InMemoryDataStore
from saasdesk.store.seed import SeedData, build_seed_data

logger = structlog.get_logger(__name__)


async def create_data_store(settings: Settings | None = None) -> DataStore:
    """Build and initialize the configured store backend."""
    settings = settings or get_settings()
    seed = build_seed_data() if settings.store.seed_mock_data else None

    if settings.store.backend == "sql":
        from saasdesk.db import create_engine_from_settings
        from saasdesk.store.sql import SQLDataStore

        store = SQLDataStore(create_engine_from_settings(settings.store.database_url))
        await store.initialize(seed)
        logger.info("store.initialized", backend="sql")
        return store

    logger.info("store.initialized", backend="memory", seeded=seed is not None)
    return InMemoryDataStore(seed)


__all__ = [
    "DataStore",
    "UserRepository",
    "PlanRepository",
    "SubscriptionRepository",
    "EmailContentRepository",
    "InMemoryDataStore",
    "SeedData",
    "build_seed_data",
    "create_data_store",
]

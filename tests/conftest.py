"""
Global pytest configuration and fixtures for SaaSDesk tests.
"""

import os
from datetime import UTC, datetime

import pytest

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("OBSERVABILITY__LOG_FORMAT", "text")
os.environ.setdefault("STORE__BACKEND", "memory")

from saasdesk.billing.config import BillingConfig, reset_billing_config  # noqa: E402
from saasdesk.billing.subscriptions.service import SubscriptionManager  # noqa: E402
from saasdesk.communications.email_service import OutboxEmailSender  # noqa: E402
from saasdesk.settings import reset_settings  # noqa: E402
from saasdesk.store.memory import InMemoryDataStore  # noqa: E402
from saasdesk.store.seed import build_seed_data  # noqa: E402

FIXED_NOW = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)
DASHBOARD_URL = "https://app.example.com/subscriber"


@pytest.fixture(autouse=True)
def _reset_config():
    """Drop cached settings so environment tweaks in a test stay local."""
    reset_settings()
    reset_billing_config()
    yield
    reset_settings()
    reset_billing_config()


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    """Clock returning a fixed instant."""
    return lambda: fixed_now


@pytest.fixture
def seed(fixed_now):
    return build_seed_data(fixed_now)


@pytest.fixture
def store(seed) -> InMemoryDataStore:
    return InMemoryDataStore(seed)


@pytest.fixture
def billing_config() -> BillingConfig:
    return BillingConfig()


@pytest.fixture
def email_sender(store) -> OutboxEmailSender:
    return OutboxEmailSender(store)


@pytest.fixture
def manager(store, email_sender, billing_config, clock) -> SubscriptionManager:
    return SubscriptionManager(
        users=store,
        plans=store,
        subscriptions=store,
        email_sender=email_sender,
        config=billing_config,
        clock=clock,
        dashboard_url=DASHBOARD_URL,
    )

"""
FastAPI dependencies.

The data store and email sender are created once in the application
lifespan and kept on ``app.state``; services are built per request on top
of them.
"""

from typing import Annotated

from fastapi import Depends, Request

from saasdesk.billing.config import BillingConfig, get_billing_config
from saasdesk.billing.dashboard import DashboardService
from saasdesk.billing.subscriptions.service import SubscriptionManager
from saasdesk.communications.email_service import EmailSender
from saasdesk.settings import get_settings
from saasdesk.store.interfaces import DataStore


def get_data_store(request: Request) -> DataStore:
    """Data store created at startup."""
    return request.app.state.data_store


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_subscription_manager(
    store: Annotated[DataStore, Depends(get_data_store)],
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
    config: Annotated[BillingConfig, Depends(get_billing_config)],
) -> SubscriptionManager:
    """Dependency to get SubscriptionManager instance."""
    return SubscriptionManager(
        users=store,
        plans=store,
        subscriptions=store,
        email_sender=email_sender,
        config=config,
        dashboard_url=get_settings().email.dashboard_url,
    )


def get_dashboard_service(
    store: Annotated[DataStore, Depends(get_data_store)],
) -> DashboardService:
    return DashboardService(users=store, subscriptions=store)


__all__ = [
    "get_dashboard_service",
    "get_data_store",
    "get_email_sender",
    "get_subscription_manager",
]

"""
Centralized router registration for all API endpoints.
"""

import importlib
from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from fastapi import FastAPI

from saasdesk.settings import get_settings

logger = structlog.get_logger(__name__)


@dataclass
class RouterConfig:
    """Configuration for a router to be registered."""

    module_path: str
    router_name: str = "router"
    tags: Sequence[str] | None = None
    description: str = ""


ROUTER_CONFIGS = [
    RouterConfig(
        module_path="saasdesk.billing.subscriptions.router",
        description="Subscription creation and lifecycle",
    ),
    RouterConfig(
        module_path="saasdesk.billing.router",
        description="Plans, invoices, transactions and dashboard figures",
    ),
    RouterConfig(
        module_path="saasdesk.users.router",
        description="Users and subscriber billing summaries",
    ),
    RouterConfig(
        module_path="saasdesk.communications.router",
        description="Email templates and campaigns",
    ),
]


def register_routers(app: FastAPI, prefix: str | None = None) -> None:
    """Register all API routers under the API prefix."""
    prefix = prefix if prefix is not None else get_settings().api_prefix

    for config in ROUTER_CONFIGS:
        module = importlib.import_module(config.module_path)
        router = getattr(module, config.router_name)
        if config.tags:
            app.include_router(router, prefix=prefix, tags=list(config.tags))
        else:
            app.include_router(router, prefix=prefix)
        logger.debug("router.registered", module=config.module_path, prefix=prefix)

    logger.info("routers.registered", count=len(ROUTER_CONFIGS), prefix=prefix)


__all__ = ["ROUTER_CONFIGS", "RouterConfig", "register_routers"]

#!/usr/bin/env python
"""
CLI management commands for SaaSDesk.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import click

from saasdesk.billing.config import get_billing_config
from saasdesk.billing.dashboard import DashboardService
from saasdesk.billing.money_utils import format_amount
from saasdesk.billing.subscriptions.models import PaymentMethod, SubscriptionRequest
from saasdesk.billing.subscriptions.service import SubscriptionManager
from saasdesk.communications.email_service import EmailSender, get_email_sender
from saasdesk.logging import setup_logging
from saasdesk.settings import get_settings
from saasdesk.store import create_data_store
from saasdesk.store.interfaces import DataStore


@dataclass
class CLIDependencies:
    """Bundle of injectable dependencies used by CLI commands."""

    store_factory: Callable[[], Awaitable[DataStore]]
    email_sender_factory: Callable[[DataStore], EmailSender]
    server_runner: Callable[..., Any]


def _get_cli_dependencies() -> CLIDependencies:
    """Return the default dependency bundle for CLI commands."""
    import uvicorn

    return CLIDependencies(
        store_factory=create_data_store,
        email_sender_factory=get_email_sender,
        server_runner=uvicorn.run,
    )


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """SaaSDesk CLI."""
    setup_logging()
    ctx.ensure_object(dict)
    ctx.obj.setdefault("deps", None)


def _deps(ctx: click.Context) -> CLIDependencies:
    deps = ctx.obj.get("deps") if ctx.obj else None
    return deps or _get_cli_dependencies()


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST setting)")
@click.option("--port", type=int, default=None, help="Bind port (defaults to PORT setting)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API."""
    settings = get_settings()
    _deps(ctx).server_runner(
        "saasdesk.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command()
@click.pass_context
def plans(ctx: click.Context) -> None:
    """List subscription plans."""
    deps = _deps(ctx)

    async def _plans() -> None:
        store = await deps.store_factory()
        try:
            locale = get_billing_config().locale
            for plan in await store.get_plans():
                trial = f"{plan.trial_days}-day trial" if plan.trial_days else "no trial"
                click.echo(
                    f"{plan.id}\t{plan.name}\t"
                    f"{format_amount(plan.price, plan.currency, locale)}/"
                    f"{plan.billing_period.value.lower()}\t{trial}"
                )
        finally:
            await store.close()

    asyncio.run(_plans())


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Print dashboard figures as JSON."""
    deps = _deps(ctx)

    async def _stats() -> None:
        store = await deps.store_factory()
        try:
            figures = await DashboardService(users=store, subscriptions=store).get_stats()
            click.echo(json.dumps(figures.model_dump(mode="json"), indent=2))
        finally:
            await store.close()

    asyncio.run(_stats())


@cli.command()
@click.option("--user", "user_id", required=True, help="Subscriber user ID")
@click.option("--plan", "plan_id", required=True, help="Plan ID")
@click.option(
    "--payment-method",
    type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
    default=PaymentMethod.CARD.value,
    show_default=True,
)
@click.option("--trial/--no-trial", default=False, help="Start with the plan's trial")
@click.option("--requires-payment/--no-payment", default=True, show_default=True)
@click.pass_context
def subscribe(
    ctx: click.Context,
    user_id: str,
    plan_id: str,
    payment_method: str,
    trial: bool,
    requires_payment: bool,
) -> None:
    """Create a subscription and print the result as JSON."""
    deps = _deps(ctx)

    async def _subscribe() -> bool:
        store = await deps.store_factory()
        try:
            manager = SubscriptionManager(
                users=store,
                plans=store,
                subscriptions=store,
                email_sender=deps.email_sender_factory(store),
                config=get_billing_config(),
                dashboard_url=get_settings().email.dashboard_url,
            )
            result = await manager.create_subscription(
                SubscriptionRequest(
                    user_id=user_id,
                    plan_id=plan_id,
                    payment_method=PaymentMethod(payment_method.upper()),
                    requires_payment=requires_payment,
                    has_trial_period=trial,
                )
            )
        finally:
            await store.close()
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return result.success

    if not asyncio.run(_subscribe()):
        ctx.exit(1)


if __name__ == "__main__":
    cli()

"""
Dashboard and billing summary figures.

Computed on demand from the store; nothing is cached.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import structlog

from saasdesk.billing.subscriptions.models import (
    BillingSummary,
    DashboardStats,
    Subscription,
    SubscriptionStatus,
    TransactionStatus,
)
from saasdesk.store.interfaces import SubscriptionRepository, UserRepository

logger = structlog.get_logger(__name__)

GROWTH_WINDOW = timedelta(days=30)


def _growth_percent(current: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


def _trial_expired(subscription: Subscription, now: datetime) -> bool:
    if subscription.trial_end_date is None:
        return False
    if subscription.status == SubscriptionStatus.EXPIRED:
        return True
    return subscription.status == SubscriptionStatus.TRIALING and subscription.trial_end_date <= now


class DashboardService:
    """Aggregates for the admin dashboard and the subscriber billing page."""

    def __init__(
        self,
        users: UserRepository,
        subscriptions: SubscriptionRepository,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._users = users
        self._subscriptions = subscriptions
        self._clock = clock

    async def get_stats(self) -> DashboardStats:
        now = self._clock()
        users = await self._users.get_users()
        subscriptions = await self._subscriptions.get_subscriptions()
        transactions = await self._subscriptions.get_transactions()

        recent = sum(1 for s in subscriptions if s.created_at > now - GROWTH_WINDOW)
        earlier = sum(
            1
            for s in subscriptions
            if now - 2 * GROWTH_WINDOW < s.created_at <= now - GROWTH_WINDOW
        )

        stats = DashboardStats(
            total_users=len(users),
            active_subscriptions=sum(
                1 for s in subscriptions if s.status == SubscriptionStatus.ACTIVE
            ),
            total_revenue=sum(
                (t.amount for t in transactions if t.status == TransactionStatus.COMPLETED),
                Decimal("0"),
            ),
            monthly_growth=_growth_percent(recent, earlier),
            pending_transactions=sum(
                1 for t in transactions if t.status == TransactionStatus.PENDING
            ),
            expired_trials=sum(1 for s in subscriptions if _trial_expired(s, now)),
        )
        logger.debug("dashboard.stats.computed", **stats.model_dump(mode="json"))
        return stats

    async def get_billing_summary(self, user_id: str) -> BillingSummary:
        """Paid and pending totals across a subscriber's subscriptions."""
        subscriptions = await self._subscriptions.get_subscriptions(user_id=user_id)

        invoices = []
        transactions = []
        for subscription in subscriptions:
            invoices.extend(await self._subscriptions.get_invoices(subscription.id))
            transactions.extend(await self._subscriptions.get_transactions(subscription.id))

        current = next((s for s in subscriptions if s.is_current), None)

        return BillingSummary(
            user_id=user_id,
            current_subscription=current,
            total_paid=sum(
                (t.amount for t in transactions if t.status == TransactionStatus.COMPLETED),
                Decimal("0"),
            ),
            total_pending=sum(
                (t.amount for t in transactions if t.status == TransactionStatus.PENDING),
                Decimal("0"),
            ),
            invoices=sorted(invoices, key=lambda i: i.created_at, reverse=True),
            transactions=sorted(transactions, key=lambda t: t.transaction_date, reverse=True),
        )

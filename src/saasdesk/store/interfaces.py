"""Data store interfaces consumed by the billing services."""

from abc import ABC, abstractmethod

from saasdesk.billing.subscriptions.models import (
    Invoice,
    Plan,
    Subscription,
    SubscriptionEvent,
    Transaction,
)
from saasdesk.communications.models import EmailCampaign, EmailTemplate
from saasdesk.users.models import User


class UserRepository(ABC):
    """Read access to user accounts."""

    @abstractmethod
    async def get_users(self) -> list[User]:
        """Return all users, newest first."""

    @abstractmethod
    async def get_user(self, user_id: str) -> User | None:
        """Return a user or None."""


class PlanRepository(ABC):
    """Read access to subscription plans."""

    @abstractmethod
    async def get_plans(self) -> list[Plan]:
        """Return all plans, newest first."""

    @abstractmethod
    async def get_plan(self, plan_id: str) -> Plan | None:
        """Return a plan or None."""


class SubscriptionRepository(ABC):
    """Storage for subscriptions and their billing records."""

    @abstractmethod
    async def get_subscriptions(self, user_id: str | None = None) -> list[Subscription]:
        """Return subscriptions, optionally for one user, newest first."""

    @abstractmethod
    async def get_subscription(self, subscription_id: str) -> Subscription | None:
        """Return a subscription or None."""

    @abstractmethod
    async def insert_subscription(self, subscription: Subscription) -> Subscription:
        """Store a new subscription."""

    @abstractmethod
    async def insert_subscription_records(
        self,
        subscription: Subscription,
        invoice: Invoice,
        transaction: Transaction,
        event: SubscriptionEvent,
    ) -> None:
        """Store a new subscription with its first invoice, transaction and event.

        All four records are written or none are.
        """

    @abstractmethod
    async def update_subscription(self, subscription: Subscription) -> Subscription:
        """Replace a stored subscription with a new version."""

    @abstractmethod
    async def get_invoices(self, subscription_id: str | None = None) -> list[Invoice]:
        """Return invoices, optionally for one subscription."""

    @abstractmethod
    async def insert_invoice(self, invoice: Invoice) -> Invoice:
        """Store a new invoice."""

    @abstractmethod
    async def update_invoice(self, invoice: Invoice) -> Invoice:
        """Replace a stored invoice with a new version."""

    @abstractmethod
    async def get_transactions(self, subscription_id: str | None = None) -> list[Transaction]:
        """Return transactions, optionally for one subscription."""

    @abstractmethod
    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        """Store a new transaction."""

    @abstractmethod
    async def update_transaction(self, transaction: Transaction) -> Transaction:
        """Replace a stored transaction with a new version."""

    @abstractmethod
    async def insert_event(self, event: SubscriptionEvent) -> SubscriptionEvent:
        """Append an audit event."""

    @abstractmethod
    async def get_events(self, subscription_id: str) -> list[SubscriptionEvent]:
        """Return audit events for a subscription, oldest first."""


class EmailContentRepository(ABC):
    """Read access to email templates and campaigns."""

    @abstractmethod
    async def get_email_templates(self) -> list[EmailTemplate]:
        """Return all email templates."""

    @abstractmethod
    async def get_email_template_by_name(self, name: str) -> EmailTemplate | None:
        """Return the active template with this name, or None."""

    @abstractmethod
    async def get_email_campaigns(self) -> list[EmailCampaign]:
        """Return all email campaigns."""


class DataStore(UserRepository, PlanRepository, SubscriptionRepository, EmailContentRepository):
    """A backend that satisfies every repository interface."""

    async def close(self) -> None:  # noqa: B027
        """Release backend resources."""

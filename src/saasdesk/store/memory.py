"""In-process data store used for development, demos and tests."""

import asyncio
from typing import TypeVar

import structlog

from saasdesk.billing.subscriptions.models import (
    Invoice,
    Plan,
    Subscription,
    SubscriptionEvent,
    Transaction,
)
from saasdesk.communications.models import EmailCampaign, EmailTemplate
from saasdesk.domain import DuplicateEntityError, EntityNotFoundError
from saasdesk.store.interfaces import DataStore
from saasdesk.store.seed import SeedData, build_seed_data
from saasdesk.users.models import User

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", Subscription, Invoice, Transaction)


def _newest_first(records: list) -> list:
    return sorted(records, key=lambda r: r.created_at, reverse=True)


class InMemoryDataStore(DataStore):
    """Dict-backed store. Records are immutable, updates replace them."""

    def __init__(self, seed: SeedData | None = None) -> None:
        seed = seed or SeedData()
        self._lock = asyncio.Lock()
        self._users: dict[str, User] = {u.id: u for u in seed.users}
        self._plans: dict[str, Plan] = {p.id: p for p in seed.plans}
        self._subscriptions: dict[str, Subscription] = {s.id: s for s in seed.subscriptions}
        self._invoices: dict[str, Invoice] = {i.id: i for i in seed.invoices}
        self._transactions: dict[str, Transaction] = {t.id: t for t in seed.transactions}
        self._events: list[SubscriptionEvent] = []
        self._templates: dict[str, EmailTemplate] = {t.id: t for t in seed.email_templates}
        self._campaigns: dict[str, EmailCampaign] = {c.id: c for c in seed.email_campaigns}

    @classmethod
    def with_demo_data(cls) -> "InMemoryDataStore":
        store = cls(build_seed_data())
        logger.info(
            "store.memory.seeded",
            users=len(store._users),
            plans=len(store._plans),
            subscriptions=len(store._subscriptions),
        )
        return store

    # Users

    async def get_users(self) -> list[User]:
        return _newest_first(list(self._users.values()))

    async def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    # Plans

    async def get_plans(self) -> list[Plan]:
        return _newest_first(list(self._plans.values()))

    async def get_plan(self, plan_id: str) -> Plan | None:
        return self._plans.get(plan_id)

    async def add_plan(self, plan: Plan) -> Plan:
        async with self._lock:
            self._plans[plan.id] = plan
        return plan

    # Subscriptions

    async def get_subscriptions(self, user_id: str | None = None) -> list[Subscription]:
        subscriptions = [
            s for s in self._subscriptions.values() if user_id is None or s.user_id == user_id
        ]
        return _newest_first(subscriptions)

    async def get_subscription(self, subscription_id: str) -> Subscription | None:
        return self._subscriptions.get(subscription_id)

    async def insert_subscription(self, subscription: Subscription) -> Subscription:
        return await self._insert(self._subscriptions, subscription)

    async def update_subscription(self, subscription: Subscription) -> Subscription:
        return await self._replace(self._subscriptions, subscription)

    async def insert_subscription_records(
        self,
        subscription: Subscription,
        invoice: Invoice,
        transaction: Transaction,
        event: SubscriptionEvent,
    ) -> None:
        async with self._lock:
            pending = [
                (self._subscriptions, subscription),
                (self._invoices, invoice),
                (self._transactions, transaction),
            ]
            for table, record in pending:
                if record.id in table:
                    raise DuplicateEntityError(
                        f"{type(record).__name__} {record.id} already exists"
                    )
            for table, record in pending:
                table[record.id] = record
            self._events.append(event)

    # Invoices

    async def get_invoices(self, subscription_id: str | None = None) -> list[Invoice]:
        invoices = [
            i
            for i in self._invoices.values()
            if subscription_id is None or i.subscription_id == subscription_id
        ]
        return _newest_first(invoices)

    async def insert_invoice(self, invoice: Invoice) -> Invoice:
        return await self._insert(self._invoices, invoice)

    async def update_invoice(self, invoice: Invoice) -> Invoice:
        return await self._replace(self._invoices, invoice)

    # Transactions

    async def get_transactions(self, subscription_id: str | None = None) -> list[Transaction]:
        transactions = [
            t
            for t in self._transactions.values()
            if subscription_id is None or t.subscription_id == subscription_id
        ]
        return _newest_first(transactions)

    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        return await self._insert(self._transactions, transaction)

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        return await self._replace(self._transactions, transaction)

    # Audit events

    async def insert_event(self, event: SubscriptionEvent) -> SubscriptionEvent:
        async with self._lock:
            self._events.append(event)
        return event

    async def get_events(self, subscription_id: str) -> list[SubscriptionEvent]:
        return [e for e in self._events if e.subscription_id == subscription_id]

    # Email content

    async def get_email_templates(self) -> list[EmailTemplate]:
        return _newest_first(list(self._templates.values()))

    async def get_email_template_by_name(self, name: str) -> EmailTemplate | None:
        for template in self._templates.values():
            if template.name == name and template.is_active:
                return template
        return None

    async def get_email_campaigns(self) -> list[EmailCampaign]:
        return _newest_first(list(self._campaigns.values()))

    # Helpers

    async def _insert(self, table: dict[str, RecordT], record: RecordT) -> RecordT:
        async with self._lock:
            if record.id in table:
                raise DuplicateEntityError(f"{type(record).__name__} {record.id} already exists")
            table[record.id] = record
        return record

    async def _replace(self, table: dict[str, RecordT], record: RecordT) -> RecordT:
        async with self._lock:
            if record.id not in table:
                raise EntityNotFoundError(f"{type(record).__name__} {record.id} not found")
            table[record.id] = record
        return record

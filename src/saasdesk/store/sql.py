"""SQLAlchemy-backed data store."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from saasdesk.billing.subscriptions.models import (
    Invoice,
    Plan,
    Subscription,
    SubscriptionEvent,
    Transaction,
)
from saasdesk.communications.models import EmailCampaign, EmailTemplate
from saasdesk.db import create_all_tables, create_session_factory, session_scope
from saasdesk.domain import DuplicateEntityError, EntityNotFoundError
from saasdesk.store.interfaces import DataStore
from saasdesk.store.seed import SeedData
from saasdesk.store.tables import (
    EmailCampaignTable,
    EmailTemplateTable,
    InvoiceTable,
    PlanTable,
    SubscriptionEventTable,
    SubscriptionTable,
    TransactionTable,
    UserTable,
)
from saasdesk.users.models import User

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _to_columns(record: BaseModel) -> dict[str, Any]:
    """Flatten a record into column values."""
    values = {}
    for key, value in record.model_dump().items():
        values[key] = value.value if isinstance(value, Enum) else value
    return values


def _to_record(model: type[ModelT], row: Any) -> ModelT:
    """Build a record from a row; SQLite drops tzinfo, so restore UTC."""
    values = {}
    for column in row.__table__.columns:
        if column.key not in model.model_fields:
            continue
        value = getattr(row, column.key)
        if isinstance(value, datetime) and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        values[column.key] = value
    return model.model_validate(values)


class SQLDataStore(DataStore):
    """Data store persisting records through an async SQLAlchemy engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = create_session_factory(engine)

    async def initialize(self, seed: SeedData | None = None) -> None:
        """Create tables and optionally load a dataset."""
        await create_all_tables(self._engine)
        if seed is None:
            return
        async with session_scope(self._session_factory) as session:
            existing = await session.scalar(select(UserTable.id).limit(1))
            if existing is not None:
                logger.info("store.sql.seed_skipped", reason="database not empty")
                return
            session.add_all(UserTable(**_to_columns(r)) for r in seed.users)
            session.add_all(PlanTable(**_to_columns(r)) for r in seed.plans)
            session.add_all(SubscriptionTable(**_to_columns(r)) for r in seed.subscriptions)
            session.add_all(InvoiceTable(**_to_columns(r)) for r in seed.invoices)
            session.add_all(TransactionTable(**_to_columns(r)) for r in seed.transactions)
            session.add_all(EmailTemplateTable(**_to_columns(r)) for r in seed.email_templates)
            session.add_all(EmailCampaignTable(**_to_columns(r)) for r in seed.email_campaigns)
        logger.info("store.sql.seeded", users=len(seed.users), plans=len(seed.plans))

    async def close(self) -> None:
        await self._engine.dispose()

    # Generic helpers

    async def _list(self, table: Any, model: type[ModelT], *criteria: Any) -> list[ModelT]:
        stmt = select(table).where(*criteria).order_by(table.created_at.desc())
        async with self._session_factory() as session:
            rows = (await session.scalars(stmt)).all()
        return [_to_record(model, row) for row in rows]

    async def _get(self, table: Any, model: type[ModelT], record_id: str) -> ModelT | None:
        async with self._session_factory() as session:
            row = await session.get(table, record_id)
        return _to_record(model, row) if row is not None else None

    async def _add(self, session: AsyncSession, table: Any, record: Any) -> None:
        if await session.get(table, record.id) is not None:
            raise DuplicateEntityError(f"{type(record).__name__} {record.id} already exists")
        session.add(table(**_to_columns(record)))

    async def _add_event(self, session: AsyncSession, event: SubscriptionEvent) -> None:
        # sequence orders events that share a timestamp
        last = await session.scalar(select(func.max(SubscriptionEventTable.sequence)))
        session.add(SubscriptionEventTable(**_to_columns(event), sequence=(last or 0) + 1))

    async def _insert(self, table: Any, record: ModelT) -> ModelT:
        async with session_scope(self._session_factory) as session:
            await self._add(session, table, record)
        return record

    async def _replace(self, table: Any, record: ModelT) -> ModelT:
        async with session_scope(self._session_factory) as session:
            if await session.get(table, record.id) is None:  # type: ignore[attr-defined]
                raise EntityNotFoundError(f"{type(record).__name__} {record.id} not found")  # type: ignore[attr-defined]
            await session.merge(table(**_to_columns(record)))
        return record

    # Users

    async def get_users(self) -> list[User]:
        return await self._list(UserTable, User)

    async def get_user(self, user_id: str) -> User | None:
        return await self._get(UserTable, User, user_id)

    # Plans

    async def get_plans(self) -> list[Plan]:
        return await self._list(PlanTable, Plan)

    async def get_plan(self, plan_id: str) -> Plan | None:
        return await self._get(PlanTable, Plan, plan_id)

    # Subscriptions

    async def get_subscriptions(self, user_id: str | None = None) -> list[Subscription]:
        criteria = [SubscriptionTable.user_id == user_id] if user_id is not None else []
        return await self._list(SubscriptionTable, Subscription, *criteria)

    async def get_subscription(self, subscription_id: str) -> Subscription | None:
        return await self._get(SubscriptionTable, Subscription, subscription_id)

    async def insert_subscription(self, subscription: Subscription) -> Subscription:
        return await self._insert(SubscriptionTable, subscription)

    async def update_subscription(self, subscription: Subscription) -> Subscription:
        return await self._replace(SubscriptionTable, subscription)

    async def insert_subscription_records(
        self,
        subscription: Subscription,
        invoice: Invoice,
        transaction: Transaction,
        event: SubscriptionEvent,
    ) -> None:
        async with session_scope(self._session_factory) as session:
            await self._add(session, SubscriptionTable, subscription)
            await self._add(session, InvoiceTable, invoice)
            await self._add(session, TransactionTable, transaction)
            await self._add_event(session, event)

    # Invoices

    async def get_invoices(self, subscription_id: str | None = None) -> list[Invoice]:
        criteria = (
            [InvoiceTable.subscription_id == subscription_id] if subscription_id is not None else []
        )
        return await self._list(InvoiceTable, Invoice, *criteria)

    async def insert_invoice(self, invoice: Invoice) -> Invoice:
        return await self._insert(InvoiceTable, invoice)

    async def update_invoice(self, invoice: Invoice) -> Invoice:
        return await self._replace(InvoiceTable, invoice)

    # Transactions

    async def get_transactions(self, subscription_id: str | None = None) -> list[Transaction]:
        criteria = (
            [TransactionTable.subscription_id == subscription_id]
            if subscription_id is not None
            else []
        )
        return await self._list(TransactionTable, Transaction, *criteria)

    async def insert_transaction(self, transaction: Transaction) -> Transaction:
        return await self._insert(TransactionTable, transaction)

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        return await self._replace(TransactionTable, transaction)

    # Audit events

    async def insert_event(self, event: SubscriptionEvent) -> SubscriptionEvent:
        async with session_scope(self._session_factory) as session:
            await self._add_event(session, event)
        return event

    async def get_events(self, subscription_id: str) -> list[SubscriptionEvent]:
        stmt = (
            select(SubscriptionEventTable)
            .where(SubscriptionEventTable.subscription_id == subscription_id)
            .order_by(SubscriptionEventTable.created_at, SubscriptionEventTable.sequence)
        )
        async with self._session_factory() as session:
            rows = (await session.scalars(stmt)).all()
        return [_to_record(SubscriptionEvent, row) for row in rows]

    # Email content

    async def get_email_templates(self) -> list[EmailTemplate]:
        return await self._list(EmailTemplateTable, EmailTemplate)

    async def get_email_template_by_name(self, name: str) -> EmailTemplate | None:
        stmt = select(EmailTemplateTable).where(
            EmailTemplateTable.name == name, EmailTemplateTable.is_active.is_(True)
        )
        async with self._session_factory() as session:
            row = (await session.scalars(stmt)).first()
        return _to_record(EmailTemplate, row) if row is not None else None

    async def get_email_campaigns(self) -> list[EmailCampaign]:
        return await self._list(EmailCampaignTable, EmailCampaign)

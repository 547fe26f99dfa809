"""
Tests for subscription creation through SubscriptionManager.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from saasdesk.billing.config import BillingConfig, PeriodConfig
from saasdesk.billing.subscriptions import records
from saasdesk.billing.subscriptions.models import (
    BillingPeriod,
    InvoiceStatus,
    PaymentMethod,
    Plan,
    SubscriptionEventType,
    SubscriptionRequest,
    SubscriptionStatus,
    TransactionStatus,
)
from saasdesk.billing.subscriptions.service import (
    CREATION_FAILED_MESSAGE,
    CREATION_SUCCESS_MESSAGE,
    PLAN_NOT_FOUND_MESSAGE,
    USER_NOT_FOUND_MESSAGE,
    SubscriptionManager,
)
from saasdesk.communications.models import DeliveryStatus


async def _record_counts(store) -> tuple[int, int, int]:
    return (
        len(await store.get_subscriptions()),
        len(await store.get_invoices()),
        len(await store.get_transactions()),
    )


class TestCreationScenarios:
    """Seeded plans: 1 Basic 29.99/7d trial, 2 Pro 99.99/14d trial."""

    @pytest.mark.asyncio
    async def test_trial_with_card(self, manager, fixed_now):
        result = await manager.create_subscription(
            SubscriptionRequest(
                user_id="2",
                plan_id="2",
                payment_method=PaymentMethod.CARD,
                requires_payment=True,
                has_trial_period=True,
            )
        )

        assert result.success is True
        assert result.message == CREATION_SUCCESS_MESSAGE
        assert result.subscription.status == SubscriptionStatus.TRIALING
        assert result.invoice.amount == Decimal("99.99")
        assert result.subscription.trial_end_date == fixed_now + timedelta(days=14)
        assert result.confirmation_data.title == "Trial Subscription Started"

    @pytest.mark.asyncio
    async def test_immediate_card(self, manager):
        result = await manager.create_subscription(
            SubscriptionRequest(user_id="2", plan_id="1", payment_method=PaymentMethod.CARD)
        )

        assert result.success is True
        assert result.subscription.status == SubscriptionStatus.ACTIVE
        assert result.invoice.amount == Decimal("29.99")
        assert result.invoice.status == InvoiceStatus.PAID
        assert result.transaction.status == TransactionStatus.COMPLETED
        assert result.confirmation_data.title == "Subscription Confirmed"

    @pytest.mark.asyncio
    async def test_bank_transfer(self, manager):
        result = await manager.create_subscription(
            SubscriptionRequest(
                user_id="3", plan_id="2", payment_method=PaymentMethod.BANK_TRANSFER
            )
        )

        assert result.success is True
        assert result.subscription.status == SubscriptionStatus.PENDING_APPROVAL
        assert result.invoice.status == InvoiceStatus.UNPAID
        assert result.confirmation_data.title == "Subscription Pending Payment"

    @pytest.mark.asyncio
    async def test_unknown_plan_creates_nothing(self, manager, store):
        before = await _record_counts(store)

        result = await manager.create_subscription(
            SubscriptionRequest(user_id="2", plan_id="missing")
        )

        assert result.success is False
        assert result.message == PLAN_NOT_FOUND_MESSAGE
        assert result.subscription is None
        assert result.confirmation_data is None
        assert await _record_counts(store) == before

    @pytest.mark.asyncio
    async def test_unknown_user_creates_nothing(self, manager, store, email_sender):
        before = await _record_counts(store)

        result = await manager.create_subscription(
            SubscriptionRequest(user_id="missing", plan_id="1")
        )

        assert result.success is False
        assert result.message == USER_NOT_FOUND_MESSAGE
        assert await _record_counts(store) == before
        assert not email_sender.outbox

    @pytest.mark.asyncio
    async def test_cash_without_payment_is_pending(self, manager):
        result = await manager.create_subscription(
            SubscriptionRequest(
                user_id="2",
                plan_id="1",
                payment_method=PaymentMethod.CASH,
                requires_payment=False,
            )
        )

        assert result.subscription.status == SubscriptionStatus.PENDING_PAYMENT
        assert result.invoice.amount == Decimal("29.99")
        assert result.confirmation_data.title == "Subscription Created"


class TestCreationPersistence:
    @pytest.mark.asyncio
    async def test_records_are_persisted(self, manager, store):
        result = await manager.create_subscription(SubscriptionRequest(user_id="2", plan_id="1"))

        subscription = await store.get_subscription(result.subscription.id)
        assert subscription == result.subscription
        assert await store.get_invoices(subscription.id) == [result.invoice]
        assert await store.get_transactions(subscription.id) == [result.transaction]

    @pytest.mark.asyncio
    async def test_creation_is_recorded_as_event(self, manager, store):
        result = await manager.create_subscription(SubscriptionRequest(user_id="2", plan_id="1"))

        events = await store.get_events(result.subscription.id)

        assert len(events) == 1
        assert events[0].event_type == SubscriptionEventType.CREATED
        assert events[0].previous_status is None
        assert events[0].new_status == SubscriptionStatus.ACTIVE
        assert events[0].reason == "immediate_card"

    @pytest.mark.asyncio
    async def test_identical_requests_create_distinct_subscriptions(self, manager, store):
        request = SubscriptionRequest(user_id="2", plan_id="1")

        first = await manager.create_subscription(request)
        second = await manager.create_subscription(request)

        assert first.success and second.success
        assert first.subscription.id != second.subscription.id
        assert first.invoice.invoice_number != second.invoice.invoice_number
        user_subscriptions = await store.get_subscriptions(user_id="2")
        assert {first.subscription.id, second.subscription.id} <= {
            s.id for s in user_subscriptions
        }


class TestCreationFailures:
    @pytest.mark.asyncio
    async def test_plan_lookup_failure(self, store, clock):
        plans = AsyncMock()
        plans.get_plan.side_effect = RuntimeError("connection reset")
        manager = SubscriptionManager(users=store, plans=plans, subscriptions=store, clock=clock)

        result = await manager.create_subscription(SubscriptionRequest(user_id="2", plan_id="1"))

        assert result.success is False
        assert result.message == CREATION_FAILED_MESSAGE

    @pytest.mark.asyncio
    async def test_user_lookup_failure_leaves_no_records(self, store, clock):
        users = AsyncMock()
        users.get_user.side_effect = RuntimeError("timeout")
        manager = SubscriptionManager(users=users, plans=store, subscriptions=store, clock=clock)
        before = await _record_counts(store)

        result = await manager.create_subscription(SubscriptionRequest(user_id="2", plan_id="1"))

        assert result.success is False
        assert result.message == CREATION_FAILED_MESSAGE
        assert await _record_counts(store) == before

    @pytest.mark.asyncio
    async def test_persistence_failure(self, store, clock):
        subscriptions = AsyncMock()
        subscriptions.insert_subscription_records.side_effect = RuntimeError("disk full")
        manager = SubscriptionManager(
            users=store, plans=store, subscriptions=subscriptions, clock=clock
        )

        result = await manager.create_subscription(SubscriptionRequest(user_id="2", plan_id="1"))

        assert result.success is False
        assert result.message == CREATION_FAILED_MESSAGE
        assert result.subscription is None

    @pytest.mark.asyncio
    async def test_invoice_write_failure_leaves_no_records(self, manager, store, monkeypatch):
        # collide with seeded invoice "1" so the second of the four writes fails
        monkeypatch.setattr(records, "generate_invoice_id", lambda: "1")
        before = await _record_counts(store)

        result = await manager.create_subscription(SubscriptionRequest(user_id="2", plan_id="1"))

        assert result.success is False
        assert result.message == CREATION_FAILED_MESSAGE
        assert await _record_counts(store) == before
        assert [s.id for s in await store.get_subscriptions(user_id="2")] == ["1"]


class TestPlanCurrency:
    def test_plan_with_unknown_currency_rejected(self):
        with pytest.raises(ValidationError, match="Unknown currency code: XYZ"):
            Plan(id="x", name="Odd", price=Decimal("10"), currency="XYZ")

    def test_plan_currency_normalized(self):
        assert Plan(id="x", name="Euro", price=Decimal("10"), currency="eur").currency == "EUR"


class TestCreationNotifications:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("request_kwargs", "template"),
        [
            ({"has_trial_period": True}, "subscription_trial_started"),
            ({}, "subscription_confirmed"),
            ({"payment_method": PaymentMethod.BANK_TRANSFER}, "subscription_pending_approval"),
            ({"payment_method": PaymentMethod.CHEQUE}, "subscription_pending_payment"),
        ],
    )
    async def test_template_matches_workflow(
        self, manager, email_sender, request_kwargs, template
    ):
        await manager.create_subscription(
            SubscriptionRequest(user_id="2", plan_id="2", **request_kwargs)
        )

        assert len(email_sender.outbox) == 1
        delivery = email_sender.outbox[0]
        assert delivery.to == "user1@example.com"
        assert delivery.template_name == template
        assert delivery.status == DeliveryStatus.SENT
        assert "Pro Plan" in delivery.subject

    @pytest.mark.asyncio
    async def test_bank_transfer_email_includes_reference(self, manager, email_sender):
        result = await manager.create_subscription(
            SubscriptionRequest(
                user_id="3", plan_id="2", payment_method=PaymentMethod.BANK_TRANSFER
            )
        )

        text = email_sender.outbox[0].text_body
        assert result.subscription.id in text
        assert result.invoice.invoice_number in text
        assert "$99.99 USD" in text

    @pytest.mark.asyncio
    async def test_delivery_failure_does_not_fail_creation(self, store, clock):
        sender = AsyncMock()
        sender.send_template.side_effect = RuntimeError("smtp down")
        manager = SubscriptionManager(
            users=store, plans=store, subscriptions=store, email_sender=sender, clock=clock
        )

        result = await manager.create_subscription(SubscriptionRequest(user_id="2", plan_id="1"))

        assert result.success is True
        sender.send_template.assert_awaited_once()
        assert await store.get_subscription(result.subscription.id) is not None


class TestBillingPeriods:
    @pytest.mark.asyncio
    async def test_yearly_plan_runs_a_year(self, manager, store, fixed_now):
        await store.add_plan(
            Plan(
                id="annual",
                name="Annual Plan",
                price=Decimal("999.00"),
                billing_period=BillingPeriod.YEARLY,
            )
        )

        result = await manager.create_subscription(
            SubscriptionRequest(user_id="2", plan_id="annual")
        )

        assert result.subscription.end_date == fixed_now + timedelta(days=365)
        assert result.invoice.amount == Decimal("999.00")

    @pytest.mark.asyncio
    async def test_fixed_period_compatibility(self, store, clock, fixed_now):
        await store.add_plan(
            Plan(
                id="annual",
                name="Annual Plan",
                price=Decimal("999.00"),
                billing_period=BillingPeriod.YEARLY,
            )
        )
        manager = SubscriptionManager(
            users=store,
            plans=store,
            subscriptions=store,
            config=BillingConfig(period=PeriodConfig(fixed_days=30)),
            clock=clock,
        )

        result = await manager.create_subscription(
            SubscriptionRequest(user_id="2", plan_id="annual")
        )

        assert result.subscription.end_date == fixed_now + timedelta(days=30)

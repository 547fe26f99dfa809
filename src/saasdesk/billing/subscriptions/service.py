"""
Subscription management service.

Coordinates the pure workflow functions with the data store and the
notification sender:

    lookup -> classify -> construct records -> persist -> notify -> confirm

Lifecycle operations (status changes, cancellation, renewal) produce new
record versions and append an audit event for every change.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import structlog

from saasdesk.billing.config import BillingConfig
from saasdesk.billing.email_templates import build_subscription_context, template_for_workflow
from saasdesk.billing.exceptions import (
    PlanNotFoundError,
    SubscriptionNotFoundError,
    SubscriptionStateError,
)
from saasdesk.billing.money_utils import format_amount
from saasdesk.billing.subscriptions.confirmation import generate_confirmation
from saasdesk.billing.subscriptions.models import (
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    Plan,
    RenewalResult,
    Subscription,
    SubscriptionCreationResult,
    SubscriptionEvent,
    SubscriptionEventType,
    SubscriptionRequest,
    SubscriptionStatus,
    TransactionStatus,
)
from saasdesk.billing.subscriptions.records import (
    build_billing_records,
    build_invoice,
    build_subscription,
    build_transaction,
    generate_event_id,
    period_length,
)
from saasdesk.billing.subscriptions.workflow import workflow_for_request
from saasdesk.communications.email_service import EmailSender
from saasdesk.logging import log_audit_event
from saasdesk.store.interfaces import PlanRepository, SubscriptionRepository, UserRepository

logger = structlog.get_logger(__name__)

PLAN_NOT_FOUND_MESSAGE = "Plan not found"
USER_NOT_FOUND_MESSAGE = "User not found"
CREATION_FAILED_MESSAGE = "Failed to create subscription. Please try again."
CREATION_SUCCESS_MESSAGE = "Subscription created successfully"

S = SubscriptionStatus

ALLOWED_TRANSITIONS: dict[SubscriptionStatus, frozenset[SubscriptionStatus]] = {
    S.PENDING_PAYMENT: frozenset({S.ACTIVE, S.INACTIVE, S.EXPIRED}),
    S.PENDING_APPROVAL: frozenset({S.ACTIVE, S.INACTIVE, S.PENDING_PAYMENT}),
    S.TRIALING: frozenset({S.ACTIVE, S.PAST_DUE, S.INACTIVE, S.EXPIRED, S.PENDING_PAYMENT}),
    S.ACTIVE: frozenset({S.PAST_DUE, S.SUSPENDED, S.INACTIVE, S.EXPIRED}),
    S.PAST_DUE: frozenset({S.ACTIVE, S.SUSPENDED, S.INACTIVE, S.EXPIRED}),
    S.SUSPENDED: frozenset({S.ACTIVE, S.INACTIVE, S.EXPIRED}),
    S.INACTIVE: frozenset({S.ACTIVE}),
    S.EXPIRED: frozenset(),
}

# Activating from these states settles the outstanding invoice
_AWAITING_PAYMENT = frozenset({S.PENDING_PAYMENT, S.PENDING_APPROVAL, S.PAST_DUE})

_RENEWABLE = frozenset({S.ACTIVE, S.TRIALING})


def can_transition(current: SubscriptionStatus, new: SubscriptionStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _audit(event: SubscriptionEvent, subscription: Subscription) -> None:
    log_audit_event(
        event.event_type.value,
        category="billing",
        user_id=event.changed_by,
        resource_type="subscription",
        resource_id=subscription.id,
        previous_status=event.previous_status.value if event.previous_status else None,
        new_status=subscription.status.value,
        reason=event.reason,
    )


class SubscriptionManager:
    """Creates subscriptions and manages their lifecycle."""

    def __init__(
        self,
        users: UserRepository,
        plans: PlanRepository,
        subscriptions: SubscriptionRepository,
        email_sender: EmailSender | None = None,
        config: BillingConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
        dashboard_url: str = "",
    ) -> None:
        self._users = users
        self._plans = plans
        self._subscriptions = subscriptions
        self._email_sender = email_sender
        self._config = config or BillingConfig()
        self._clock = clock
        self._dashboard_url = dashboard_url

    # ========================================================================
    # Creation
    # ========================================================================

    async def create_subscription(self, request: SubscriptionRequest) -> SubscriptionCreationResult:
        """
        Create a subscription with its invoice and transaction.

        Never raises: every failure is returned as ``success=False`` with a
        message. The four records are written in one atomic store call, so a
        failed creation leaves nothing behind.
        """
        try:
            plan = await self._plans.get_plan(request.plan_id)
            if plan is None:
                logger.info("subscription.create.plan_not_found", plan_id=request.plan_id)
                return SubscriptionCreationResult(success=False, message=PLAN_NOT_FOUND_MESSAGE)

            user = await self._users.get_user(request.user_id)
            if user is None:
                logger.info("subscription.create.user_not_found", user_id=request.user_id)
                return SubscriptionCreationResult(success=False, message=USER_NOT_FOUND_MESSAGE)

            workflow = workflow_for_request(request, plan)
            now = self._clock()

            subscription = build_subscription(
                user_id=user.id,
                plan=plan,
                workflow=workflow,
                payment_method=request.payment_method,
                now=now,
                config=self._config,
            )
            invoice, transaction = build_billing_records(
                subscription=subscription,
                plan=plan,
                workflow=workflow,
                now=now,
                config=self._config,
            )

            confirmation = generate_confirmation(
                workflow, plan, subscription, locale=self._config.locale
            )
            email_context = self._email_context(subscription, plan, invoice)

            event = self._new_event(
                subscription,
                SubscriptionEventType.CREATED,
                previous_status=None,
                reason=workflow.type.value,
                changed_by=user.id,
            )
            await self._subscriptions.insert_subscription_records(
                subscription, invoice, transaction, event
            )
        except Exception:
            logger.exception(
                "subscription.create.failed",
                user_id=request.user_id,
                plan_id=request.plan_id,
            )
            return SubscriptionCreationResult(success=False, message=CREATION_FAILED_MESSAGE)

        _audit(event, subscription)
        logger.info(
            "subscription.created",
            subscription_id=subscription.id,
            user_id=user.id,
            plan_id=plan.id,
            workflow=workflow.type.value,
            status=subscription.status.value,
            invoice_amount=str(invoice.amount),
        )

        await self._notify(
            user.email,
            template_for_workflow(workflow),
            email_context,
        )

        return SubscriptionCreationResult(
            success=True,
            subscription=subscription,
            invoice=invoice,
            transaction=transaction,
            message=CREATION_SUCCESS_MESSAGE,
            confirmation_data=confirmation,
        )

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def get_subscription(self, subscription_id: str) -> Subscription:
        subscription = await self._subscriptions.get_subscription(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(
                f"Subscription {subscription_id} not found", subscription_id=subscription_id
            )
        return subscription

    async def update_subscription_status(
        self,
        subscription_id: str,
        new_status: SubscriptionStatus,
        reason: str | None = None,
        changed_by: str | None = None,
    ) -> Subscription:
        """
        Move a subscription to a new status.

        Raises:
            SubscriptionNotFoundError: Unknown subscription
            SubscriptionStateError: Transition not allowed from the current status
        """
        subscription = await self.get_subscription(subscription_id)
        current = subscription.status

        if not can_transition(current, new_status):
            raise SubscriptionStateError(
                f"Cannot change subscription {subscription_id} from {current.value} to {new_status.value}",
                current_state=current.value,
                requested_state=new_status.value,
            )

        now = self._clock()
        updated = subscription.model_copy(update={"status": new_status, "updated_at": now})
        await self._subscriptions.update_subscription(updated)

        if new_status == S.ACTIVE and current in _AWAITING_PAYMENT:
            await self._settle_outstanding(subscription.id, now)

        await self._record_event(
            updated,
            SubscriptionEventType.STATUS_CHANGED,
            previous_status=current,
            reason=reason,
            changed_by=changed_by,
        )
        logger.info(
            "subscription.status_changed",
            subscription_id=subscription_id,
            previous_status=current.value,
            new_status=new_status.value,
        )
        return updated

    async def cancel_subscription(
        self,
        subscription_id: str,
        reason: str | None = None,
        effective_date: datetime | None = None,
        changed_by: str | None = None,
    ) -> Subscription:
        """
        Cancel a subscription.

        Stops auto-renewal, ends the period at ``effective_date`` (default now)
        and cancels unpaid invoices and pending transactions.
        """
        subscription = await self.get_subscription(subscription_id)
        current = subscription.status

        if not can_transition(current, S.INACTIVE):
            raise SubscriptionStateError(
                f"Subscription {subscription_id} cannot be canceled in status {current.value}",
                current_state=current.value,
                requested_state=S.INACTIVE.value,
            )

        now = self._clock()
        canceled = subscription.model_copy(
            update={
                "status": S.INACTIVE,
                "auto_renewal": False,
                "end_date": effective_date or now,
                "updated_at": now,
            }
        )
        await self._subscriptions.update_subscription(canceled)

        for invoice in await self._subscriptions.get_invoices(subscription_id):
            if invoice.status == InvoiceStatus.UNPAID:
                await self._subscriptions.update_invoice(
                    invoice.model_copy(update={"status": InvoiceStatus.CANCELLED, "updated_at": now})
                )
        for transaction in await self._subscriptions.get_transactions(subscription_id):
            if transaction.status == TransactionStatus.PENDING:
                await self._subscriptions.update_transaction(
                    transaction.model_copy(
                        update={"status": TransactionStatus.CANCELLED, "updated_at": now}
                    )
                )

        await self._record_event(
            canceled,
            SubscriptionEventType.CANCELED,
            previous_status=current,
            reason=reason,
            changed_by=changed_by,
        )
        logger.info("subscription.canceled", subscription_id=subscription_id, reason=reason)

        user = await self._users.get_user(subscription.user_id)
        plan = await self._plans.get_plan(subscription.plan_id)
        if user is not None and plan is not None:
            await self._notify(
                user.email,
                "subscription_canceled",
                {
                    "plan_name": plan.name,
                    "access_until_date": canceled.end_date.strftime("%B %d, %Y"),
                    "reason": reason,
                },
            )
        return canceled

    async def process_renewal(self, subscription_id: str) -> RenewalResult:
        """
        Start the next billing period of a due subscription.

        A trial renews at its trial end, any other renewable subscription at
        its period end. Card payments are captured immediately; other methods
        leave an unpaid invoice and move the subscription to PAST_DUE.
        """
        subscription = await self.get_subscription(subscription_id)
        plan = await self._plans.get_plan(subscription.plan_id)
        if plan is None:
            raise PlanNotFoundError(
                f"Plan {subscription.plan_id} not found", plan_id=subscription.plan_id
            )

        if subscription.status not in _RENEWABLE:
            return RenewalResult(
                renewed=False,
                message=f"Subscription is not renewable in status {subscription.status.value}",
                subscription=subscription,
            )
        if not subscription.auto_renewal:
            return RenewalResult(
                renewed=False, message="Auto-renewal is disabled", subscription=subscription
            )

        now = self._clock()
        due_at = subscription.end_date
        if subscription.status == S.TRIALING and subscription.trial_end_date is not None:
            due_at = subscription.trial_end_date
        if due_at > now:
            return RenewalResult(
                renewed=False,
                message=f"Renewal not due until {due_at.isoformat()}",
                subscription=subscription,
            )

        paid = subscription.payment_method == PaymentMethod.CARD
        new_status = S.ACTIVE if paid else S.PAST_DUE
        renewed = subscription.model_copy(
            update={
                "status": new_status,
                "start_date": due_at,
                "end_date": due_at + period_length(plan, self._config),
                "updated_at": now,
            }
        )
        invoice = build_invoice(
            subscription=renewed,
            plan=plan,
            amount=plan.price,
            paid=paid,
            now=now,
            config=self._config,
        )
        transaction = build_transaction(
            subscription=renewed, invoice=invoice, completed=paid, now=now
        )

        await self._subscriptions.update_subscription(renewed)
        await self._subscriptions.insert_invoice(invoice)
        await self._subscriptions.insert_transaction(transaction)
        await self._record_event(
            renewed,
            SubscriptionEventType.RENEWED,
            previous_status=subscription.status,
            reason="payment captured" if paid else "awaiting payment",
        )
        logger.info(
            "subscription.renewed",
            subscription_id=subscription_id,
            status=new_status.value,
            period_end=renewed.end_date.isoformat(),
        )

        user = await self._users.get_user(subscription.user_id)
        if user is not None:
            await self._notify(
                user.email,
                "subscription_renewed",
                self._email_context(renewed, plan, invoice),
            )

        return RenewalResult(
            renewed=True,
            message="Subscription renewed",
            subscription=renewed,
            invoice=invoice,
            transaction=transaction,
        )

    async def get_events(self, subscription_id: str) -> list[SubscriptionEvent]:
        await self.get_subscription(subscription_id)
        return await self._subscriptions.get_events(subscription_id)

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _settle_outstanding(self, subscription_id: str, now: datetime) -> None:
        """Mark unpaid invoices paid and pending transactions completed."""
        for invoice in await self._subscriptions.get_invoices(subscription_id):
            if invoice.status in (InvoiceStatus.UNPAID, InvoiceStatus.OVERDUE):
                await self._subscriptions.update_invoice(
                    invoice.model_copy(
                        update={"status": InvoiceStatus.PAID, "paid_date": now, "updated_at": now}
                    )
                )
        for transaction in await self._subscriptions.get_transactions(subscription_id):
            if transaction.status == TransactionStatus.PENDING:
                await self._subscriptions.update_transaction(
                    transaction.model_copy(
                        update={"status": TransactionStatus.COMPLETED, "updated_at": now}
                    )
                )

    def _new_event(
        self,
        subscription: Subscription,
        event_type: SubscriptionEventType,
        previous_status: SubscriptionStatus | None,
        reason: str | None = None,
        changed_by: str | None = None,
    ) -> SubscriptionEvent:
        return SubscriptionEvent(
            id=generate_event_id(),
            subscription_id=subscription.id,
            event_type=event_type,
            previous_status=previous_status,
            new_status=subscription.status,
            reason=reason,
            changed_by=changed_by,
            created_at=self._clock(),
        )

    async def _record_event(
        self,
        subscription: Subscription,
        event_type: SubscriptionEventType,
        previous_status: SubscriptionStatus | None,
        reason: str | None = None,
        changed_by: str | None = None,
    ) -> SubscriptionEvent:
        event = self._new_event(subscription, event_type, previous_status, reason, changed_by)
        await self._subscriptions.insert_event(event)
        _audit(event, subscription)
        return event

    def _email_context(
        self, subscription: Subscription, plan: Plan, invoice: Invoice | None
    ) -> dict[str, Any]:
        price = format_amount(plan.price, plan.currency, self._config.locale)
        return build_subscription_context(
            subscription, plan, price, self._dashboard_url, invoice=invoice
        )

    async def _notify(self, to: str, template_name: str, context: dict[str, Any]) -> None:
        """Send a notification; delivery problems never fail the operation."""
        if self._email_sender is None:
            return
        try:
            await self._email_sender.send_template(to, template_name, context)
        except Exception as e:
            logger.warning(
                "subscription.notification_failed",
                to=to,
                template=template_name,
                error=str(e),
            )


__all__ = [
    "ALLOWED_TRANSITIONS",
    "SubscriptionManager",
    "can_transition",
]

"""
Record construction for new and renewed subscriptions.

Pure functions: the caller supplies the clock value and persists the
returned records.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from saasdesk.billing.config import BillingConfig
from saasdesk.billing.subscriptions.models import (
    BillingPeriod,
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    Plan,
    Subscription,
    SubscriptionStatus,
    Transaction,
    TransactionStatus,
    Workflow,
    WorkflowType,
)


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


def generate_subscription_id() -> str:
    return generate_id("sub")


def generate_invoice_id() -> str:
    return generate_id("inv")


def generate_transaction_id() -> str:
    return generate_id("txn")


def generate_event_id() -> str:
    return generate_id("evt")


def generate_invoice_number(now: datetime, prefix: str = "INV") -> str:
    """Year-prefixed invoice number, e.g. ``INV-2025-3F9A1C07B2D4``."""
    return f"{prefix}-{now.year}-{uuid4().hex[:12].upper()}"


def period_length(plan: Plan, config: BillingConfig) -> timedelta:
    """Length of one billing period for the plan."""
    if config.period.fixed_days is not None:
        return timedelta(days=config.period.fixed_days)
    if plan.billing_period == BillingPeriod.YEARLY:
        return timedelta(days=config.period.yearly_days)
    return timedelta(days=config.period.monthly_days)


def invoice_amount(workflow: Workflow, plan: Plan) -> Decimal:
    """Zero for a trial that needs no payment, the plan price otherwise."""
    if workflow.type == WorkflowType.TRIAL and not workflow.requires_payment:
        return Decimal("0")
    return plan.price


def build_subscription(
    *,
    user_id: str,
    plan: Plan,
    workflow: Workflow,
    payment_method: PaymentMethod,
    now: datetime,
    config: BillingConfig,
) -> Subscription:
    trial_end_date = None
    if workflow.type == WorkflowType.TRIAL and workflow.trial_days > 0:
        trial_end_date = now + timedelta(days=workflow.trial_days)

    return Subscription(
        id=generate_subscription_id(),
        user_id=user_id,
        plan_id=plan.id,
        status=workflow.initial_status,
        start_date=now,
        end_date=now + period_length(plan, config),
        trial_end_date=trial_end_date,
        auto_renewal=True,
        payment_method=payment_method,
        created_at=now,
        updated_at=now,
    )


def build_invoice(
    *,
    subscription: Subscription,
    plan: Plan,
    amount: Decimal,
    paid: bool,
    now: datetime,
    config: BillingConfig,
) -> Invoice:
    return Invoice(
        id=generate_invoice_id(),
        subscription_id=subscription.id,
        invoice_number=generate_invoice_number(now, config.invoice.number_prefix),
        amount=amount,
        currency=plan.currency,
        status=InvoiceStatus.PAID if paid else InvoiceStatus.UNPAID,
        due_date=now + timedelta(days=config.invoice.due_days),
        paid_date=now if paid else None,
        created_at=now,
        updated_at=now,
    )


def build_transaction(
    *,
    subscription: Subscription,
    invoice: Invoice,
    completed: bool,
    now: datetime,
) -> Transaction:
    return Transaction(
        id=generate_transaction_id(),
        subscription_id=subscription.id,
        amount=invoice.amount,
        currency=invoice.currency,
        payment_method=subscription.payment_method,
        status=TransactionStatus.COMPLETED if completed else TransactionStatus.PENDING,
        transaction_date=now,
        created_at=now,
        updated_at=now,
    )


def build_billing_records(
    *,
    subscription: Subscription,
    plan: Plan,
    workflow: Workflow,
    now: datetime,
    config: BillingConfig,
) -> tuple[Invoice, Transaction]:
    """Invoice and transaction created alongside a new subscription."""
    paid = workflow.initial_status == SubscriptionStatus.ACTIVE
    invoice = build_invoice(
        subscription=subscription,
        plan=plan,
        amount=invoice_amount(workflow, plan),
        paid=paid,
        now=now,
        config=config,
    )
    transaction = build_transaction(
        subscription=subscription, invoice=invoice, completed=paid, now=now
    )
    return invoice, transaction

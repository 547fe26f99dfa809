"""
Subscription billing models.

Plans, subscriptions, invoices, transactions and the request/result
schemas of the subscription workflow.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from saasdesk.billing.money_utils import money_handler
from saasdesk.core.pydantic import AppBaseModel, RecordModel


class BillingPeriod(str, Enum):
    """Plan billing periods."""

    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class PaymentMethod(str, Enum):
    """Supported payment methods."""

    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"
    CASH = "CASH"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""

    PENDING_PAYMENT = "PENDING_PAYMENT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    TRIALING = "TRIALING"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    EXPIRED = "EXPIRED"
    PAST_DUE = "PAST_DUE"


class InvoiceStatus(str, Enum):
    UNPAID = "UNPAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class WorkflowType(str, Enum):
    """How a new subscription is started."""

    TRIAL = "trial"
    IMMEDIATE_CARD = "immediate_card"
    MANUAL_PAYMENT = "manual_payment"
    PENDING = "pending"


class SubscriptionEventType(str, Enum):
    """Audit event types for subscriptions."""

    CREATED = "subscription.created"
    STATUS_CHANGED = "subscription.status_changed"
    CANCELED = "subscription.canceled"
    RENEWED = "subscription.renewed"


# ============================================================================
# Stored records
# ============================================================================


class Plan(RecordModel):
    """Subscription plan offered to subscribers."""

    id: str
    name: str
    description: str = ""
    price: Decimal = Field(ge=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    billing_period: BillingPeriod = BillingPeriod.MONTHLY
    features: dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    trial_days: int | None = Field(None, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("currency")
    @classmethod
    def known_currency(cls, v: str) -> str:
        v = v.upper()
        if not money_handler.is_valid_currency(v):
            raise ValueError(f"Unknown currency code: {v}")
        return v


class Subscription(RecordModel):
    """A user's subscription to a plan."""

    id: str
    user_id: str
    plan_id: str
    status: SubscriptionStatus
    start_date: datetime
    end_date: datetime
    trial_end_date: datetime | None = None
    auto_renewal: bool = True
    payment_method: PaymentMethod
    created_at: datetime
    updated_at: datetime

    @property
    def is_current(self) -> bool:
        """Whether the subscription grants access right now."""
        return self.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)


class Invoice(RecordModel):
    """Invoice issued for one subscription period."""

    id: str
    subscription_id: str
    invoice_number: str
    amount: Decimal = Field(ge=0)
    currency: str
    status: InvoiceStatus
    due_date: datetime
    paid_date: datetime | None = None
    created_at: datetime
    updated_at: datetime


class Transaction(RecordModel):
    """Payment transaction backing an invoice."""

    id: str
    subscription_id: str
    amount: Decimal = Field(ge=0)
    currency: str
    payment_method: PaymentMethod
    status: TransactionStatus
    transaction_date: datetime
    created_at: datetime
    updated_at: datetime


class SubscriptionEvent(RecordModel):
    """Append-only audit entry for a subscription."""

    id: str
    subscription_id: str
    event_type: SubscriptionEventType
    previous_status: SubscriptionStatus | None = None
    new_status: SubscriptionStatus | None = None
    reason: str | None = None
    changed_by: str | None = None
    created_at: datetime


# ============================================================================
# Workflow values
# ============================================================================


@dataclass(frozen=True)
class Workflow:
    """Classification of a subscription request."""

    type: WorkflowType
    initial_status: SubscriptionStatus
    requires_payment: bool
    trial_days: int = 0
    payment_method: PaymentMethod | str | None = None


class ConfirmationPayload(AppBaseModel):
    """User-facing summary of a subscription outcome."""

    title: str
    description: str
    instructions: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)


# ============================================================================
# Requests and results
# ============================================================================


class SubscriptionRequest(AppBaseModel):
    """Request to start a subscription."""

    user_id: str = Field(min_length=1)
    plan_id: str = Field(min_length=1)
    payment_method: PaymentMethod = PaymentMethod.CARD
    requires_payment: bool = True
    has_trial_period: bool = False
    trial_days: int | None = Field(None, ge=0, description="Overrides the plan's trial length")


class SubscriptionCreationResult(AppBaseModel):
    """Outcome of ``SubscriptionManager.create_subscription``."""

    success: bool
    message: str
    subscription: Subscription | None = None
    invoice: Invoice | None = None
    transaction: Transaction | None = None
    confirmation_data: ConfirmationPayload | None = None


class SubscriptionStatusUpdateRequest(AppBaseModel):
    status: SubscriptionStatus
    reason: str | None = Field(None, max_length=500)
    changed_by: str | None = None


class SubscriptionCancelRequest(AppBaseModel):
    reason: str | None = Field(None, max_length=500)
    effective_date: datetime | None = None


class RenewalResult(AppBaseModel):
    """Outcome of a renewal attempt."""

    renewed: bool
    message: str
    subscription: Subscription | None = None
    invoice: Invoice | None = None
    transaction: Transaction | None = None


class BillingSummary(AppBaseModel):
    """Subscriber-facing billing totals."""

    user_id: str
    current_subscription: Subscription | None = None
    total_paid: Decimal = Decimal("0")
    total_pending: Decimal = Decimal("0")
    invoices: list[Invoice] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)


class DashboardStats(AppBaseModel):
    """Administration dashboard figures."""

    total_users: int
    active_subscriptions: int
    total_revenue: Decimal
    monthly_growth: float
    pending_transactions: int
    expired_trials: int

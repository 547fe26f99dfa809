"""
Subscription workflow engine.

Pure functions decide how a subscription starts (``workflow``), build its
records (``records``) and the user-facing confirmation (``confirmation``);
``service.SubscriptionManager`` wires them to the data store.
"""

from saasdesk.billing.subscriptions.confirmation import generate_confirmation
from saasdesk.billing.subscriptions.models import (
    BillingPeriod,
    ConfirmationPayload,
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    Plan,
    Subscription,
    SubscriptionCreationResult,
    SubscriptionRequest,
    SubscriptionStatus,
    Transaction,
    TransactionStatus,
    Workflow,
    WorkflowType,
)
from saasdesk.billing.subscriptions.workflow import determine_workflow

__all__ = [
    "BillingPeriod",
    "ConfirmationPayload",
    "Invoice",
    "InvoiceStatus",
    "PaymentMethod",
    "Plan",
    "Subscription",
    "SubscriptionCreationResult",
    "SubscriptionRequest",
    "SubscriptionStatus",
    "Transaction",
    "TransactionStatus",
    "Workflow",
    "WorkflowType",
    "determine_workflow",
    "generate_confirmation",
]

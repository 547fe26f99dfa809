"""
Billing system module.

Provides:
- Subscription workflow and lifecycle
- Invoice and transaction records
- Money formatting
- Billing email templates
"""

from saasdesk.billing.exceptions import (
    BillingConfigurationError,
    BillingError,
    NotificationError,
    PlanNotFoundError,
    SubscriptionError,
    SubscriptionNotFoundError,
    SubscriptionStateError,
    UserNotFoundError,
)

__all__ = [
    "BillingError",
    "BillingConfigurationError",
    "NotificationError",
    "PlanNotFoundError",
    "SubscriptionError",
    "SubscriptionNotFoundError",
    "SubscriptionStateError",
    "UserNotFoundError",
]

"""
Subscription workflow classification.

Maps a subscription request onto one of four start-up workflows.
The rules are evaluated in a fixed order and the first match wins.
"""

from saasdesk.billing.subscriptions.models import (
    PaymentMethod,
    Plan,
    SubscriptionRequest,
    SubscriptionStatus,
    Workflow,
    WorkflowType,
)


def resolve_trial_days(request: SubscriptionRequest, plan: Plan) -> int:
    """Request override first, then the plan's trial length, then zero."""
    return request.trial_days or plan.trial_days or 0


def determine_workflow(
    has_trial_period: bool,
    requires_payment: bool,
    payment_method: PaymentMethod | str,
    trial_days: int,
) -> Workflow:
    """
    Classify a subscription request.

    Args:
        has_trial_period: Whether the subscriber starts with a trial
        requires_payment: Whether a payment is required up front
        payment_method: Payment method; unrecognised values fall through
            to the pending workflow
        trial_days: Resolved trial length in days

    Returns:
        Workflow descriptor with the initial subscription status
    """
    if has_trial_period:
        return Workflow(
            type=WorkflowType.TRIAL,
            initial_status=SubscriptionStatus.TRIALING,
            requires_payment=requires_payment,
            trial_days=trial_days,
            payment_method=payment_method,
        )

    if payment_method == PaymentMethod.CARD and requires_payment:
        return Workflow(
            type=WorkflowType.IMMEDIATE_CARD,
            initial_status=SubscriptionStatus.ACTIVE,
            requires_payment=True,
            payment_method=payment_method,
        )

    if payment_method == PaymentMethod.BANK_TRANSFER:
        return Workflow(
            type=WorkflowType.MANUAL_PAYMENT,
            initial_status=SubscriptionStatus.PENDING_APPROVAL,
            requires_payment=True,
            payment_method=payment_method,
        )

    return Workflow(
        type=WorkflowType.PENDING,
        initial_status=SubscriptionStatus.PENDING_PAYMENT,
        requires_payment=requires_payment,
        payment_method=payment_method,
    )


def workflow_for_request(request: SubscriptionRequest, plan: Plan) -> Workflow:
    """Classify a validated request against its plan."""
    return determine_workflow(
        has_trial_period=request.has_trial_period,
        requires_payment=request.requires_payment,
        payment_method=request.payment_method,
        trial_days=resolve_trial_days(request, plan),
    )

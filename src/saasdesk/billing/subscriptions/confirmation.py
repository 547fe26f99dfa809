"""Confirmation content shown after a subscription is created."""

from saasdesk.billing.money_utils import format_amount
from saasdesk.billing.subscriptions.models import (
    ConfirmationPayload,
    PaymentMethod,
    Plan,
    Subscription,
    Workflow,
    WorkflowType,
)


def _trial_confirmation(workflow: Workflow, plan: Plan, price: str) -> ConfirmationPayload:
    if workflow.requires_payment:
        charge = (
            "automatically charged"
            if workflow.payment_method == PaymentMethod.CARD
            else "required"
        )
        payment_instruction = f"Payment of {price} will be {charge} at trial end"
    else:
        payment_instruction = "Add payment method before trial expires"

    if workflow.payment_method == PaymentMethod.BANK_TRANSFER:
        payment_step = "Complete bank transfer before trial ends"
    else:
        payment_step = "Ensure payment method is valid"

    return ConfirmationPayload(
        title="Trial Subscription Started",
        description=f"Your {plan.name} trial is now active for {workflow.trial_days} days.",
        instructions=[
            f"Trial period: {workflow.trial_days} days",
            f"Full access to all {plan.name} features",
            payment_instruction,
        ],
        next_steps=[
            "Explore all available features",
            "Set up your account preferences",
            payment_step,
        ],
    )


def generate_confirmation(
    workflow: Workflow,
    plan: Plan,
    subscription: Subscription,
    locale: str | None = None,
) -> ConfirmationPayload:
    """Build the confirmation payload for a workflow.

    Unknown workflow types get the generic pending content.
    """
    price = format_amount(plan.price, plan.currency, locale)

    if workflow.type == WorkflowType.TRIAL:
        return _trial_confirmation(workflow, plan, price)

    if workflow.type == WorkflowType.IMMEDIATE_CARD:
        return ConfirmationPayload(
            title="Subscription Confirmed",
            description=f"Your {plan.name} subscription is now active.",
            instructions=[
                f"Payment of {price} processed successfully",
                "Full access to all features",
                "Auto-renewal enabled",
            ],
            next_steps=[
                "Start using your subscription",
                "Check your email for receipt",
                "Explore premium features",
            ],
        )

    if workflow.type == WorkflowType.MANUAL_PAYMENT:
        return ConfirmationPayload(
            title="Subscription Pending Payment",
            description=f"Your {plan.name} subscription is awaiting payment confirmation.",
            instructions=[
                "Complete bank transfer payment",
                f"Amount: {price} {plan.currency}",
                f"Include subscription ID {subscription.id} in transfer reference",
            ],
            next_steps=[
                "Make the bank transfer payment",
                "Email payment confirmation",
                "Wait for admin approval",
            ],
        )

    return ConfirmationPayload(
        title="Subscription Created",
        description=f"Your {plan.name} subscription has been created.",
        instructions=[
            "Payment processing required",
            f"Amount: {price} {plan.currency}",
        ],
        next_steps=[
            "Complete payment process",
            "Check email for instructions",
        ],
    )

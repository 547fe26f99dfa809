"""
Tests for subscription workflow classification.
"""

from decimal import Decimal

import pytest

from saasdesk.billing.subscriptions.models import (
    PaymentMethod,
    Plan,
    SubscriptionRequest,
    SubscriptionStatus,
    WorkflowType,
)
from saasdesk.billing.subscriptions.workflow import (
    determine_workflow,
    resolve_trial_days,
    workflow_for_request,
)


@pytest.fixture
def pro_plan() -> Plan:
    return Plan(id="pro", name="Pro Plan", price=Decimal("99.99"), trial_days=14)


class TestDetermineWorkflow:
    """Rule order: trial, immediate card, manual payment, pending."""

    @pytest.mark.parametrize("payment_method", list(PaymentMethod))
    @pytest.mark.parametrize("requires_payment", [True, False])
    def test_trial_takes_priority(self, payment_method, requires_payment):
        workflow = determine_workflow(
            has_trial_period=True,
            requires_payment=requires_payment,
            payment_method=payment_method,
            trial_days=14,
        )

        assert workflow.type == WorkflowType.TRIAL
        assert workflow.initial_status == SubscriptionStatus.TRIALING
        assert workflow.trial_days == 14
        assert workflow.requires_payment is requires_payment
        assert workflow.payment_method == payment_method

    def test_card_with_payment_is_immediate(self):
        workflow = determine_workflow(False, True, PaymentMethod.CARD, 0)

        assert workflow.type == WorkflowType.IMMEDIATE_CARD
        assert workflow.initial_status == SubscriptionStatus.ACTIVE
        assert workflow.requires_payment is True

    @pytest.mark.parametrize("requires_payment", [True, False])
    def test_bank_transfer_is_manual_payment(self, requires_payment):
        workflow = determine_workflow(False, requires_payment, PaymentMethod.BANK_TRANSFER, 0)

        assert workflow.type == WorkflowType.MANUAL_PAYMENT
        assert workflow.initial_status == SubscriptionStatus.PENDING_APPROVAL
        assert workflow.requires_payment is True

    @pytest.mark.parametrize(
        ("payment_method", "requires_payment"),
        [
            (PaymentMethod.CHEQUE, True),
            (PaymentMethod.CASH, True),
            (PaymentMethod.CASH, False),
            (PaymentMethod.CARD, False),
        ],
    )
    def test_everything_else_is_pending(self, payment_method, requires_payment):
        workflow = determine_workflow(False, requires_payment, payment_method, 0)

        assert workflow.type == WorkflowType.PENDING
        assert workflow.initial_status == SubscriptionStatus.PENDING_PAYMENT
        assert workflow.requires_payment is requires_payment

    def test_unrecognised_payment_method_falls_through(self):
        workflow = determine_workflow(False, True, "CRYPTO", 0)

        assert workflow.type == WorkflowType.PENDING
        assert workflow.payment_method == "CRYPTO"

    def test_trial_days_ignored_outside_trial(self):
        workflow = determine_workflow(False, True, PaymentMethod.CARD, 14)

        assert workflow.trial_days == 0


class TestTrialDays:
    def test_request_override_wins(self, pro_plan):
        request = SubscriptionRequest(user_id="2", plan_id="pro", trial_days=30)

        assert resolve_trial_days(request, pro_plan) == 30

    def test_plan_trial_used_without_override(self, pro_plan):
        request = SubscriptionRequest(user_id="2", plan_id="pro")

        assert resolve_trial_days(request, pro_plan) == 14

    def test_zero_when_neither_defines_trial(self):
        plan = Plan(id="basic", name="Basic", price=Decimal("9.99"))
        request = SubscriptionRequest(user_id="2", plan_id="basic")

        assert resolve_trial_days(request, plan) == 0

    def test_workflow_for_request_carries_plan_trial(self, pro_plan):
        request = SubscriptionRequest(
            user_id="2", plan_id="pro", has_trial_period=True, requires_payment=False
        )

        workflow = workflow_for_request(request, pro_plan)

        assert workflow.type == WorkflowType.TRIAL
        assert workflow.trial_days == 14
        assert workflow.requires_payment is False

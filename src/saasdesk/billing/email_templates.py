"""
Email templates for subscription billing events.

All templates have HTML and plain text versions and use Jinja2 syntax.
"""

from typing import Any

from jinja2 import Environment, StrictUndefined, select_autoescape

from saasdesk.billing.subscriptions.models import (
    Plan,
    Subscription,
    Workflow,
    WorkflowType,
)

_env = Environment(
    autoescape=select_autoescape(default_for_string=False),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
_html_env = _env.overlay(autoescape=True)

# Email template registry
EMAIL_TEMPLATES: dict[str, dict[str, str]] = {
    "subscription_trial_started": {
        "subject": "Your {{ plan_name }} trial has started",
        "html": """
            <h2>Welcome to {{ plan_name }}!</h2>
            <p>Your trial is active for {{ trial_days }} days.</p>
            {% if trial_end_date %}
            <p><strong>Trial ends:</strong> {{ trial_end_date }}</p>
            {% endif %}
            <p><strong>Price after trial:</strong> {{ price_formatted }} / {{ billing_period }}</p>
            <p><a href="{{ dashboard_url }}">View Dashboard</a></p>
        """,
        "text": """
Welcome to {{ plan_name }}!

Your trial is active for {{ trial_days }} days.
{% if trial_end_date %}
Trial ends: {{ trial_end_date }}
{% endif %}
Price after trial: {{ price_formatted }} / {{ billing_period }}

Dashboard: {{ dashboard_url }}
        """,
    },
    "subscription_confirmed": {
        "subject": "Welcome to {{ plan_name }}!",
        "html": """
            <h2>Welcome to {{ plan_name }}!</h2>
            <p>Your payment of {{ price_formatted }} was processed and your subscription is active.</p>
            <ul>
                <li><strong>Invoice:</strong> {{ invoice_number }}</li>
                <li><strong>Start Date:</strong> {{ start_date }}</li>
                <li><strong>Next Billing:</strong> {{ next_billing_date }}</li>
            </ul>
            <p><a href="{{ dashboard_url }}">View Dashboard</a></p>
        """,
        "text": """
Welcome to {{ plan_name }}!

Your payment of {{ price_formatted }} was processed and your subscription is active.

- Invoice: {{ invoice_number }}
- Start Date: {{ start_date }}
- Next Billing: {{ next_billing_date }}

Dashboard: {{ dashboard_url }}
        """,
    },
    "subscription_pending_approval": {
        "subject": "Complete your bank transfer for {{ plan_name }}",
        "html": """
            <h2>Your {{ plan_name }} subscription is awaiting payment</h2>
            <p>Please transfer <strong>{{ price_formatted }} {{ currency }}</strong>.</p>
            <p>Include <strong>{{ subscription_id }}</strong> in the transfer reference.</p>
            <p>Invoice {{ invoice_number }} is due on {{ due_date }}.</p>
        """,
        "text": """
Your {{ plan_name }} subscription is awaiting payment.

Please transfer {{ price_formatted }} {{ currency }}.
Include {{ subscription_id }} in the transfer reference.
Invoice {{ invoice_number }} is due on {{ due_date }}.
        """,
    },
    "subscription_pending_payment": {
        "subject": "Payment required for {{ plan_name }}",
        "html": """
            <h2>Your {{ plan_name }} subscription has been created</h2>
            <p>Payment of {{ price_formatted }} {{ currency }} is required to activate it.</p>
            <p>Invoice {{ invoice_number }} is due on {{ due_date }}.</p>
        """,
        "text": """
Your {{ plan_name }} subscription has been created.

Payment of {{ price_formatted }} {{ currency }} is required to activate it.
Invoice {{ invoice_number }} is due on {{ due_date }}.
        """,
    },
    "subscription_canceled": {
        "subject": "Your subscription has been canceled",
        "html": """
            <h2>Subscription Canceled</h2>
            <p>Your {{ plan_name }} subscription has been canceled.</p>
            <p><strong>Access Until:</strong> {{ access_until_date }}</p>
            {% if reason %}
            <p><strong>Reason:</strong> {{ reason }}</p>
            {% endif %}
        """,
        "text": """
Subscription Canceled

Your {{ plan_name }} subscription has been canceled.
Access Until: {{ access_until_date }}
{% if reason %}
Reason: {{ reason }}
{% endif %}
        """,
    },
    "subscription_renewed": {
        "subject": "Your {{ plan_name }} subscription has been renewed",
        "html": """
            <h2>Subscription Renewed</h2>
            <p>Your {{ plan_name }} subscription now runs until {{ next_billing_date }}.</p>
            <p>Invoice {{ invoice_number }}: {{ price_formatted }} ({{ invoice_status }})</p>
        """,
        "text": """
Subscription Renewed

Your {{ plan_name }} subscription now runs until {{ next_billing_date }}.
Invoice {{ invoice_number }}: {{ price_formatted }} ({{ invoice_status }})
        """,
    },
}

WORKFLOW_TEMPLATES = {
    WorkflowType.TRIAL: "subscription_trial_started",
    WorkflowType.IMMEDIATE_CARD: "subscription_confirmed",
    WorkflowType.MANUAL_PAYMENT: "subscription_pending_approval",
    WorkflowType.PENDING: "subscription_pending_payment",
}


def template_for_workflow(workflow: Workflow) -> str:
    """Name of the notification template for a workflow."""
    return WORKFLOW_TEMPLATES.get(workflow.type, "subscription_pending_payment")


def render_string(source: str, context: dict[str, Any], html: bool = False) -> str:
    """Render a Jinja2 template string."""
    env = _html_env if html else _env
    return env.from_string(source).render(**context).strip()


def render_template(template_name: str, context: dict[str, Any]) -> tuple[str, str, str]:
    """
    Render email template with context data.

    Args:
        template_name: Name of the template to render
        context: Dictionary of variables to interpolate

    Returns:
        Tuple of (subject, html_body, text_body)
    """
    if template_name not in EMAIL_TEMPLATES:
        raise ValueError(f"Unknown email template: {template_name}")

    template = EMAIL_TEMPLATES[template_name]

    subject = render_string(template["subject"], context)
    html = render_string(template["html"], context, html=True)
    text = render_string(template["text"], context)

    return subject, html, text


def _format_date(value: Any) -> str:
    return value.strftime("%B %d, %Y") if value is not None else ""


def build_subscription_context(
    subscription: Subscription,
    plan: Plan,
    price_formatted: str,
    dashboard_url: str,
    invoice: Any | None = None,
) -> dict[str, Any]:
    """Build context shared by the subscription templates."""
    return {
        "plan_name": plan.name,
        "price_formatted": price_formatted,
        "currency": plan.currency,
        "billing_period": plan.billing_period.value.lower(),
        "subscription_id": subscription.id,
        "start_date": _format_date(subscription.start_date),
        "next_billing_date": _format_date(subscription.end_date),
        "trial_end_date": _format_date(subscription.trial_end_date),
        "trial_days": (
            (subscription.trial_end_date - subscription.start_date).days
            if subscription.trial_end_date
            else 0
        ),
        "invoice_number": invoice.invoice_number if invoice is not None else "",
        "invoice_status": invoice.status.value if invoice is not None else "",
        "due_date": _format_date(invoice.due_date) if invoice is not None else "",
        "dashboard_url": dashboard_url,
    }

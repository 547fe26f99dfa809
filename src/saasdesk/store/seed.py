"""Demo dataset for development and the in-memory store."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal

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
)
from saasdesk.communications.models import (
    CampaignStatus,
    EmailCampaign,
    EmailTemplate,
    TemplateCategory,
)
from saasdesk.users.models import User, UserRole


@dataclass
class SeedData:
    users: list[User] = field(default_factory=list)
    plans: list[Plan] = field(default_factory=list)
    subscriptions: list[Subscription] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    email_templates: list[EmailTemplate] = field(default_factory=list)
    email_campaigns: list[EmailCampaign] = field(default_factory=list)


def build_seed_data(now: datetime | None = None) -> SeedData:
    """Build the demo dataset relative to ``now``."""
    now = now or datetime.now(UTC)
    days = lambda n: timedelta(days=n)  # noqa: E731

    users = [
        User(id="1", email="admin@example.com", name="Admin User", role=UserRole.ADMIN,
             is_verified=True, created_at=now, updated_at=now),
        User(id="2", email="user1@example.com", name="John Doe", is_verified=True,
             created_at=now, updated_at=now),
        User(id="3", email="user2@example.com", name="Jane Smith", is_verified=False,
             created_at=now, updated_at=now),
    ]

    plans = [
        Plan(id="1", name="Basic Plan", description="Perfect for small businesses",
             price=Decimal("29.99"), currency="USD", billing_period=BillingPeriod.MONTHLY,
             features={"users": 5, "storage": "10GB", "support": "email"},
             trial_days=7, created_at=now, updated_at=now),
        Plan(id="2", name="Pro Plan", description="For growing companies",
             price=Decimal("99.99"), currency="USD", billing_period=BillingPeriod.MONTHLY,
             features={"users": 25, "storage": "100GB", "support": "priority"},
             trial_days=14, created_at=now, updated_at=now),
        Plan(id="3", name="Enterprise Plan", description="For large organizations",
             price=Decimal("299.99"), currency="USD", billing_period=BillingPeriod.MONTHLY,
             features={"users": "unlimited", "storage": "1TB", "support": "dedicated"},
             trial_days=30, created_at=now, updated_at=now),
    ]

    subscriptions = [
        Subscription(id="1", user_id="2", plan_id="1", status=SubscriptionStatus.ACTIVE,
                     start_date=now - days(30), end_date=now + days(30),
                     payment_method=PaymentMethod.CARD, created_at=now - days(30),
                     updated_at=now),
        Subscription(id="2", user_id="3", plan_id="2", status=SubscriptionStatus.TRIALING,
                     start_date=now - days(7), end_date=now + days(23),
                     trial_end_date=now + days(7), payment_method=PaymentMethod.BANK_TRANSFER,
                     created_at=now - days(7), updated_at=now),
    ]

    invoices = [
        Invoice(id="1", subscription_id="1", invoice_number=f"INV-{(now - days(30)).year}-000001",
                amount=Decimal("29.99"), currency="USD", status=InvoiceStatus.PAID,
                due_date=now - days(23), paid_date=now - days(30),
                created_at=now - days(30), updated_at=now - days(30)),
        Invoice(id="2", subscription_id="2", invoice_number=f"INV-{(now - days(7)).year}-000002",
                amount=Decimal("99.99"), currency="USD", status=InvoiceStatus.UNPAID,
                due_date=now, created_at=now - days(7), updated_at=now - days(7)),
    ]

    transactions = [
        Transaction(id="1", subscription_id="1", amount=Decimal("29.99"), currency="USD",
                    payment_method=PaymentMethod.CARD, status=TransactionStatus.COMPLETED,
                    transaction_date=now - days(30), created_at=now - days(30),
                    updated_at=now - days(30)),
        Transaction(id="2", subscription_id="2", amount=Decimal("99.99"), currency="USD",
                    payment_method=PaymentMethod.BANK_TRANSFER, status=TransactionStatus.PENDING,
                    transaction_date=now - days(7), created_at=now - days(7),
                    updated_at=now - days(7)),
    ]

    email_templates = [
        EmailTemplate(
            id="1", name="Welcome Email", subject="Welcome to {{ companyName }}!",
            html_content="<h1>Welcome {{ userName }}!</h1><p>Thanks for joining {{ companyName }}.</p>",
            text_content="Welcome {{ userName }}! Thanks for joining {{ companyName }}.",
            category=TemplateCategory.ONBOARDING, variables=["userName", "companyName"],
            created_at=now, updated_at=now,
        ),
        EmailTemplate(
            id="2", name="Magic Link", subject="Your login link for {{ companyName }}",
            html_content="<p>Click here to login: {{ magicLink }}</p>",
            text_content="Click here to login: {{ magicLink }}",
            category=TemplateCategory.AUTHENTICATION, variables=["magicLink", "companyName"],
            created_at=now, updated_at=now,
        ),
    ]

    email_campaigns = [
        EmailCampaign(id="1", name="Monthly Newsletter", subject="Your Monthly Update",
                      template_id="1", recipient_count=150, sent_count=150,
                      status=CampaignStatus.SENT, sent_at=now - days(7),
                      created_at=now, updated_at=now),
        EmailCampaign(id="2", name="Product Launch", subject="New Feature Announcement",
                      template_id="2", status=CampaignStatus.DRAFT,
                      created_at=now, updated_at=now),
    ]

    return SeedData(
        users=users,
        plans=plans,
        subscriptions=subscriptions,
        invoices=invoices,
        transactions=transactions,
        email_templates=email_templates,
        email_campaigns=email_campaigns,
    )

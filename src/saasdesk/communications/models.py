"""Email content and delivery models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import Field

from saasdesk.core.pydantic import RecordModel


class TemplateCategory(str, Enum):
    """Email template categories."""

    AUTHENTICATION = "AUTHENTICATION"
    ONBOARDING = "ONBOARDING"
    MARKETING = "MARKETING"
    TRANSACTIONAL = "TRANSACTIONAL"
    SUPPORT = "SUPPORT"
    SECURITY = "SECURITY"
    FEEDBACK = "FEEDBACK"
    REPORT = "REPORT"
    INVITATION = "INVITATION"
    REMINDER = "REMINDER"
    ALERT = "ALERT"
    COMPLIANCE = "COMPLIANCE"
    EDUCATIONAL = "EDUCATIONAL"


class CampaignStatus(str, Enum):
    """Email campaign lifecycle."""

    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    SENDING = "SENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


class EmailTemplate(RecordModel):
    """Stored email template with ``{{ variable }}`` placeholders."""

    id: str
    name: str
    subject: str
    html_content: str
    text_content: str
    category: TemplateCategory
    variables: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class EmailCampaign(RecordModel):
    """Bulk email campaign built on a template."""

    id: str
    name: str
    subject: str
    template_id: str
    recipient_count: int = Field(0, ge=0)
    sent_count: int = Field(0, ge=0)
    status: CampaignStatus = CampaignStatus.DRAFT
    scheduled_at: datetime | None = None
    sent_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class EmailDelivery(RecordModel):
    """Outcome of one notification send."""

    to: str
    template_name: str
    subject: str
    text_body: str
    html_body: str = ""
    status: DeliveryStatus = DeliveryStatus.SENT
    context: dict[str, Any] = Field(default_factory=dict)
    sent_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

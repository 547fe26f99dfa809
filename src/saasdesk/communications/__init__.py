"""Email notifications and stored email content."""

from saasdesk.communications.models import (
    CampaignStatus,
    DeliveryStatus,
    EmailCampaign,
    EmailDelivery,
    EmailTemplate,
    TemplateCategory,
)

__all__ = [
    "CampaignStatus",
    "DeliveryStatus",
    "EmailCampaign",
    "EmailDelivery",
    "EmailTemplate",
    "TemplateCategory",
]

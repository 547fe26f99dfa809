"""
Notification email senders.

Senders render a named template and deliver it to one address. Built-in
billing templates are looked up first, then stored templates by name.
"""

from abc import ABC, abstractmethod
from collections import deque
from typing import Any

import structlog

from saasdesk.billing.email_templates import EMAIL_TEMPLATES, render_string, render_template
from saasdesk.billing.exceptions import NotificationError
from saasdesk.communications.models import DeliveryStatus, EmailDelivery
from saasdesk.settings import Settings, get_settings
from saasdesk.store.interfaces import EmailContentRepository

logger = structlog.get_logger(__name__)


class EmailSender(ABC):
    """Delivers a named template to an address."""

    @abstractmethod
    async def send_template(
        self, to: str, template_name: str, context: dict[str, Any]
    ) -> EmailDelivery:
        """Render and deliver a template."""


class OutboxEmailSender(EmailSender):
    """Renders templates and keeps the most recent deliveries in an outbox."""

    def __init__(
        self,
        templates: EmailContentRepository | None = None,
        from_address: str = "noreply@example.com",
        outbox_size: int = 100,
    ) -> None:
        self._templates = templates
        self.from_address = from_address
        # oldest deliveries drop off once the outbox is full
        self.outbox: deque[EmailDelivery] = deque(maxlen=outbox_size)

    async def _render(self, template_name: str, context: dict[str, Any]) -> tuple[str, str, str]:
        if template_name in EMAIL_TEMPLATES:
            return render_template(template_name, context)

        stored = None
        if self._templates is not None:
            stored = await self._templates.get_email_template_by_name(template_name)
        if stored is None:
            raise NotificationError(f"Unknown email template: {template_name}", template_name)

        return (
            render_string(stored.subject, context),
            render_string(stored.html_content, context, html=True),
            render_string(stored.text_content, context),
        )

    async def send_template(
        self, to: str, template_name: str, context: dict[str, Any]
    ) -> EmailDelivery:
        subject, html_body, text_body = await self._render(template_name, context)
        delivery = EmailDelivery(
            to=to,
            template_name=template_name,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            context=context,
        )
        self.outbox.append(delivery)
        logger.info(
            "email.sent",
            to=to,
            template=template_name,
            subject=subject,
            from_address=self.from_address,
        )
        return delivery


class DisabledEmailSender(EmailSender):
    """Sender used when email is switched off."""

    async def send_template(
        self, to: str, template_name: str, context: dict[str, Any]
    ) -> EmailDelivery:
        logger.debug("email.skipped", to=to, template=template_name, reason="email disabled")
        return EmailDelivery(
            to=to,
            template_name=template_name,
            subject="",
            text_body="",
            status=DeliveryStatus.SKIPPED,
            context=context,
        )


def get_email_sender(
    templates: EmailContentRepository | None = None, settings: Settings | None = None
) -> EmailSender:
    """Build the sender matching the email settings."""
    settings = settings or get_settings()
    if not settings.email.enabled:
        return DisabledEmailSender()
    return OutboxEmailSender(
        templates,
        from_address=settings.email.from_address,
        outbox_size=settings.email.outbox_size,
    )

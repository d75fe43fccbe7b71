"""
Safe Haven Backend: Contact Form Service
==========================================

What:  Forwards a contact form submission to the office and sends the
       sender an auto-reply.
Who:   POST /api/contact.

Mail failures are logged and swallowed: the visitor always gets the
success message, and the submission itself stays in the server log so the
office can follow up.
"""

import logging
from datetime import datetime, timezone

from safehaven.config import settings
from safehaven.exceptions import MailDeliveryError
from safehaven.schemas.contact import ContactRequest
from safehaven.services.email_templates import (
    contact_auto_reply_template,
    contact_notification_template,
)
from safehaven.services.mail_service import MailMessage, MailService

logger = logging.getLogger(__name__)


class ContactService:

    def __init__(self, mailer: MailService):
        self.mailer = mailer

    async def submit(self, request: ContactRequest) -> bool:
        """Returns True when both messages were handed to the mail transport."""
        received_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        messages = [
            MailMessage(
                sender=settings.mail_from,
                to=settings.contact_email,
                subject=f"SHRM Contact Form: {request.subject.label}",
                html=contact_notification_template(
                    name=request.name,
                    email=request.email,
                    phone=request.phone or "",
                    subject=request.subject,
                    message=request.message,
                    received_at=received_at,
                ),
            ),
            MailMessage(
                sender=settings.mail_from,
                to=request.email,
                subject="Thank you for contacting SHRM - We'll be in touch soon",
                html=contact_auto_reply_template(request.name, request.subject),
            ),
        ]

        delivered = True
        for message in messages:
            try:
                delivered = await self.mailer.send(message) and delivered
            except MailDeliveryError as e:
                delivered = False
                logger.error("Contact email to %s not delivered: %s", message.to, e.message)

        if not delivered:
            logger.warning(
                "Contact submission kept in log only: subject=%s from=%s",
                request.subject.value,
                request.email,
            )
        return delivered

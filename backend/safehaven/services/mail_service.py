"""
Safe Haven Backend: Mail Dispatch
===================================

What:  Abstract mail interface plus the SMTP implementation used in production.
Why:   Booking and contact flows only need "send this message"; tests swap
       in a recording fake, and a different provider can be added without
       touching the flows.
How:   SMTPMailService runs blocking smtplib calls in a worker thread and
       retries transient failures with tenacity (exponential backoff + jitter).

Failure policy:
    send() raises MailDeliveryError once retries are exhausted. Callers in
    the booking and contact flows catch it and log: a booking is durably
    recorded even when its confirmation email never leaves.

    When SMTP credentials are missing, send() logs and returns False instead
    of raising, so local development works without a mail relay.
"""

import asyncio
import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from safehaven.config import settings
from safehaven.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)

# Permanent failures: retrying with the same credentials/recipients cannot help
_PERMANENT_SMTP_ERRORS = (
    smtplib.SMTPAuthenticationError,
    smtplib.SMTPRecipientsRefused,
    smtplib.SMTPSenderRefused,
)


@dataclass(frozen=True)
class MailMessage:
    sender: str
    to: str
    subject: str
    html: str


class MailService(ABC):
    """
    Contract:
        - send() returns True when the message was handed to the transport
        - returns False when sending is disabled by configuration
        - raises MailDeliveryError for every transport failure
    """

    @property
    @abstractmethod
    def configured(self) -> bool:
        ...

    @abstractmethod
    async def send(self, message: MailMessage) -> bool:
        ...


class SMTPMailService(MailService):
    """SMTP relay client. Settings are read per instance so tests can tune retries."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: Optional[bool] = None,
        starttls: Optional[bool] = None,
        timeout: Optional[int] = None,
        max_attempts: Optional[int] = None,
        min_wait: Optional[float] = None,
        max_wait: Optional[float] = None,
    ):
        self.host = host if host is not None else settings.smtp_host
        self.port = port if port is not None else settings.smtp_port
        self.username = username if username is not None else settings.smtp_user
        self.password = password if password is not None else settings.smtp_password
        self.use_ssl = use_ssl if use_ssl is not None else settings.smtp_use_ssl
        self.starttls = starttls if starttls is not None else settings.smtp_starttls
        self.timeout = timeout if timeout is not None else settings.smtp_timeout
        self.max_attempts = max_attempts if max_attempts is not None else settings.mail_retry_attempts
        self.min_wait = min_wait if min_wait is not None else settings.mail_retry_min_wait
        self.max_wait = max_wait if max_wait is not None else settings.mail_retry_max_wait

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    async def send(self, message: MailMessage) -> bool:
        if not self.configured:
            logger.warning(
                "Email configuration not found; skipping '%s' to %s",
                message.subject,
                message.to,
            )
            return False

        retrying = AsyncRetrying(
            retry=(
                retry_if_exception_type((smtplib.SMTPException, OSError))
                & retry_if_not_exception_type(_PERMANENT_SMTP_ERRORS)
            ),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(initial=self.min_wait, max=self.max_wait, jitter=1),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email '%s' to %s failed: %s", message.subject, message.to, str(e))
            raise MailDeliveryError(
                context={
                    "to": message.to,
                    "subject": message.subject,
                    "error_type": type(e).__name__,
                }
            ) from e

        logger.info("Email '%s' sent to %s", message.subject, message.to)
        return True

    def _deliver(self, message: MailMessage) -> None:
        mime = MIMEText(message.html, "html", "utf-8")
        mime["Subject"] = message.subject
        mime["From"] = message.sender
        mime["To"] = message.to

        if self.use_ssl:
            server = smtplib.SMTP_SSL(
                self.host, self.port, context=ssl.create_default_context(), timeout=self.timeout
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)

        with server:
            if not self.use_ssl and self.starttls:
                server.starttls(context=ssl.create_default_context())
            server.login(self.username, self.password)
            server.send_message(mime)


mail_service = SMTPMailService()

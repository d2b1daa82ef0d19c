"""SMTP email adapter — delivers notifications through an SMTP relay with aiosmtplib."""

from email.message import EmailMessage
from email.utils import make_msgid

import aiosmtplib
import structlog

from notifications.channel.email_port import EmailPort, EmailReceipt
from shared.settings import MailTransportConfig

logger = structlog.get_logger(__name__)


class SmtpEmailAdapter(EmailPort):
    """Sends one message per connection, upgraded with STARTTLS when configured."""

    def __init__(self, config: MailTransportConfig) -> None:
        self.config = config

    def _build_message(self, to: str, subject: str, body: str, html_body: str | None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.config.sender_name
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> EmailReceipt:
        message = self._build_message(to, subject, body, html_body)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.auth_email or None,
                password=self.config.auth_password or None,
                start_tls=self.config.use_tls,
                timeout=self.config.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            # OSError covers refused connections raised before the SMTP dialogue
            return EmailReceipt(sent=False, error=f"{type(exc).__name__}: {exc}")

        logger.debug("Email handed to SMTP relay", to=to, host=self.config.host)
        return EmailReceipt(sent=True, message_id=message["Message-ID"])

"""In-memory email adapter for development and tests."""

from uuid import uuid4

from notifications.channel.email_port import EmailPort, EmailReceipt


class FakeEmailAdapter(EmailPort):
    """Keeps outgoing mail in memory instead of delivering it; can be told to fail."""

    def __init__(self) -> None:
        self.sent_emails: list[dict] = []
        self.attempts = 0
        self.failure_reason: str | None = None

    def configure(self, should_succeed: bool = True, failure_reason: str = "Email delivery failed") -> None:
        self.failure_reason = None if should_succeed else failure_reason

    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> EmailReceipt:
        self.attempts += 1
        if self.failure_reason is not None:
            return EmailReceipt(sent=False, error=self.failure_reason)

        message_id = f"<{uuid4().hex}@fake.mail>"
        self.sent_emails.append(
            {
                "message_id": message_id,
                "to": to,
                "subject": subject,
                "body": body,
                "html_body": html_body,
            }
        )
        return EmailReceipt(sent=True, message_id=message_id)

    def sent_to(self, address: str) -> list[dict]:
        return [message for message in self.sent_emails if message["to"] == address]

"""Email channel registry.

Provides singleton access to the email adapter. The fake adapter is used
until an SMTP host other than localhost is configured, or until a test
installs its own adapter.
"""

from notifications.channel.email_port import EmailPort
from shared.settings import get_settings

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        settings = get_settings()
        if settings.smtp_host and settings.smtp_host != "localhost":
            from notifications.channel.smtp_email import SmtpEmailAdapter

            _email_channel = SmtpEmailAdapter(settings.mail_transport)
        else:
            from notifications.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_channels():
    """Reset the channel singleton (useful for testing)."""
    global _email_channel
    _email_channel = None

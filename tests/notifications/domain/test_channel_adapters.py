"""Tests for the email channel adapters and their registry."""

import asyncio

import aiosmtplib
from notifications.channel import get_email_channel, reset_channels
from notifications.channel.email_port import EmailReceipt
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.channel.smtp_email import SmtpEmailAdapter
from shared.settings import MailTransportConfig

CONFIG = MailTransportConfig(
    host="smtp.example.test",
    port=587,
    sender_name="Storefront <noreply@example.test>",
    auth_email="noreply@example.test",
    auth_password="secret",
)


class _RecordingRelay:
    """Stands in for `aiosmtplib.send`, keeping each message and its connection options."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.deliveries: list[tuple] = []

    async def __call__(self, message, **options):
        if self.error is not None:
            raise self.error
        self.deliveries.append((message, options))
        return {}, "250 OK"


def _install_relay(monkeypatch, error=None) -> _RecordingRelay:
    relay = _RecordingRelay(error)
    monkeypatch.setattr(aiosmtplib, "send", relay)
    return relay


def _send(adapter, **fields):
    return asyncio.run(adapter.send(**fields))


class TestSmtpEmailAdapter:
    def test_send(self, monkeypatch):
        relay = _install_relay(monkeypatch)
        result = _send(
            SmtpEmailAdapter(CONFIG),
            to="dewi@example.com",
            subject="ORDER NOTIFICATION",
            body="plain",
            html_body="<p>html</p>",
        )

        assert result.sent is True
        message, options = relay.deliveries[0]
        assert result.message_id == message["Message-ID"]
        assert options == {
            "hostname": "smtp.example.test",
            "port": 587,
            "username": "noreply@example.test",
            "password": "secret",
            "start_tls": True,
            "timeout": 10.0,
        }

        assert message["To"] == "dewi@example.com"
        assert message["From"] == "Storefront <noreply@example.test>"
        assert message["Subject"] == "ORDER NOTIFICATION"
        assert message.get_body(preferencelist=("html",)).get_content().strip() == "<p>html</p>"

    def test_plain_text_only(self, monkeypatch):
        relay = _install_relay(monkeypatch)
        _send(SmtpEmailAdapter(CONFIG), to="dewi@example.com", subject="s", body="plain")
        message, _ = relay.deliveries[0]
        assert not message.is_multipart()

    def test_relay_without_credentials(self, monkeypatch):
        relay = _install_relay(monkeypatch)
        config = MailTransportConfig(
            host="relay.internal",
            port=25,
            sender_name="Storefront <noreply@example.test>",
            auth_email="",
            auth_password="",
            use_tls=False,
        )
        _send(SmtpEmailAdapter(config), to="dewi@example.com", subject="s", body="b")

        _, options = relay.deliveries[0]
        assert options["username"] is None
        assert options["password"] is None
        assert options["start_tls"] is False

    def test_login_failure(self, monkeypatch):
        _install_relay(monkeypatch, error=aiosmtplib.SMTPAuthenticationError(535, "Authentication failed"))
        result = _send(SmtpEmailAdapter(CONFIG), to="dewi@example.com", subject="s", body="b")

        assert result.sent is False
        assert "SMTPAuthenticationError" in result.error

    def test_timeout(self, monkeypatch):
        _install_relay(monkeypatch, error=aiosmtplib.SMTPTimeoutError("Timed out connecting"))
        result = _send(SmtpEmailAdapter(CONFIG), to="dewi@example.com", subject="s", body="b")

        assert result.sent is False
        assert "SMTPTimeoutError" in result.error

    def test_connection_refused(self, monkeypatch):
        _install_relay(monkeypatch, error=ConnectionRefusedError("Connection refused"))
        result = _send(SmtpEmailAdapter(CONFIG), to="dewi@example.com", subject="s", body="b")

        assert result.sent is False
        assert "ConnectionRefusedError" in result.error


class TestFakeEmailAdapter:
    def test_records_sent_email(self):
        adapter = FakeEmailAdapter()
        receipt = _send(adapter, to="a@example.test", subject="s", body="b")
        assert receipt.sent is True
        assert adapter.sent_to("a@example.test")[0]["message_id"] == receipt.message_id
        assert adapter.sent_to("b@example.test") == []

    def test_configured_failure(self):
        adapter = FakeEmailAdapter()
        adapter.configure(should_succeed=False, failure_reason="down")
        assert _send(adapter, to="a@example.test", subject="s", body="b") == EmailReceipt(sent=False, error="down")
        assert adapter.sent_emails == []
        assert adapter.attempts == 1

    def test_recovers_after_reconfigure(self):
        adapter = FakeEmailAdapter()
        adapter.configure(should_succeed=False)
        adapter.configure(should_succeed=True)
        assert _send(adapter, to="a@example.test", subject="s", body="b").sent is True


class TestEmailChannelRegistry:
    def test_fake_without_smtp_host(self):
        reset_channels()
        assert isinstance(get_email_channel(), FakeEmailAdapter)

    def test_singleton(self):
        reset_channels()
        assert get_email_channel() is get_email_channel()

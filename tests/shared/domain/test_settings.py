"""Tests for environment-driven settings and the order clocks."""

from datetime import UTC, datetime, timedelta

import pytest
from shared.clock import FixedClock, ZoneClock, get_clock, reset_clock, set_clock
from shared.settings import MIDTRANS_PRODUCTION_URL, MIDTRANS_SANDBOX_URL, Settings


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PROTEAN_ENV", raising=False)
        settings = _settings()
        assert settings.timezone == "Asia/Jakarta"
        assert settings.verify_webhook_signature is False
        assert settings.mail_subject == "ORDER NOTIFICATION"
        assert settings.is_production is False

    def test_reads_deployment_variables(self, monkeypatch):
        monkeypatch.setenv("SERVER_KEY", "SB-Mid-server-abc")
        monkeypatch.setenv("CONFIG_SMTP_HOST", "smtp.gmail.com")
        monkeypatch.setenv("CONFIG_SMTP_PORT", "465")
        monkeypatch.setenv("CONFIG_AUTH_EMAIL", "shop@example.com")
        monkeypatch.setenv("CONFIG_AUTH_PASSWORD", "app-password")
        monkeypatch.setenv("CONFIG_SENDER_NAME", "Shop <shop@example.com>")

        settings = _settings()

        assert settings.gateway.server_key == "SB-Mid-server-abc"
        transport = settings.mail_transport
        assert (transport.host, transport.port) == ("smtp.gmail.com", 465)
        assert transport.auth_email == "shop@example.com"
        assert transport.auth_password == "app-password"
        assert transport.sender_name == "Shop <shop@example.com>"

    def test_production_environment(self, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        assert _settings().is_production is True

    def test_gateway_endpoint_follows_mode(self):
        assert _settings(midtrans_is_production=False).gateway.base_url == MIDTRANS_SANDBOX_URL
        assert _settings(midtrans_is_production=True).gateway.base_url == MIDTRANS_PRODUCTION_URL


class TestClocks:
    def test_zone_clock_is_aware(self):
        now = ZoneClock("Asia/Jakarta").now()
        assert now.utcoffset() == timedelta(hours=7)

    def test_fixed_clock_needs_aware_instant(self):
        with pytest.raises(ValueError):
            FixedClock(datetime(2024, 1, 2))

    def test_fixed_clock_ticks_nanoseconds(self):
        clock = FixedClock(datetime(2024, 1, 2, tzinfo=UTC))
        assert clock.now_ns() < clock.now_ns()
        assert clock.now() == datetime(2024, 1, 2, tzinfo=UTC)

    def test_clock_registry(self):
        fixed = FixedClock(datetime(2024, 1, 2, tzinfo=UTC))
        set_clock(fixed)
        assert get_clock() is fixed
        reset_clock()
        assert isinstance(get_clock(), ZoneClock)

"""Application settings loaded from the environment.

Credentials and transport details are read once and handed to the adapters
that need them as plain config objects, so nothing below the API layer reads
os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIDTRANS_SANDBOX_URL = "https://app.sandbox.midtrans.com/snap/v1"
MIDTRANS_PRODUCTION_URL = "https://app.midtrans.com/snap/v1"


@dataclass(frozen=True)
class MailTransportConfig:
    """Everything the SMTP adapter needs to deliver a message."""

    host: str
    port: int
    sender_name: str
    auth_email: str
    auth_password: str
    use_tls: bool = True
    timeout: float = 10.0


@dataclass(frozen=True)
class GatewayConfig:
    """Credentials and endpoint for the Midtrans Snap API."""

    server_key: str
    base_url: str
    timeout: float = 10.0


class Settings(BaseSettings):
    """Storefront settings, populated from environment variables or `.env`."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    environment: str = Field(default="development", validation_alias="PROTEAN_ENV")
    timezone: str = Field(default="Asia/Jakarta", description="Fixed zone for order dates")
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")

    # Payment gateway
    midtrans_server_key: str = Field(default="", validation_alias="SERVER_KEY")
    midtrans_is_production: bool = Field(default=False)
    gateway_timeout: float = Field(default=10.0, gt=0)
    verify_webhook_signature: bool = Field(default=False)

    # Mail transport
    smtp_host: str = Field(default="localhost", validation_alias="CONFIG_SMTP_HOST")
    smtp_port: int = Field(default=587, validation_alias="CONFIG_SMTP_PORT")
    smtp_sender_name: str = Field(default="Storefront <noreply@localhost>", validation_alias="CONFIG_SENDER_NAME")
    smtp_auth_email: str = Field(default="", validation_alias="CONFIG_AUTH_EMAIL")
    smtp_auth_password: str = Field(default="", validation_alias="CONFIG_AUTH_PASSWORD")
    smtp_use_tls: bool = Field(default=True)
    mail_timeout: float = Field(default=10.0, gt=0)
    mail_subject: str = Field(default="ORDER NOTIFICATION")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def mail_transport(self) -> MailTransportConfig:
        return MailTransportConfig(
            host=self.smtp_host,
            port=self.smtp_port,
            sender_name=self.smtp_sender_name,
            auth_email=self.smtp_auth_email,
            auth_password=self.smtp_auth_password,
            use_tls=self.smtp_use_tls,
            timeout=self.mail_timeout,
        )

    @property
    def gateway(self) -> GatewayConfig:
        base_url = MIDTRANS_PRODUCTION_URL if self.midtrans_is_production else MIDTRANS_SANDBOX_URL
        return GatewayConfig(
            server_key=self.midtrans_server_key,
            base_url=base_url,
            timeout=self.gateway_timeout,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (read once)."""
    return Settings()

"""Payment gateway factory.

The default gateway is chosen from settings: MidtransSnapGateway once a
server key is configured, FakeGateway otherwise. set_gateway() installs a
specific adapter (tests, the configure endpoint).
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.midtrans_adapter import MidtransSnapGateway
from payments.gateway.port import PaymentGateway
from shared.settings import get_settings

_current_gateway: PaymentGateway | None = None


def _default_gateway() -> PaymentGateway:
    settings = get_settings()
    if settings.midtrans_server_key:
        return MidtransSnapGateway(settings.gateway)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building the default on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None

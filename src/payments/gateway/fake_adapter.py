"""Configurable fake payment gateway for development and testing.

This adapter simulates the gateway without any external calls. It can be
configured at runtime to succeed or fail, making it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials
"""

from uuid import uuid4

from ordering.directory.port import CustomerProfile
from ordering.errors import GatewayFailure
from payments.gateway.port import PaymentGateway, TokenResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.times_out: bool = False
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Gateway unavailable",
        times_out: bool = False,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.times_out = times_out

    def request_token(
        self,
        order_id: str,
        amount: int,
        customer: CustomerProfile,
    ) -> TokenResult:
        self.calls.append(
            {
                "method": "request_token",
                "order_id": order_id,
                "amount": amount,
                "customer_name": customer.name,
                "customer_phone": customer.phone,
            }
        )

        if self.times_out:
            raise GatewayFailure("Gateway request timed out", order_id=order_id)
        if self.should_succeed:
            token = f"fake_tok_{uuid4().hex[:12]}"
            return TokenResult(
                success=True,
                token=token,
                redirect_url=f"https://pay.example.test/snap/{token}",
            )
        return TokenResult(success=False, failure_reason=self.failure_reason)

    def verify_webhook_signature(self, payload: dict) -> bool:
        return payload.get("signature_key") == "test-signature"

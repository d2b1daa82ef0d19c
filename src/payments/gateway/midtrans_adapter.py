"""Midtrans Snap payment gateway adapter.

Creates Snap transactions over HTTPS and verifies the signature Midtrans
attaches to every HTTP notification:

    signature_key = SHA512(order_id + status_code + gross_amount + server_key)
"""

import hashlib
import hmac

import httpx
import structlog

from ordering.directory.port import CustomerProfile
from ordering.errors import GatewayFailure
from payments.gateway.port import PaymentGateway, TokenResult
from shared.settings import GatewayConfig

logger = structlog.get_logger(__name__)


class MidtransSnapGateway(PaymentGateway):
    """Production gateway adapter backed by the Midtrans Snap API."""

    def __init__(self, config: GatewayConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self.client = client or httpx.Client(
            base_url=config.base_url,
            auth=(config.server_key, ""),
            timeout=config.timeout,
            headers={"Accept": "application/json"},
        )

    def _snap_request(self, order_id: str, amount: int, customer: CustomerProfile) -> dict:
        address = {
            "first_name": customer.name,
            "phone": customer.phone,
            "address": customer.address,
            "postal_code": customer.post_code,
        }
        return {
            "transaction_details": {"order_id": order_id, "gross_amount": amount},
            "credit_card": {"secure": True},
            "customer_details": {
                "first_name": customer.name,
                "email": customer.email,
                "phone": customer.phone,
                "billing_address": address,
                "shipping_address": address,
            },
        }

    def request_token(
        self,
        order_id: str,
        amount: int,
        customer: CustomerProfile,
    ) -> TokenResult:
        try:
            response = self.client.post("/transactions", json=self._snap_request(order_id, amount, customer))
        except httpx.TimeoutException as exc:
            raise GatewayFailure("Gateway request timed out", order_id=order_id) from exc
        except httpx.HTTPError as exc:
            raise GatewayFailure(f"Gateway request failed: {exc}", order_id=order_id) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400 or not body.get("token"):
            messages = body.get("error_messages") or [response.reason_phrase]
            return TokenResult(
                success=False,
                failure_reason=f"HTTP {response.status_code}: {'; '.join(str(m) for m in messages)}",
            )

        return TokenResult(success=True, token=body["token"], redirect_url=body.get("redirect_url"))

    def verify_webhook_signature(self, payload: dict) -> bool:
        signature = payload.get("signature_key")
        if not isinstance(signature, str):
            return False

        raw = "".join(
            str(payload.get(field, "")) for field in ("order_id", "status_code", "gross_amount")
        ) + self.config.server_key
        expected = hashlib.sha512(raw.encode("utf-8")).hexdigest()
        return hmac.compare_digest(expected, signature)

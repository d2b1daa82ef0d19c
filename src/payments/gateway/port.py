"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and
MidtransSnapGateway (production) without changing the ordering core.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ordering.directory.port import CustomerProfile


@dataclass(frozen=True)
class TokenResult:
    """Result of asking the gateway for a payment token."""

    success: bool
    token: str | None = None
    redirect_url: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def request_token(
        self,
        order_id: str,
        amount: int,
        customer: CustomerProfile,
    ) -> TokenResult:
        """Ask the gateway for a token the customer uses to pay `amount` for `order_id`.

        Adapters own their timeout. A request the gateway answered but refused
        comes back as a failed TokenResult; a request that never got an answer
        (timeout, connection error) raises GatewayFailure.
        """
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: dict) -> bool:
        """Verify that a notification payload is authentically from the gateway."""
        ...

"""Outbound email port used for customer order notifications."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailReceipt:
    """What an adapter reports back for one message."""

    sent: bool
    message_id: str | None = None
    error: str | None = None


class EmailPort(ABC):
    @abstractmethod
    async def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> EmailReceipt:
        """Deliver one message to `to`.

        Adapters bound each attempt by their own timeout and report
        failures in the receipt instead of raising.
        """
        ...

"""Inbound payment notifications from the gateway.

The gateway posts loosely-typed JSON. Parsing turns it into a typed
PaymentEvent or fails with MalformedPayload; nothing downstream ever
touches the raw payload.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from ordering.errors import MalformedPayload


class PaymentNotificationPayload(BaseModel):
    """The notification fields reconciliation acts on; everything else is ignored."""

    model_config = ConfigDict(extra="ignore")

    order_id: StrictStr
    transaction_status: StrictStr
    fraud_status: StrictStr | None = None


@dataclass(frozen=True)
class PaymentEvent:
    order_id: str
    transaction_status: str
    fraud_status: str | None = None


def parse_payment_event(payload: object) -> PaymentEvent:
    """Validate an untrusted notification payload.

    Raises MalformedPayload when the payload is not an object, or when
    `order_id`/`transaction_status` are missing or not strings, or when
    `fraud_status` is present but not a string.
    """
    if not isinstance(payload, dict):
        raise MalformedPayload(f"Expected a JSON object, got {type(payload).__name__}")

    try:
        parsed = PaymentNotificationPayload.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(loc) for loc in error["loc"]) for error in exc.errors()})
        raise MalformedPayload(f"Invalid notification fields: {', '.join(fields)}", fields=fields) from exc

    if not parsed.order_id.strip():
        raise MalformedPayload("Notification has an empty order_id", fields=["order_id"])

    return PaymentEvent(
        order_id=parsed.order_id,
        transaction_status=parsed.transaction_status.strip().lower(),
        fraud_status=parsed.fraud_status.strip().lower() if parsed.fraud_status else None,
    )

"""Webhook reconciler — maps gateway payment notifications onto order status.

The gateway retries any notification that is not acknowledged with a 2xx,
so reconciliation always produces an acknowledgement: malformed payloads,
unknown orders, vocabulary we do not act on, and transitions the status
graph refuses are all logged and acknowledged. Duplicate and out-of-order
deliveries are safe because every mapped action goes through the lifecycle
engine, which treats a repeated status as already applied.

The status write blocks on storage, so it runs in a worker thread; only the
customer email is awaited on the event loop.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

import structlog

from notifications.sender import NotificationSender, deliver_directive
from ordering.errors import InvalidTransition, MalformedPayload, NotFound, StorageFailure
from ordering.order.lifecycle import LifecycleEngine
from ordering.order.order import OrderStatus, TransitionSource
from payments.webhook.events import PaymentEvent, parse_payment_event

logger = structlog.get_logger(__name__)

ANY_FRAUD_STATUS = "*"


@dataclass(frozen=True)
class GatewayAction:
    """What a gateway (transaction_status, fraud_status) pair means for the order."""

    target: OrderStatus
    notify: bool
    label: str | None = None  # overrides the engine's notification label


# (transaction_status, fraud_status) → action. Exact fraud_status rows win over
# the wildcard row. `deny` deliberately does not notify the customer while
# `cancel`/`expire` do.
GATEWAY_ACTIONS = {
    ("capture", "challenge"): GatewayAction(OrderStatus.PENDING, notify=False),
    ("capture", "accept"): GatewayAction(OrderStatus.SUCCESS, notify=True, label="Success"),
    ("settlement", ANY_FRAUD_STATUS): GatewayAction(OrderStatus.SUCCESS, notify=True, label="success"),
    ("deny", ANY_FRAUD_STATUS): GatewayAction(OrderStatus.FAILED, notify=False),
    ("cancel", ANY_FRAUD_STATUS): GatewayAction(OrderStatus.FAILED, notify=True, label="Failed"),
    ("expire", ANY_FRAUD_STATUS): GatewayAction(OrderStatus.FAILED, notify=True, label="Failed"),
    ("pending", ANY_FRAUD_STATUS): GatewayAction(OrderStatus.PENDING, notify=False),
}


def resolve_action(event: PaymentEvent) -> GatewayAction | None:
    """Look up the action for an event; None means the event is not acted on."""
    if not event.transaction_status:
        return None
    exact = GATEWAY_ACTIONS.get((event.transaction_status, event.fraud_status))
    if exact is not None:
        return exact
    return GATEWAY_ACTIONS.get((event.transaction_status, ANY_FRAUD_STATUS))


class ReconcileOutcome(Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"
    IGNORED = "ignored"
    MALFORMED = "malformed"
    UNKNOWN_ORDER = "unknown_order"
    REJECTED_TRANSITION = "rejected_transition"
    FAILED = "failed"


@dataclass(frozen=True)
class Acknowledgement:
    """Returned for every notification; the HTTP layer always answers 2xx for it."""

    outcome: ReconcileOutcome
    order_id: str | None = None
    status: str | None = None
    notified: bool = False


class WebhookReconciler:
    def __init__(self, engine: LifecycleEngine, sender: NotificationSender) -> None:
        self.engine = engine
        self.sender = sender

    async def reconcile(self, payload: object) -> Acknowledgement:
        try:
            event = parse_payment_event(payload)
        except MalformedPayload as exc:
            logger.warning("Malformed payment notification", error=exc.message)
            return Acknowledgement(ReconcileOutcome.MALFORMED)

        action = resolve_action(event)
        if action is None:
            logger.info(
                "Payment notification not acted on",
                order_id=event.order_id,
                transaction_status=event.transaction_status,
                fraud_status=event.fraud_status,
            )
            return Acknowledgement(ReconcileOutcome.IGNORED, order_id=event.order_id)

        try:
            outcome = await asyncio.to_thread(
                self.engine.apply, event.order_id, action.target, TransitionSource.GATEWAY
            )
        except NotFound:
            logger.info("Payment notification for unknown order", order_id=event.order_id)
            return Acknowledgement(ReconcileOutcome.UNKNOWN_ORDER, order_id=event.order_id)
        except InvalidTransition as exc:
            logger.warning(
                "Payment notification refused by order lifecycle",
                order_id=event.order_id,
                transaction_status=event.transaction_status,
                error=exc.message,
            )
            return Acknowledgement(ReconcileOutcome.REJECTED_TRANSITION, order_id=event.order_id, status=exc.current)
        except StorageFailure as exc:
            logger.error(
                "Payment notification could not be stored",
                order_id=event.order_id,
                transaction_status=event.transaction_status,
                error=exc.message,
            )
            return Acknowledgement(ReconcileOutcome.FAILED, order_id=event.order_id)

        status = outcome.order.status
        if not outcome.changed:
            return Acknowledgement(ReconcileOutcome.ALREADY_APPLIED, order_id=event.order_id, status=status)

        notified = False
        if action.notify:
            notified = await deliver_directive(self.sender, outcome.order, outcome.notification, label=action.label)
        elif outcome.notification is not None:
            logger.info(
                "Customer notification suppressed for gateway status",
                order_id=event.order_id,
                transaction_status=event.transaction_status,
            )

        return Acknowledgement(ReconcileOutcome.APPLIED, order_id=event.order_id, status=status, notified=notified)

"""Order lifecycle engine — the only path by which an order's status changes.

The decision (is this transition legal, is it already applied, which
customer notification does it call for) is a pure function of the current
status, the requested status and who is asking. The engine persists the
decision through a compare-and-set status write and hands the notification
back to its caller as a directive; it never sends anything itself, so a
notification is only ever attempted for a write that has already landed.
"""

from dataclasses import dataclass

import structlog

from ordering.errors import InvalidRequest, StatusConflict, StorageFailure
from ordering.order.order import (
    Order,
    OrderStatus,
    TransitionSource,
    assert_can_transition,
)
from shared.clock import Clock, get_clock

logger = structlog.get_logger(__name__)

# Concurrent writers can each invalidate our read once; beyond this something is wrong.
MAX_WRITE_ATTEMPTS = 3

# (source, target) → customer-facing status label
NOTIFICATION_RULES = {
    (TransitionSource.GATEWAY, OrderStatus.SUCCESS): "Success",
    (TransitionSource.GATEWAY, OrderStatus.FAILED): "Failed",
    (TransitionSource.ADMIN, OrderStatus.REJECTED): "Rejected",
    (TransitionSource.ADMIN, OrderStatus.SENT): "Success, Product On Delivery",
    (TransitionSource.ADMIN, OrderStatus.DONE): "Success, Product Received",
}


@dataclass(frozen=True)
class NotificationDirective:
    """Instruction to notify the customer of an order with the given status label."""

    label: str


@dataclass(frozen=True)
class TransitionDecision:
    current: OrderStatus
    target: OrderStatus
    applies: bool  # False when the order is already in the target status
    notification: NotificationDirective | None = None


@dataclass(frozen=True)
class TransitionOutcome:
    """What the engine did: the order as stored now, and what the caller must send."""

    order: Order
    changed: bool
    notification: NotificationDirective | None = None


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError as exc:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise InvalidRequest(f"Unknown order status {value!r}; expected one of: {allowed}") from exc


def decide_transition(
    current: OrderStatus,
    requested: OrderStatus,
    source: TransitionSource,
) -> TransitionDecision:
    """Decide whether `current → requested` applies and what it must notify.

    Requesting the status an order already has is accepted as already
    applied, with no notification. Anything else must be an edge of the
    status graph, otherwise InvalidTransition is raised.
    """
    if current is requested:
        return TransitionDecision(current=current, target=requested, applies=False)

    assert_can_transition(current, requested, source)

    label = NOTIFICATION_RULES.get((source, requested))
    return TransitionDecision(
        current=current,
        target=requested,
        applies=True,
        notification=NotificationDirective(label) if label else None,
    )


class LifecycleEngine:
    """Applies status transitions to stored orders."""

    def __init__(self, repository, clock: Clock | None = None) -> None:
        self.repository = repository
        self.clock = clock or get_clock()

    def apply(self, order_id: str, requested: OrderStatus, source: TransitionSource) -> TransitionOutcome:
        """Apply `requested` to the order and return the outcome.

        Raises NotFound, InvalidTransition or StorageFailure; in each case the
        order is left as it was.
        """
        order = self.repository.find_by_id(order_id)

        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            decision = decide_transition(order.current_status, requested, source)
            if not decision.applies:
                logger.info(
                    "Order already in requested status",
                    order_id=order_id,
                    status=requested.value,
                    source=source.value,
                )
                return TransitionOutcome(order=order, changed=False)

            try:
                updated = self.repository.update_status(
                    order_id, decision.current, decision.target, source, self.clock.now()
                )
            except StatusConflict as exc:
                logger.info(
                    "Order status changed concurrently, re-evaluating",
                    order_id=order_id,
                    expected=decision.current.value,
                    actual=exc.actual,
                    attempt=attempt,
                )
                order = self.repository.find_by_id(order_id)
                continue

            logger.info(
                "Order status changed",
                order_id=order_id,
                previous_status=decision.current.value,
                new_status=decision.target.value,
                source=source.value,
            )
            return TransitionOutcome(order=updated, changed=True, notification=decision.notification)

        raise StorageFailure(
            f"Order {order_id} kept changing concurrently; gave up after {MAX_WRITE_ATTEMPTS} attempts",
            order_id=order_id,
        )

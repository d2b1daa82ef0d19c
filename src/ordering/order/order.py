"""Order aggregate — a customer purchase with its line items and status.

State Machine:
    new → pending | success | failed | rejected
    pending → success | failed
    success → sent → done
    done, failed, rejected are terminal

Line items are fixed when the order is placed. The total is computed from
the product snapshots at that moment and never changes afterwards. Once the
gateway has issued a payment token it is never cleared or replaced.
"""

import json
from datetime import datetime
from enum import Enum

from protean.fields import (
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import InvalidRequest, InvalidTransition
from ordering.order.events import OrderPlaced, OrderStatusChanged, PaymentTokenAssigned


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    NEW = "new"
    PENDING = "pending"
    SUCCESS = "success"
    SENT = "sent"
    DONE = "done"
    FAILED = "failed"
    REJECTED = "rejected"


class TransitionSource(Enum):
    ADMIN = "admin"
    GATEWAY = "gateway"


# State machine transition map
VALID_TRANSITIONS = {
    OrderStatus.NEW: {
        OrderStatus.PENDING,
        OrderStatus.SUCCESS,
        OrderStatus.FAILED,
        OrderStatus.REJECTED,
    },
    OrderStatus.PENDING: {OrderStatus.SUCCESS, OrderStatus.FAILED},
    OrderStatus.SUCCESS: {OrderStatus.SENT},
    OrderStatus.SENT: {OrderStatus.DONE},
    OrderStatus.DONE: set(),  # Terminal
    OrderStatus.FAILED: set(),  # Terminal
    OrderStatus.REJECTED: set(),  # Terminal
}

TERMINAL_STATUSES = frozenset(status for status, targets in VALID_TRANSITIONS.items() if not targets)

# Targets only an administrator may request; the gateway drives payment states only.
ADMIN_ONLY_TARGETS = frozenset({OrderStatus.REJECTED, OrderStatus.SENT, OrderStatus.DONE})


def assert_can_transition(current: OrderStatus, target: OrderStatus, source: TransitionSource) -> None:
    """Raise InvalidTransition unless `current → target` is an edge of the graph for `source`."""
    if current in TERMINAL_STATUSES:
        raise InvalidTransition(current.value, target.value, f"{current.value} is terminal")
    if target not in VALID_TRANSITIONS[current]:
        raise InvalidTransition(current.value, target.value)
    if source is TransitionSource.GATEWAY and target in ADMIN_ONLY_TARGETS:
        raise InvalidTransition(current.value, target.value, "only an administrator may request it")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ProductSnapshot:
    """The product as it was when the order was placed.

    Later catalogue edits do not touch existing orders; the snapshot is what
    the customer agreed to pay for.
    """

    product_id = Integer(required=True)
    name = String(required=True, max_length=255)
    price = Integer(required=True, min_value=0)
    description = Text()
    image = String(max_length=500)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class LineItem:
    """One ordered product and its quantity, owned exclusively by its order."""

    product = ValueObject(ProductSnapshot, required=True)
    quantity = Integer(required=True, min_value=1)

    @property
    def subtotal(self) -> int:
        return self.product.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    id = Identifier(identifier=True, required=True)
    user_id = Integer(required=True)
    order_date = DateTime(required=True)
    total = Integer(required=True, min_value=0)
    status = String(
        max_length=20,
        choices=OrderStatus,
        default=OrderStatus.NEW.value,
    )
    payment_token = String(max_length=255)
    payment_redirect_url = String(max_length=500)
    line_items = HasMany(LineItem)
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_id: str, user_id: int, order_date: datetime, items_data: list[dict]):
        """Place a new order in `new` status.

        Args:
            order_id: Pre-generated identifier (see OrderIdGenerator).
            user_id: The owning customer.
            order_date: Creation time, already in the storefront's time zone.
            items_data: List of dicts with `product` (ProductSnapshot fields)
                        and `quantity`.
        """
        if not items_data:
            raise InvalidRequest("An order needs at least one line item")

        line_items = [
            LineItem(product=ProductSnapshot(**item["product"]), quantity=item["quantity"]) for item in items_data
        ]
        total = sum(item.subtotal for item in line_items)

        order = cls(
            id=order_id,
            user_id=user_id,
            order_date=order_date,
            total=total,
            status=OrderStatus.NEW.value,
            line_items=line_items,
            updated_at=order_date,
        )
        order.raise_(
            OrderPlaced(
                order_id=order_id,
                user_id=user_id,
                total=total,
                line_items=json.dumps(
                    [
                        {
                            "product_id": item.product.product_id,
                            "name": item.product.name,
                            "price": item.product.price,
                            "quantity": item.quantity,
                        }
                        for item in line_items
                    ]
                ),
                order_date=order_date,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status lifecycle
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def transition_to(self, target: OrderStatus, source: TransitionSource, at: datetime) -> None:
        """Move to `target` as of `at`. Only the lifecycle engine calls this."""
        previous = self.current_status
        assert_can_transition(previous, target, source)

        self.status = target.value
        self.updated_at = at
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                source=source.value,
                changed_at=at,
            )
        )

    # -------------------------------------------------------------------
    # Payment token
    # -------------------------------------------------------------------
    def assign_payment_token(self, token: str, redirect_url: str | None, at: datetime) -> bool:
        """Record the gateway token. Returns False when the same token is already set."""
        if not token:
            raise InvalidRequest("Payment token must not be empty", order_id=str(self.id))
        if self.payment_token:
            if self.payment_token == token:
                return False
            raise InvalidRequest("Order already has a different payment token", order_id=str(self.id))

        self.payment_token = token
        self.payment_redirect_url = redirect_url
        self.updated_at = at
        self.raise_(
            PaymentTokenAssigned(
                order_id=str(self.id),
                payment_token=token,
                assigned_at=at,
            )
        )
        return True

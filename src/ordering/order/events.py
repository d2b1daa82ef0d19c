"""Domain events for the Order aggregate.

Events are immutable facts written to the event store alongside each
aggregate change; together they form the audit trail of an order.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer placed a new order; it starts out in `new` status."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    user_id = Integer(required=True)
    total = Integer(required=True)
    line_items = Text(required=True)  # JSON: list of {product_id, name, price, quantity}
    order_date = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along its status graph."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    source = String(required=True, max_length=20)  # admin, gateway
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentTokenAssigned:
    """The payment gateway issued a token for collecting payment on this order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    payment_token = String(required=True, max_length=255)
    assigned_at = DateTime(required=True)

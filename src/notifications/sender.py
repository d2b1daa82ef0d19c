"""Customer notification sender.

Renders the order status template for an order and delivers it by email.
Delivery failures are reported as NotificationFailure; `deliver_directive`
is what callers use after a committed status change, and it only logs them.
"""

import structlog

from notifications.channel.email_port import EmailPort
from notifications.templates.order_status import OrderStatusTemplate
from ordering.directory.port import CustomerDirectory
from ordering.errors import NotificationFailure
from ordering.order.lifecycle import NotificationDirective
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


class NotificationSender:
    def __init__(self, channel: EmailPort, customers: CustomerDirectory, subject: str = "ORDER NOTIFICATION") -> None:
        self.channel = channel
        self.customers = customers
        self.subject = subject

    async def send(self, status_label: str, order: Order) -> None:
        """Email the order's owner about `status_label`; raises NotificationFailure."""
        order_id = str(order.id)
        customer = self.customers.get_customer(order.user_id)
        if customer is None or not customer.email:
            raise NotificationFailure(f"No email address for user {order.user_id}", order_id=order_id)

        rendered = OrderStatusTemplate.render(
            {
                "subject": self.subject,
                "transaction_id": order_id,
                "status": status_label,
                "customer_name": customer.name,
                "order_date": order.order_date,
                "total": order.total,
                "products": [
                    {
                        "name": item.product.name,
                        "price": item.product.price,
                        "quantity": item.quantity,
                        "subtotal": item.subtotal,
                    }
                    for item in order.line_items
                ],
            }
        )

        receipt = await self.channel.send(
            to=customer.email,
            subject=rendered["subject"],
            body=rendered["body"],
            html_body=rendered["html_body"],
        )
        if not receipt.sent:
            raise NotificationFailure(receipt.error or "Unknown dispatch error", order_id=order_id)

        logger.info(
            "Order notification sent",
            order_id=order_id,
            status_label=status_label,
            message_id=receipt.message_id,
        )


async def deliver_directive(
    sender: NotificationSender,
    order: Order,
    directive: NotificationDirective | None,
    label: str | None = None,
) -> bool:
    """Execute a notification directive once its status change is durable.

    `label` overrides the directive's own label. Returns whether a message
    went out; failures are logged and never raised.
    """
    if directive is None:
        return False

    status_label = label or directive.label
    try:
        await sender.send(status_label, order)
    except NotificationFailure as exc:
        logger.error(
            "Order notification failed",
            order_id=str(order.id),
            status_label=status_label,
            error=exc.message,
        )
        return False
    return True

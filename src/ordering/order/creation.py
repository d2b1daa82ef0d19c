"""Order creation — validates the request, places the order, obtains a payment token.

Placing the order and obtaining the token are separate steps on purpose: the
order is persisted in `new` status first, and only then is the gateway asked
for a token. A gateway failure leaves a valid tokenless order behind, which
can be retried through `retry_payment_token` or simply abandoned. A storage
failure aborts before the gateway is ever called.
"""

import threading
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from ordering.directory.port import CustomerDirectory, CustomerProfile, ProductCatalogue
from ordering.errors import GatewayFailure, InvalidRequest
from ordering.order.order import Order, OrderStatus
from payments.gateway.port import PaymentGateway
from shared.clock import Clock

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RequestedItem:
    product_id: int
    quantity: int


class OrderIdGenerator:
    """Builds `TRX-<user_id>-<nanoseconds>` identifiers without a central sequence.

    The time component never repeats within a process, even when the clock
    returns the same reading twice.
    """

    def __init__(self, clock: Clock) -> None:
        self.clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self, user_id: int) -> str:
        with self._lock:
            stamp = max(self.clock.now_ns(), self._last + 1)
            self._last = stamp
        return f"TRX-{user_id}-{stamp}"


class OrderCreation:
    def __init__(
        self,
        repository,
        gateway: PaymentGateway,
        customers: CustomerDirectory,
        catalogue: ProductCatalogue,
        clock: Clock,
        id_generator: OrderIdGenerator | None = None,
    ) -> None:
        self.repository = repository
        self.gateway = gateway
        self.customers = customers
        self.catalogue = catalogue
        self.clock = clock
        self.id_generator = id_generator or OrderIdGenerator(clock)

    def create_order(
        self,
        user_id: int | None,
        items: Iterable[RequestedItem],
        total: int | None = None,
    ) -> Order:
        """Place an order for `user_id` and request its payment token.

        `total`, when given, must equal the sum of price × quantity over the
        resolved products. Raises InvalidRequest or StorageFailure; gateway
        problems are logged and leave the order without a token.
        """
        customer = self._resolve_customer(user_id)
        items_data = self._resolve_items(items)

        computed_total = sum(item["product"]["price"] * item["quantity"] for item in items_data)
        if total is not None and total != computed_total:
            raise InvalidRequest(
                f"Order total {total} does not match line items ({computed_total})",
                total=total,
                computed_total=computed_total,
            )

        order = Order.place(
            order_id=self.id_generator.next_id(customer.user_id),
            user_id=customer.user_id,
            order_date=self.clock.now(),
            items_data=items_data,
        )
        self.repository.create(order)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            user_id=customer.user_id,
            total=order.total,
            line_items=len(items_data),
        )

        return self._acquire_token(order, customer)

    def retry_payment_token(self, order_id: str) -> Order:
        """Ask the gateway again for an order that is still `new` and has no token."""
        order = self.repository.find_by_id(order_id)
        if order.payment_token:
            raise InvalidRequest(f"Order {order_id} already has a payment token", order_id=order_id)
        if order.current_status is not OrderStatus.NEW:
            raise InvalidRequest(
                f"Order {order_id} is {order.status}; payment can only be requested for new orders",
                order_id=order_id,
            )

        customer = self._resolve_customer(order.user_id)
        return self._acquire_token(order, customer)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _resolve_customer(self, user_id: int | None) -> CustomerProfile:
        if user_id is None:
            raise InvalidRequest("An order needs an owning user")
        customer = self.customers.get_customer(user_id)
        if customer is None:
            raise InvalidRequest(f"Unknown user {user_id}", user_id=user_id)
        return customer

    def _resolve_items(self, items: Iterable[RequestedItem]) -> list[dict]:
        quantities: dict[int, int] = {}
        for item in items:
            if item.quantity is None or item.quantity < 1:
                raise InvalidRequest(
                    f"Quantity for product {item.product_id} must be a positive integer",
                    product_id=item.product_id,
                )
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        if not quantities:
            raise InvalidRequest("An order needs at least one line item")

        items_data = []
        for product_id, quantity in quantities.items():
            product = self.catalogue.get_product(product_id)
            if product is None:
                raise InvalidRequest(f"Unknown product {product_id}", product_id=product_id)
            items_data.append({"product": product.snapshot(), "quantity": quantity})
        return items_data

    def _acquire_token(self, order: Order, customer: CustomerProfile) -> Order:
        order_id = str(order.id)
        try:
            result = self.gateway.request_token(order_id, order.total, customer)
        except GatewayFailure as exc:
            logger.warning(
                "Payment token request failed",
                order_id=order_id,
                gateway=type(self.gateway).__name__,
                reason=exc.message,
            )
            return order

        if not result.success:
            logger.warning(
                "Payment token request failed",
                order_id=order_id,
                gateway=type(self.gateway).__name__,
                reason=result.failure_reason,
            )
            return order

        updated = self.repository.update_payment_token(order_id, result.token, result.redirect_url, self.clock.now())
        logger.info("Payment token assigned", order_id=order_id)
        return updated

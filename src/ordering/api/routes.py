"""FastAPI routes for the Ordering domain — transactions (orders).

Handlers that only touch storage or the payment gateway are plain functions,
so FastAPI runs them in its threadpool. The status update awaits the customer
email, and runs its storage work in a worker thread instead.
"""

import asyncio

from fastapi import APIRouter, Header, Query
from protean.utils.globals import current_domain

from notifications.channel import get_email_channel
from notifications.sender import NotificationSender, deliver_directive
from ordering.api.schemas import (
    CreateTransactionRequest,
    TransactionListResponse,
    TransactionResponse,
    UpdateStatusRequest,
)
from ordering.directory import get_catalogue, get_customer_directory
from ordering.order.creation import OrderCreation, OrderIdGenerator, RequestedItem
from ordering.order.lifecycle import LifecycleEngine, parse_status
from ordering.order.order import Order, TransitionSource
from payments.gateway import get_gateway
from shared.clock import Clock, get_clock
from shared.settings import get_settings

_id_generator: OrderIdGenerator | None = None


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------
def _id_generator_for(clock: Clock) -> OrderIdGenerator:
    """One generator per clock, so ids stay monotonic across requests."""
    global _id_generator
    if _id_generator is None or _id_generator.clock is not clock:
        _id_generator = OrderIdGenerator(clock)
    return _id_generator


def order_repository():
    return current_domain.repository_for(Order)


def lifecycle_engine() -> LifecycleEngine:
    return LifecycleEngine(order_repository(), get_clock())


def notification_sender() -> NotificationSender:
    return NotificationSender(
        channel=get_email_channel(),
        customers=get_customer_directory(),
        subject=get_settings().mail_subject,
    )


def order_creation() -> OrderCreation:
    clock = get_clock()
    return OrderCreation(
        repository=order_repository(),
        gateway=get_gateway(),
        customers=get_customer_directory(),
        catalogue=get_catalogue(),
        clock=clock,
        id_generator=_id_generator_for(clock),
    )


# ---------------------------------------------------------------------------
# Transaction Router
# ---------------------------------------------------------------------------
transaction_router = APIRouter(prefix="/transactions", tags=["transactions"])


@transaction_router.get("", response_model=TransactionListResponse)
def list_transactions(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> TransactionListResponse:
    """All orders, newest first."""
    orders = order_repository().find_all(limit=limit, offset=offset)
    return TransactionListResponse(
        data=[TransactionResponse.from_order(order) for order in orders],
        limit=limit,
        offset=offset,
    )


@transaction_router.get("/mine", response_model=TransactionListResponse)
def list_my_transactions(
    x_user_id: int = Header(),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> TransactionListResponse:
    """Orders of the authenticated caller; the user id comes from the auth layer."""
    orders = order_repository().find_by_user(x_user_id, limit=limit, offset=offset)
    return TransactionListResponse(
        data=[TransactionResponse.from_order(order) for order in orders],
        limit=limit,
        offset=offset,
    )


@transaction_router.get("/{order_id}", response_model=TransactionResponse)
def get_transaction(order_id: str) -> TransactionResponse:
    return TransactionResponse.from_order(order_repository().find_by_id(order_id))


@transaction_router.post("", status_code=201, response_model=TransactionResponse)
def create_transaction(body: CreateTransactionRequest, x_user_id: int = Header()) -> TransactionResponse:
    """Place an order for the authenticated caller and request its payment token.

    A gateway failure still answers 201; the order is returned without a
    token and the client may retry through /payment-token.
    """
    order = order_creation().create_order(
        user_id=x_user_id,
        items=[RequestedItem(product_id=item.product_id, quantity=item.quantity) for item in body.items],
        total=body.total,
    )
    return TransactionResponse.from_order(order)


@transaction_router.patch("/{order_id}", response_model=TransactionResponse)
async def update_transaction_status(order_id: str, body: UpdateStatusRequest) -> TransactionResponse:
    """Administrative status change; the customer is emailed where the status calls for it."""
    requested = parse_status(body.status)
    outcome = await asyncio.to_thread(lifecycle_engine().apply, order_id, requested, TransitionSource.ADMIN)
    if outcome.changed:
        await deliver_directive(notification_sender(), outcome.order, outcome.notification)
    return TransactionResponse.from_order(outcome.order)


@transaction_router.post("/{order_id}/payment-token", response_model=TransactionResponse)
def retry_payment_token(order_id: str) -> TransactionResponse:
    order = order_creation().retry_payment_token(order_id)
    return TransactionResponse.from_order(order)

"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
the Order aggregate and its value objects.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ordering.order.order import Order
from shared.formatting import format_order_date


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    product_id: int
    quantity: int


class CreateTransactionRequest(BaseModel):
    """The ordering customer is the caller, identified by the X-User-Id header."""

    items: list[OrderItemRequest]
    total: int | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_id": 1, "quantity": 2},
                        {"product_id": 4, "quantity": 1},
                    ],
                    "total": 75000,
                }
            ]
        }
    }


class UpdateStatusRequest(BaseModel):
    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "sent"}]}}


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductResponse(BaseModel):
    id: int
    name: str
    price: int
    description: str | None = None
    image: str | None = None
    order_qty: int
    subtotal: int


class TransactionResponse(BaseModel):
    id: str
    user_id: int
    order_date: datetime
    order_date_display: str
    total: int
    status: str
    payment_token: str | None = None
    payment_redirect_url: str | None = None
    products: list[ProductResponse] = Field(default_factory=list)

    @classmethod
    def from_order(cls, order: Order) -> "TransactionResponse":
        return cls(
            id=str(order.id),
            user_id=order.user_id,
            order_date=order.order_date,
            order_date_display=format_order_date(order.order_date),
            total=order.total,
            status=order.status,
            payment_token=order.payment_token,
            payment_redirect_url=order.payment_redirect_url,
            products=[
                ProductResponse(
                    id=item.product.product_id,
                    name=item.product.name,
                    price=item.product.price,
                    description=item.product.description,
                    image=item.product.image,
                    order_qty=item.quantity,
                    subtotal=item.subtotal,
                )
                for item in order.line_items
            ],
        )


class TransactionListResponse(BaseModel):
    data: list[TransactionResponse]
    limit: int
    offset: int


class ErrorResponse(BaseModel):
    detail: str

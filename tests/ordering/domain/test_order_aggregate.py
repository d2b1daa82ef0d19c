"""Tests for Order aggregate placement, status changes and payment tokens."""

import json
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from ordering.errors import InvalidRequest, InvalidTransition
from ordering.order.events import OrderPlaced, OrderStatusChanged, PaymentTokenAssigned
from ordering.order.order import Order, OrderStatus, TransitionSource
from protean.exceptions import ValidationError

ORDER_DATE = datetime(2024, 1, 2, 10, 30, tzinfo=ZoneInfo("Asia/Jakarta"))
LATER = datetime(2024, 1, 2, 11, 45, tzinfo=ZoneInfo("Asia/Jakarta"))


def _product(product_id=1, name="Kopi Gayo", price=25000):
    return {"product_id": product_id, "name": name, "price": price, "description": "", "image": ""}


def _place(**overrides):
    defaults = {
        "order_id": "TRX-7-1",
        "user_id": 7,
        "order_date": ORDER_DATE,
        "items_data": [
            {"product": _product(), "quantity": 2},
            {"product": _product(2, "Teh Melati", 15000), "quantity": 1},
        ],
    }
    defaults.update(overrides)
    return Order.place(**defaults)


class TestOrderPlacement:
    def test_place_sets_owner_and_id(self):
        order = _place()
        assert str(order.id) == "TRX-7-1"
        assert order.user_id == 7

    def test_place_starts_in_new(self):
        order = _place()
        assert order.status == OrderStatus.NEW.value
        assert order.current_status is OrderStatus.NEW

    def test_total_is_sum_of_line_subtotals(self):
        order = _place()
        assert order.total == 2 * 25000 + 15000

    def test_line_items_snapshot_products(self):
        order = _place()
        names = sorted(item.product.name for item in order.line_items)
        assert names == ["Kopi Gayo", "Teh Melati"]

    def test_line_item_subtotal(self):
        order = _place(items_data=[{"product": _product(price=12500), "quantity": 3}])
        assert order.line_items[0].subtotal == 37500

    def test_no_payment_token_on_placement(self):
        order = _place()
        assert order.payment_token is None

    def test_empty_items_rejected(self):
        with pytest.raises(InvalidRequest):
            _place(items_data=[])

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            _place(items_data=[{"product": _product(), "quantity": 0}])

    def test_raises_order_placed(self):
        order = _place()
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.order_id == "TRX-7-1"
        assert event.total == 65000
        assert [line["quantity"] for line in json.loads(event.line_items)] == [2, 1]


class TestOrderTransitions:
    def test_transition_updates_status(self):
        order = _place()
        order.transition_to(OrderStatus.SUCCESS, TransitionSource.GATEWAY, LATER)
        assert order.current_status is OrderStatus.SUCCESS

    def test_transition_raises_status_changed(self):
        order = _place()
        order.transition_to(OrderStatus.PENDING, TransitionSource.GATEWAY, LATER)
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "new"
        assert event.new_status == "pending"
        assert event.source == "gateway"
        assert event.changed_at == LATER

    def test_transition_stamps_given_time(self):
        order = _place()
        order.transition_to(OrderStatus.SUCCESS, TransitionSource.GATEWAY, LATER)
        assert order.updated_at == LATER

    def test_illegal_transition_leaves_status(self):
        order = _place()
        with pytest.raises(InvalidTransition):
            order.transition_to(OrderStatus.DONE, TransitionSource.ADMIN, LATER)
        assert order.current_status is OrderStatus.NEW


class TestPaymentToken:
    def test_assign_token(self):
        order = _place()
        assert order.assign_payment_token("tok-1", "https://pay.test/tok-1", LATER) is True
        assert order.payment_token == "tok-1"
        assert order.payment_redirect_url == "https://pay.test/tok-1"
        assert isinstance(order._events[-1], PaymentTokenAssigned)
        assert order._events[-1].assigned_at == LATER
        assert order.updated_at == LATER

    def test_same_token_is_noop(self):
        order = _place()
        order.assign_payment_token("tok-1", None, LATER)
        assert order.assign_payment_token("tok-1", None, LATER) is False

    def test_different_token_rejected(self):
        order = _place()
        order.assign_payment_token("tok-1", None, LATER)
        with pytest.raises(InvalidRequest):
            order.assign_payment_token("tok-2", None, LATER)
        assert order.payment_token == "tok-1"

    def test_empty_token_rejected(self):
        order = _place()
        with pytest.raises(InvalidRequest):
            order.assign_payment_token("", None, LATER)

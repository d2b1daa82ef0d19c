import os
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

JAKARTA = ZoneInfo("Asia/Jakarta")


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _ordering_domain(request):
    """Initialize the ordering domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(scope="session", autouse=True)
def setup_db(_ordering_domain):
    from ordering.utils.db import drop_db, setup_db

    setup_db(_ordering_domain)

    yield

    drop_db(_ordering_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_ordering_domain):
    """Push domain context before each test, cleanup data and adapters after."""
    ctx = _ordering_domain.domain_context()
    ctx.push()

    yield

    from notifications.channel import reset_channels
    from ordering.directory import reset_directories
    from payments.gateway import reset_gateway
    from protean import current_domain
    from shared.clock import reset_clock

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()

    reset_gateway()
    reset_channels()
    reset_directories()
    reset_clock()


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def clock():
    from shared.clock import FixedClock, set_clock

    fixed = FixedClock(datetime(2024, 1, 2, 10, 30, tzinfo=JAKARTA))
    set_clock(fixed)
    return fixed


@pytest.fixture()
def customers():
    from ordering.directory import set_customer_directory
    from ordering.directory.memory import InMemoryCustomerDirectory
    from ordering.directory.port import CustomerProfile

    directory = InMemoryCustomerDirectory(
        [
            CustomerProfile(
                user_id=7,
                name="Dewi Lestari",
                email="dewi@example.com",
                phone="081234567890",
                address="Jl. Merdeka No. 1, Jakarta",
                post_code="10110",
            ),
            CustomerProfile(user_id=8, name="Budi Santoso", email="budi@example.com"),
            CustomerProfile(user_id=9, name="No Mail", email=""),
        ]
    )
    set_customer_directory(directory)
    return directory


@pytest.fixture()
def catalogue():
    from ordering.directory import set_catalogue
    from ordering.directory.memory import InMemoryCatalogue
    from ordering.directory.port import ProductRecord

    products = InMemoryCatalogue(
        [
            ProductRecord(product_id=1, name="Kopi Gayo", price=25000, description="Arabica, 250g"),
            ProductRecord(product_id=2, name="Teh Melati", price=15000, image="teh.png"),
            ProductRecord(product_id=3, name="Gula Aren", price=10000),
        ]
    )
    set_catalogue(products)
    return products


@pytest.fixture()
def gateway():
    from payments.gateway import set_gateway
    from payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def email():
    from notifications.channel import set_email_channel
    from notifications.channel.fake_email import FakeEmailAdapter

    fake = FakeEmailAdapter()
    set_email_channel(fake)
    return fake


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------
@pytest.fixture()
def repository():
    from ordering.order.order import Order
    from protean import current_domain

    return current_domain.repository_for(Order)


@pytest.fixture()
def engine(repository, clock):
    from ordering.order.lifecycle import LifecycleEngine

    return LifecycleEngine(repository, clock)


@pytest.fixture()
def sender(email, customers):
    from notifications.sender import NotificationSender

    return NotificationSender(email, customers)


@pytest.fixture()
def creation(repository, gateway, customers, catalogue, clock):
    from ordering.order.creation import OrderCreation

    return OrderCreation(
        repository=repository,
        gateway=gateway,
        customers=customers,
        catalogue=catalogue,
        clock=clock,
    )


@pytest.fixture()
def reconciler(engine, sender):
    from payments.webhook.reconciler import WebhookReconciler

    return WebhookReconciler(engine, sender)


@pytest.fixture()
def place_order(creation):
    """Factory: place an order for user 7 and return it as stored."""
    from ordering.order.creation import RequestedItem

    def _place(user_id=7, items=((1, 2),), total=None):
        return creation.create_order(
            user_id=user_id,
            items=[RequestedItem(product_id=pid, quantity=qty) for pid, qty in items],
            total=total,
        )

    return _place


@pytest.fixture()
def order_in(place_order, repository):
    """Factory: place an order and force it into a given status (bypassing the engine)."""

    def _in(status: str, **kwargs):
        order = place_order(**kwargs)
        stored = repository.find_by_id(str(order.id))
        stored.status = status
        repository.add(stored)
        return repository.find_by_id(str(order.id))

    return _in


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
@pytest.fixture()
def client(_ordering_domain, clock, customers, catalogue, gateway, email):
    from fastapi import FastAPI, Request
    from fastapi.testclient import TestClient
    from ordering.api.errors import install_error_handlers
    from ordering.api.routes import transaction_router
    from payments.api.routes import payment_router

    app = FastAPI()
    install_error_handlers(app)

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with _ordering_domain.domain_context():
            return await call_next(request)

    app.include_router(transaction_router)
    app.include_router(payment_router)
    return TestClient(app)

"""Repository for the Order aggregate.

Status writes are compare-and-set: the caller states which status it based
its decision on and the write is refused if another writer got there first.
Writers for the same order are serialised through a striped lock within the
process. Writers in other processes are caught by the aggregate version check
on save, which is reported as the same conflict.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from protean import current_uow
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError

from ordering.domain import ordering
from ordering.errors import NotFound, OrderingError, StatusConflict, StorageFailure
from ordering.order.order import Order, OrderStatus, TransitionSource

_LOCK_STRIPES = 64
_TOKEN_WRITE_ATTEMPTS = 3
_status_locks = [threading.Lock() for _ in range(_LOCK_STRIPES)]


def _lock_for(order_id: str) -> threading.Lock:
    return _status_locks[hash(order_id) % _LOCK_STRIPES]


@contextmanager
def _storage_errors(operation: str, order_id: str | None = None) -> Iterator[None]:
    """Re-raise persistence errors as StorageFailure, leaving domain errors untouched."""
    try:
        yield
    except (OrderingError, ObjectNotFoundError):
        raise
    except Exception as exc:
        raise StorageFailure(f"Order {operation} failed: {exc}", order_id=order_id) from exc


@ordering.repository(part_of=Order)
class OrderRepository:
    def find_all(self, limit: int = 100, offset: int = 0) -> list[Order]:
        """All orders, newest first."""
        with _storage_errors("lookup"):
            return self._dao.query.order_by("-order_date").offset(offset).limit(limit).all().items

    def find_by_user(self, user_id: int, limit: int = 100, offset: int = 0) -> list[Order]:
        """Orders placed by one customer, newest first."""
        with _storage_errors("lookup"):
            return (
                self._dao.query.filter(user_id=user_id).order_by("-order_date").offset(offset).limit(limit).all().items
            )

    def find_by_id(self, order_id: str) -> Order:
        try:
            with _storage_errors("lookup", order_id):
                return self.get(order_id)
        except ObjectNotFoundError as exc:
            raise NotFound(f"Order {order_id} not found", order_id=order_id) from exc

    def create(self, order: Order) -> Order:
        with _storage_errors("create", str(order.id)):
            self._save(order)
        return order

    def _save(self, order: Order) -> None:
        """`add` that leaves no half-open unit of work behind when the write fails."""
        in_outer_uow = bool(current_uow and current_uow.in_progress)
        try:
            self.add(order)
        except Exception:
            if not in_outer_uow and current_uow and current_uow.in_progress:
                current_uow.rollback()
            raise

    def update_status(
        self,
        order_id: str,
        expected: OrderStatus,
        new_status: OrderStatus,
        source: TransitionSource,
        at: datetime,
    ) -> Order:
        """Atomically move `order_id` from `expected` to `new_status`, stamped `at`.

        Raises StatusConflict when the stored status is no longer `expected`,
        whether this process or another one changed it.
        """
        with _lock_for(order_id):
            order = self.find_by_id(order_id)
            if order.current_status is not expected:
                raise StatusConflict(order_id, expected.value, order.status)

            order.transition_to(new_status, source, at)
            with _storage_errors("status update", order_id):
                try:
                    self._save(order)
                except ExpectedVersionError as exc:
                    raise StatusConflict(order_id, expected.value, self.find_by_id(order_id).status) from exc
            return order

    def update_payment_token(
        self,
        order_id: str,
        token: str,
        redirect_url: str | None,
        at: datetime,
    ) -> Order:
        """Store the gateway token; a different token is never written over an existing one.

        A concurrent status write bumps the aggregate version, so the token is
        re-applied on a fresh copy of the order.
        """
        with _lock_for(order_id):
            for _ in range(_TOKEN_WRITE_ATTEMPTS):
                order = self.find_by_id(order_id)
                if not order.assign_payment_token(token, redirect_url, at):
                    return order
                with _storage_errors("payment token update", order_id):
                    try:
                        self._save(order)
                    except ExpectedVersionError:
                        continue
                return order

        raise StorageFailure(
            f"Order {order_id} kept changing concurrently; payment token not stored",
            order_id=order_id,
        )

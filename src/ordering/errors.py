"""Error taxonomy for order processing.

NotFound, InvalidTransition, InvalidRequest and StorageFailure reach the
caller. MalformedPayload is absorbed by the webhook reconciler. GatewayFailure
and NotificationFailure are only ever logged.
"""


class OrderingError(Exception):
    """Base class for every error raised by the ordering core."""

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class NotFound(OrderingError):
    pass


class InvalidTransition(OrderingError):
    def __init__(self, current: str, requested: str, reason: str = "") -> None:
        message = f"Cannot transition from {current} to {requested}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, current=current, requested=requested)
        self.current = current
        self.requested = requested


class InvalidRequest(OrderingError):
    pass


class MalformedPayload(OrderingError):
    pass


class StorageFailure(OrderingError):
    pass


class StatusConflict(StorageFailure):
    """The stored status no longer matches the status a write was based on."""

    def __init__(self, order_id: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Order {order_id} is {actual}, expected {expected}",
            order_id=order_id,
            expected=expected,
            actual=actual,
        )
        self.actual = actual


class GatewayFailure(OrderingError):
    pass


class NotificationFailure(OrderingError):
    pass

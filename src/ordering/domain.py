"""Ordering bounded context — orders, their status lifecycle and payment tokens.

Orders are created by the creation orchestrator, moved through their status
graph only by the lifecycle engine, and reconciled against asynchronous
payment gateway notifications.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging()

ordering = Domain(name="ordering")

logger = get_logger(__name__)

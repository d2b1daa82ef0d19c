"""FastAPI routes for the Payments domain — gateway notifications."""

import json

import structlog
from fastapi import APIRouter, HTTPException, Request

from ordering.api.routes import lifecycle_engine, notification_sender
from payments.api.schemas import ConfigureGatewayRequest, GatewayConfigResponse, StatusResponse
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.webhook.reconciler import WebhookReconciler
from shared.settings import get_settings

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/notification", response_model=StatusResponse)
async def payment_notification(request: Request) -> StatusResponse:
    """Receive a gateway payment notification.

    Every notification with a JSON body is acknowledged, whatever its
    content, so the gateway stops retrying it. Only a body that is not JSON
    at all, or (when verification is enabled) a bad signature, is refused.
    """
    try:
        payload = json.loads(await request.body())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Notification body is not valid JSON") from exc

    if get_settings().verify_webhook_signature and isinstance(payload, dict):
        if not get_gateway().verify_webhook_signature(payload):
            logger.warning("Payment notification with invalid signature", order_id=payload.get("order_id"))
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

    ack = await WebhookReconciler(lifecycle_engine(), notification_sender()).reconcile(payload)
    logger.info(
        "Payment notification acknowledged",
        order_id=ack.order_id,
        outcome=ack.outcome.value,
        notified=ack.notified,
    )
    return StatusResponse(status="ok")


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available outside production. It allows toggling
    success, failure and timeouts of token requests for manual API testing.
    """
    if get_settings().is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        times_out=body.times_out,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
        times_out=gateway.times_out,
    )

"""Pydantic request/response schemas for the Payments API.

The notification body itself is not modelled here: the gateway's payload is
parsed by the webhook reconciler, which must acknowledge even payloads that
fail validation.
"""

from pydantic import BaseModel


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"
    times_out: bool = False


class StatusResponse(BaseModel):
    status: str


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
    times_out: bool

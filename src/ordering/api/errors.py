"""HTTP mapping for ordering errors.

Each error class maps to one status code; the body is `{"detail": message}`.
Request bodies FastAPI cannot validate are reported as 400 like any other
invalid request.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ordering.errors import InvalidRequest, InvalidTransition, NotFound, OrderingError, StorageFailure

logger = structlog.get_logger(__name__)

ERROR_STATUS_CODES = {
    NotFound: 404,
    InvalidRequest: 400,
    InvalidTransition: 409,
    StorageFailure: 503,
}


def status_code_for(exc: OrderingError) -> int:
    for error_class in type(exc).__mro__:
        if error_class in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_class]
    return 500


async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message, **exc.context)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(loc) for loc in error["loc"] if loc != "body") for error in exc.errors()})
    return JSONResponse(status_code=400, content={"detail": f"Invalid request fields: {', '.join(fields)}"})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OrderingError, ordering_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

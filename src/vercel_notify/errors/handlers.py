"""FastAPI exception handlers producing the relay's ErrorResponse."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vercel_notify.dependencies import get_trace_id
from vercel_notify.errors.exceptions import AuthenticationError, ConfigurationError, RelayError
from vercel_notify.models.responses import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def error_response(exc: RelayError, trace_id: str) -> JSONResponse:
    """Render a RelayError as the JSON error envelope."""
    body = ErrorResponse(
        error=ErrorDetail(code=exc.code, message=exc.message, trace_id=trace_id),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
        headers=exc.headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        trace_id = get_trace_id(request)
        if isinstance(exc, ConfigurationError):
            logger.error("relay_misconfigured: %s", exc.message)
        elif isinstance(exc, AuthenticationError):
            logger.warning(
                "webhook_rejected",
                extra={"path": request.url.path, "client": request.client.host if request.client else None},
            )
        return error_response(exc, trace_id)

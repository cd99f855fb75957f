"""Error handler middleware for FastAPI application.

The chain endpoint absorbs every downstream failure into its envelope,
so anything reaching this handler is a bug in the node itself.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chain_breaker.api.models.responses import ErrorResponse

logger = logging.getLogger(__name__)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception and answer with a sanitized 500."""
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(detail="Internal server error").model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register the catch-all exception handler on ``app``."""
    app.add_exception_handler(Exception, _unhandled_error_handler)

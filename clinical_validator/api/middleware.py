"""HTTP middleware: request timing/tracing and last-resort error mapping."""

import logging
import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from clinical_validator.domain.ports import ValidatorError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and report how long it took.

    Only method, path, status and timing are logged. Request bodies carry
    identifiers and never reach the log.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.3f}"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s",
            extra={
                "endpoint": request.url.path,
                "extra_fields": {
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "duration_ms": round(elapsed * 1000, 1),
                },
            },
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn exceptions that escape a route into JSON error responses.

    Domain and value errors become 400; anything else is a 500 with the
    details kept in the log.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except (ValidatorError, ValueError) as e:
            logger.warning(f"Rejected request to {request.url.path}: {str(e)}")
            return JSONResponse(status_code=400, content={"error": "Bad Request", "detail": str(e)})
        except Exception as e:
            logger.error(f"Unhandled error on {request.url.path}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "detail": "See server logs"},
            )


def setup_middleware(app: FastAPI) -> None:
    """Install middleware. Timing is added last so it wraps error handling."""
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestTimingMiddleware)

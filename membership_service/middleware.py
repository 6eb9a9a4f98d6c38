"""FastAPI middleware for request logging and log context.

RequestLoggingMiddleware assigns each request an id (reusing an incoming
X-Request-ID) and logs its outcome at a level that follows the status code:
info below 400, warning for rejected requests, error for server failures.
ContextMiddleware binds the caller and the record ids in the path so every
log line of the request carries them.
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from membership_service.logging_config import bind_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Path segments that follow a collection name but are not record ids
_NON_ID_SEGMENTS = {"summary", "stats", "bulk"}

# (collection segment, context key)
_PATH_CONTEXT = (
    ("subscriptions", "subscription_id"),
    ("plans", "plan_id"),
    ("users", "user_id"),
)


def _outcome_log_method(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a correlation id and its duration.

    Args:
        app: ASGI application
        include_request_details: Also log query string, client address and user agent
    """

    def __init__(self, app: ASGIApp, include_request_details: bool = True):
        super().__init__(app)
        self.include_request_details = include_request_details

    def _request_details(self, request: Request) -> dict:
        if not self.include_request_details:
            return {}
        return {
            "query_params": str(request.query_params) if request.query_params else None,
            "client_host": request.client.host if request.client else "unknown",
            "user_agent": request.headers.get("user-agent"),
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        bind_context(request_id=request_id)
        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            **self._request_details(request),
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )
            raise
        else:
            log = getattr(logger, _outcome_log_method(response.status_code))
            log(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()


def path_context(path: str) -> dict[str, str]:
    """Record ids named in a request path.

    ``/admin/users/user-1/suspend`` gives ``{"user_id": "user-1"}``;
    fixed segments such as ``/subscriptions/summary`` give nothing.
    """
    parts = [part for part in path.split("/") if part]
    context = {}
    for collection, key in _PATH_CONTEXT:
        value = _segment_after(parts, collection)
        if value:
            context[key] = value
    return context


def _segment_after(parts: list[str], name: str) -> Optional[str]:
    try:
        index = parts.index(name)
    except ValueError:
        return None
    if index + 1 < len(parts) and parts[index + 1] not in _NON_ID_SEGMENTS:
        return parts[index + 1]
    return None


class ContextMiddleware(BaseHTTPMiddleware):
    """Bind actor_id (X-User-Id header) and path record ids to the log context."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        bind_context(actor_id=request.headers.get("x-user-id"), **path_context(request.url.path))
        return await call_next(request)

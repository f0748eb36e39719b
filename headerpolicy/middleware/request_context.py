"""
Request context middleware.

Generates or propagates X-Request-ID headers and keeps per-request values
(request_id, CSP nonce) in ContextVars so log records and templates can
reach them without threading the request object through.
"""

import time
import logging
from contextvars import ContextVar, Token
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from headerpolicy.headers import X_REQUEST_ID

logger = logging.getLogger(__name__)

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_csp_nonce_var: ContextVar[str] = ContextVar("csp_nonce", default="")


def get_request_id() -> str:
    """Get the current request ID from context."""
    return _request_id_var.get()


def get_csp_nonce() -> str:
    """Nonce issued to the current request, or "" outside a CSP-enabled request."""
    return _csp_nonce_var.get()


def set_csp_nonce(nonce: str) -> Token:
    return _csp_nonce_var.set(nonce)


def reset_csp_nonce(token: Token) -> None:
    _csp_nonce_var.reset(token)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(X_REQUEST_ID) or uuid4().hex
        token = _request_id_var.set(request_id)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            response.headers[X_REQUEST_ID] = request_id
            logger.info(
                "%s %s %s %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={"duration_ms": duration_ms},
            )
        finally:
            _request_id_var.reset(token)

        return response

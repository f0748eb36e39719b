"""
Strict-Transport-Security middleware.

Sets the HSTS header on every response, plain HTTP included. Redirecting
HTTP to HTTPS is left to the server or to Starlette's
HTTPSRedirectMiddleware.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from headerpolicy.headers import STRICT_TRANSPORT_SECURITY, max_age_seconds
from headerpolicy.middleware.metrics import header_policy_applied_total
from headerpolicy.options import HstsOptions


def build_hsts_value(options: HstsOptions) -> str:
    value = f"max-age={max_age_seconds(options.max_age)}"
    if options.include_subdomains:
        value += "; includeSubDomains"
    if options.preload:
        value += "; preload"
    return value


class StrictTransportSecurityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, options: HstsOptions | None = None):
        super().__init__(app)
        self.options = options or HstsOptions()
        # Options are frozen, so the header value never changes
        self.header_value = build_hsts_value(self.options)

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        host = (request.url.hostname or "").lower()
        if host not in self.options.excluded_hosts:
            response.headers[STRICT_TRANSPORT_SECURITY] = self.header_value
            header_policy_applied_total.labels(policy="hsts").inc()
        return response

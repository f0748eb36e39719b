"""
X-Content-Type-Options / X-Frame-Options middleware.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from headerpolicy.headers import X_CONTENT_TYPE_OPTIONS, X_FRAME_OPTIONS
from headerpolicy.middleware.metrics import header_policy_applied_total
from headerpolicy.options import XHeadersOptions


class XHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, options: XHeadersOptions | None = None):
        super().__init__(app)
        self.options = options or XHeadersOptions()

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        # Item assignment replaces existing values, so re-running is harmless
        response.headers[X_CONTENT_TYPE_OPTIONS] = "nosniff"
        if self.options.add_x_frame_options:
            response.headers[X_FRAME_OPTIONS] = "DENY"
        header_policy_applied_total.labels(policy="x_headers").inc()
        return response

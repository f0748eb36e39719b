"""
Strips headers that advertise the server or framework stack.

Only headers produced inside the ASGI application can be removed here.
The ASGI server adds its own `server` header after the app has answered;
turn that off on the server itself (uvicorn: `server_header=False`).
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from headerpolicy.headers import INSECURE_HEADERS, remove_header
from headerpolicy.middleware.metrics import header_policy_applied_total


class RemoveInsecureHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name in INSECURE_HEADERS:
            remove_header(response.headers, name)
        header_policy_applied_total.labels(policy="remove_insecure_headers").inc()
        return response

"""
Endpoint listing middleware.

Answers GET on a dedicated path with every route the application has
registered, walking into mounted sub-applications. Meant for local
debugging; do not enable it on a production deployment.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import BaseRoute, Mount, Route, WebSocketRoute
from starlette.types import ASGIApp

from headerpolicy.options import EndpointListOptions

logger = logging.getLogger(__name__)


def list_endpoints(routes: list[BaseRoute], prefix: str = "") -> list[dict]:
    endpoints = []
    for route in routes:
        path = prefix + getattr(route, "path", "")
        name = getattr(route, "name", None)
        if isinstance(route, Route):
            endpoints.append({
                "path": path,
                "name": name,
                "methods": sorted(route.methods or ()),
                "kind": "http",
            })
        elif isinstance(route, WebSocketRoute):
            endpoints.append({"path": path, "name": name, "methods": [], "kind": "websocket"})
        elif isinstance(route, Mount):
            endpoints.append({"path": path or "/", "name": name, "methods": [], "kind": "mount"})
            endpoints.extend(list_endpoints(route.routes, prefix=path))
    return endpoints


class ListEndpointsMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, options: EndpointListOptions | None = None):
        super().__init__(app)
        self.options = options or EndpointListOptions()

    async def dispatch(self, request: Request, call_next):
        if request.method != "GET" or request.url.path != self.options.path:
            return await call_next(request)

        host_app = request.scope.get("app")
        endpoints = list_endpoints(getattr(host_app, "routes", []))
        logger.info("Listing %d registered endpoints", len(endpoints), extra={"policy": "list_endpoints"})
        return JSONResponse({"total": len(endpoints), "endpoints": endpoints})

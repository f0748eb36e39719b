"""
Cache-Control middlewares.

CacheControlMiddleware picks a caching lifetime from the request:

1. path ends in a known static-asset extension -> public, static max-age
2. GET request and `cache_http_get_methods` enabled -> private, max-age
3. anything else -> the configured fallback directive (no-store by default)

It only fills in responses that carry no Cache-Control yet, so a handler
or the static file mount can always make its own decision.

NoHtmlCacheControlMiddleware runs later in the chain and forces HTML
documents to be revalidated, whatever was decided before.
"""

import posixpath

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from headerpolicy.headers import (
    CACHE_CONTROL,
    EXPIRES,
    NO_CACHE,
    expires_after,
    is_html,
    max_age_seconds,
    remove_header,
    replace_header,
)
from headerpolicy.middleware.metrics import header_policy_applied_total
from headerpolicy.options import CacheControlOptions


def is_static_path(path: str, extensions: frozenset[str]) -> bool:
    _, ext = posixpath.splitext(path.rsplit("/", 1)[-1])
    return ext.lower() in extensions


class CacheControlMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, options: CacheControlOptions | None = None):
        super().__init__(app)
        self.options = options or CacheControlOptions()
        self.max_age = max_age_seconds(self.options.cache_max_age)
        self.static_max_age = max_age_seconds(self.options.cache_max_age_static_files)

    def decide(self, method: str, path: str) -> tuple[str, int | None] | None:
        """(Cache-Control value, max-age or None) for a request, None to leave it alone."""
        if is_static_path(path, self.options.static_file_extensions):
            return f"public, max-age={self.static_max_age}", self.static_max_age
        if self.options.cache_http_get_methods and method == "GET":
            return f"private, max-age={self.max_age}", self.max_age
        if self.options.fallback is None:
            return None
        return self.options.fallback, None

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if CACHE_CONTROL in response.headers:
            return response

        decision = self.decide(request.method, request.url.path)
        if decision is None:
            return response

        value, max_age = decision
        replace_header(response.headers, CACHE_CONTROL, value)
        if max_age is not None:
            replace_header(response.headers, EXPIRES, expires_after(max_age))
        header_policy_applied_total.labels(policy="cache_control").inc()
        return response


class NoHtmlCacheControlMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if is_html(response.headers):
            replace_header(response.headers, CACHE_CONTROL, NO_CACHE)
            remove_header(response.headers, EXPIRES)
            header_policy_applied_total.labels(policy="no_html_cache_control").inc()
        return response

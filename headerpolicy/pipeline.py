"""
Ordered registration of the header policies.

    pipeline = (
        HeaderPipeline()
        .use_cache_control(CacheControlOptions(cache_http_get_methods=True))
        .use_no_html_cache_control()
        .use_x_headers()
        .use_strict_transport_security()
    )
    app = Starlette(routes=routes, middleware=pipeline.middleware())

Registration order is the order in which the stages post-process the
response: a stage registered later sees, and may override, what earlier
stages wrote. That is why `use_no_html_cache_control` goes after
`use_cache_control`.
"""

from typing import Any

from starlette.applications import Starlette
from starlette.middleware import Middleware

from headerpolicy.middleware.cache_control import CacheControlMiddleware, NoHtmlCacheControlMiddleware
from headerpolicy.middleware.csp import ContentSecurityPolicyMetaMiddleware, ContentSecurityPolicyMiddleware
from headerpolicy.middleware.endpoints import ListEndpointsMiddleware
from headerpolicy.middleware.hsts import StrictTransportSecurityMiddleware
from headerpolicy.middleware.insecure_headers import RemoveInsecureHeadersMiddleware
from headerpolicy.middleware.request_context import RequestContextMiddleware
from headerpolicy.middleware.x_headers import XHeadersMiddleware
from headerpolicy.options import (
    CacheControlOptions,
    CspMetaOptions,
    CspOptions,
    EndpointListOptions,
    HstsOptions,
    XHeadersOptions,
)


class HeaderPipeline:
    def __init__(self) -> None:
        self._stages: list[tuple[type, dict[str, Any]]] = []

    def __len__(self) -> int:
        return len(self._stages)

    @property
    def stages(self) -> list[type]:
        """Middleware classes in registration order."""
        return [cls for cls, _ in self._stages]

    def _use(self, cls: type, **kwargs: Any) -> "HeaderPipeline":
        self._stages.append((cls, kwargs))
        return self

    # ── Registration calls ───────────────────────────────────────────────────

    def use_strict_transport_security(self, options: HstsOptions | None = None) -> "HeaderPipeline":
        return self._use(StrictTransportSecurityMiddleware, options=options or HstsOptions())

    def use_csp(self, options: CspOptions | None = None) -> "HeaderPipeline":
        return self._use(ContentSecurityPolicyMiddleware, options=options or CspOptions())

    def use_csp_meta(self, options: CspMetaOptions | None = None) -> "HeaderPipeline":
        return self._use(ContentSecurityPolicyMetaMiddleware, options=options or CspMetaOptions())

    def use_remove_insecure_headers(self) -> "HeaderPipeline":
        return self._use(RemoveInsecureHeadersMiddleware)

    def use_cache_control(self, options: CacheControlOptions | None = None) -> "HeaderPipeline":
        return self._use(CacheControlMiddleware, options=options or CacheControlOptions())

    def use_no_html_cache_control(self) -> "HeaderPipeline":
        return self._use(NoHtmlCacheControlMiddleware)

    def use_x_headers(self, options: XHeadersOptions | None = None) -> "HeaderPipeline":
        return self._use(XHeadersMiddleware, options=options or XHeadersOptions())

    def use_list_endpoints(self, options: EndpointListOptions | None = None) -> "HeaderPipeline":
        return self._use(ListEndpointsMiddleware, options=options or EndpointListOptions())

    def use_request_context(self) -> "HeaderPipeline":
        return self._use(RequestContextMiddleware)

    # ── Output ───────────────────────────────────────────────────────────────

    def middleware(self) -> list[Middleware]:
        """Entries for `Starlette(middleware=...)`, whose first item is outermost."""
        return [Middleware(cls, **kwargs) for cls, kwargs in reversed(self._stages)]

    def install(self, app: Starlette) -> Starlette:
        """Add every stage to an existing app (each add_middleware wraps the previous ones)."""
        for cls, kwargs in self._stages:
            app.add_middleware(cls, **kwargs)
        return app

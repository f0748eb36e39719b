"""
Content-Security-Policy middlewares.

ContentSecurityPolicyMiddleware sets the policy as a response header.
ContentSecurityPolicyMetaMiddleware writes it into HTML documents as a
<meta http-equiv> tag instead, for hosting setups where the header gets
lost (static hosts, some CDNs).

Both substitute a per-request nonce into the policy template. The nonce is
stored on `request.state.csp_nonce` and in a ContextVar so handlers can put
it on their inline <script> tags; when both middlewares are installed they
share the same value.
"""

import base64
import html
import logging
import os
import re

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from headerpolicy.headers import (
    CONTENT_SECURITY_POLICY,
    CONTENT_SECURITY_POLICY_REPORT_ONLY,
    charset_of,
    is_html,
)
from headerpolicy.middleware.metrics import (
    csp_meta_injections_total,
    csp_nonces_generated_total,
    header_policy_applied_total,
)
from headerpolicy.middleware.request_context import reset_csp_nonce, set_csp_nonce
from headerpolicy.options import NONCE_PLACEHOLDER, CspMetaOptions, CspOptions

logger = logging.getLogger(__name__)

NONCE_BYTES = 16

_HEAD_CLOSE = re.compile(rb"</head\s*>", re.IGNORECASE)


def generate_nonce(length: int = NONCE_BYTES) -> str:
    """Base64 of `length` bytes from the OS CSPRNG."""
    return base64.b64encode(os.urandom(length)).decode("ascii")


def request_nonce(request: Request, fixed: str | None = None) -> str:
    """Return the nonce for this request, creating it on first use.

    A fixed nonce always replaces the shared one, so handlers and every CSP
    stage end up with the same value whatever order the stages run in.
    """
    if fixed:
        request.state.csp_nonce = fixed
        return fixed
    nonce = getattr(request.state, "csp_nonce", None)
    if nonce is None:
        nonce = generate_nonce()
        csp_nonces_generated_total.inc()
        request.state.csp_nonce = nonce
    return nonce


def render_policy(template: str, nonce: str) -> str:
    return template.replace(NONCE_PLACEHOLDER, nonce)


class ContentSecurityPolicyMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, options: CspOptions | None = None):
        super().__init__(app)
        self.options = options or CspOptions()
        self.header_name = (
            CONTENT_SECURITY_POLICY_REPORT_ONLY if self.options.report_only else CONTENT_SECURITY_POLICY
        )

    def build_policy(self, nonce: str) -> str:
        policy = render_policy(self.options.policy, nonce)
        spa = self.options.spa_directives.strip().strip(";").strip()
        if self.options.is_spa_app and spa:
            policy = f"{policy.rstrip().rstrip(';')}; {spa}"
        return policy

    async def dispatch(self, request: Request, call_next):
        nonce = request_nonce(request, self.options.nonce)
        token = set_csp_nonce(nonce)
        try:
            response = await call_next(request)
        finally:
            reset_csp_nonce(token)
        # an inner stage with a fixed nonce may have replaced ours
        nonce = request.state.csp_nonce
        response.headers[self.header_name] = self.build_policy(nonce)
        header_policy_applied_total.labels(policy="csp").inc()
        return response


def build_meta_tag(policy: str) -> str:
    return f'<meta http-equiv="Content-Security-Policy" content="{html.escape(policy, quote=True)}">'


def inject_meta_tag(body: bytes, tag: bytes) -> bytes | None:
    """Insert `tag` right before the first </head>; None when there is none."""
    match = _HEAD_CLOSE.search(body)
    if match is None:
        return None
    return body[:match.start()] + tag + body[match.start():]


class ContentSecurityPolicyMetaMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, options: CspMetaOptions | None = None):
        super().__init__(app)
        self.options = options or CspMetaOptions()

    def rewrite(self, body: bytes, charset: str, nonce: str, path: str) -> bytes:
        """Body with the meta tag injected, or `body` itself when that is not possible."""
        tag = build_meta_tag(render_policy(self.options.policy, nonce))
        try:
            # LookupError covers unknown names and non-text codecs such as "hex"
            encoded = tag.encode(charset, errors="xmlcharrefreplace")
        except LookupError:
            logger.debug("Unknown charset %r on %s, CSP meta tag omitted", charset, path,
                         extra={"policy": "csp_meta"})
            csp_meta_injections_total.labels(outcome="skipped").inc()
            return body

        rewritten = inject_meta_tag(body, encoded)
        if rewritten is None:
            logger.debug("No </head> in HTML response for %s, CSP meta tag omitted", path,
                         extra={"policy": "csp_meta"})
            csp_meta_injections_total.labels(outcome="no_head").inc()
            return body

        csp_meta_injections_total.labels(outcome="injected").inc()
        header_policy_applied_total.labels(policy="csp_meta").inc()
        return rewritten

    async def dispatch(self, request: Request, call_next):
        nonce = request_nonce(request, self.options.nonce)
        token = set_csp_nonce(nonce)
        try:
            response = await call_next(request)
        finally:
            reset_csp_nonce(token)

        if not is_html(response.headers) or "content-encoding" in response.headers:
            csp_meta_injections_total.labels(outcome="skipped").inc()
            return response

        body = b"".join([chunk async for chunk in response.body_iterator])
        rewritten = self.rewrite(body, charset_of(response.headers), request.state.csp_nonce, request.url.path)

        rebuilt = Response(content=rewritten, status_code=response.status_code, background=response.background)
        # raw list keeps repeated headers such as Set-Cookie intact
        rebuilt.raw_headers = [(k, v) for k, v in response.raw_headers if k != b"content-length"]
        rebuilt.headers["content-length"] = str(len(rewritten))
        return rebuilt

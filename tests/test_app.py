"""Integration tests for the reference application."""

import pytest

from headerpolicy.config import Settings
from headerpolicy.main import build_pipeline, create_app
from headerpolicy.middleware.endpoints import ListEndpointsMiddleware
from headerpolicy.middleware.request_context import RequestContextMiddleware
from tests.conftest import fetch


@pytest.fixture
def static_dir(tmp_path):
    (tmp_path / "site.css").write_text("body { color: black; }")
    return tmp_path


class TestBuildPipeline:
    def test_request_context_is_outermost(self):
        assert build_pipeline(Settings()).stages[-1] is RequestContextMiddleware

    def test_endpoint_listing_opt_in(self):
        assert ListEndpointsMiddleware not in build_pipeline(Settings()).stages
        assert build_pipeline(Settings(list_endpoints=True)).stages[0] is ListEndpointsMiddleware


@pytest.mark.asyncio
class TestReferenceApp:
    async def test_index_page_headers(self):
        app = create_app(Settings())
        resp = await fetch(app, "/")
        assert resp.status_code == 200
        assert resp.headers["strict-transport-security"] == "max-age=31536000; includeSubDomains"
        assert resp.headers["x-content-type-options"] == "nosniff"
        assert resp.headers["x-frame-options"] == "DENY"
        assert resp.headers["cache-control"] == "no-cache, no-store, must-revalidate"
        assert "x-request-id" in resp.headers

    async def test_index_script_carries_header_nonce(self):
        app = create_app(Settings())
        resp = await fetch(app, "/")
        policy = resp.headers["content-security-policy"]
        nonce = policy.split("'nonce-", 1)[1].split("'", 1)[0]
        assert f'<script nonce="{nonce}">' in resp.text

    async def test_meta_tag_mode(self):
        app = create_app(Settings(csp_meta_enabled=True))
        resp = await fetch(app, "/")
        assert '<meta http-equiv="Content-Security-Policy"' in resp.text

    async def test_request_id_propagated(self):
        app = create_app(Settings())
        resp = await fetch(app, "/api/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["x-request-id"] == "abc-123"
        assert resp.json() == {"status": "healthy", "environment": "development"}
        assert resp.headers["cache-control"] == "no-store"

    async def test_hsts_can_be_disabled(self):
        app = create_app(Settings(hsts_enabled=False, csp_enabled=False))
        resp = await fetch(app, "/api/health")
        assert "strict-transport-security" not in resp.headers
        assert "content-security-policy" not in resp.headers

    async def test_static_files(self, static_dir):
        app = create_app(Settings(static_dir=str(static_dir)))
        resp = await fetch(app, "/static/site.css")
        assert resp.status_code == 200
        assert resp.headers.get_list("cache-control") == ["public, max-age=8640000, immutable"]

    async def test_metrics_endpoint(self):
        app = create_app(Settings(expose_metrics=True))
        await fetch(app, "/")
        resp = await fetch(app, "/metrics")
        assert resp.status_code == 200
        assert "header_policy_applied_total" in resp.text

    async def test_metrics_hidden_by_default(self):
        app = create_app(Settings())
        assert (await fetch(app, "/metrics")).status_code == 404

    async def test_endpoint_listing(self):
        app = create_app(Settings(list_endpoints=True))
        resp = await fetch(app, "/_endpoints")
        paths = {e["path"] for e in resp.json()["endpoints"]}
        assert {"/", "/api/health"} <= paths

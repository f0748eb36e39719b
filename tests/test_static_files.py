"""Tests for CachedStaticFiles / mount_static_files."""

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

import pytest
from starlette.applications import Starlette

from headerpolicy.middleware.static_files import CachedStaticFiles, mount_static_files
from headerpolicy.options import CacheControlOptions, StaticFilesCacheOptions
from headerpolicy.pipeline import HeaderPipeline
from tests.conftest import fetch


@pytest.fixture
def static_dir(tmp_path):
    (tmp_path / "app.3f9a2c.js").write_text("console.log('hi');")
    (tmp_path / "index.html").write_text("<html><head></head><body></body></html>")
    return tmp_path


@pytest.mark.asyncio
class TestCachedStaticFiles:
    async def test_default_cache_headers(self, static_dir):
        app = Starlette()
        mount_static_files(app, "/static", static_dir)
        resp = await fetch(app, "/static/app.3f9a2c.js")
        assert resp.status_code == 200
        assert resp.text == "console.log('hi');"
        assert resp.headers.get_list("cache-control") == ["public, max-age=8640000, immutable"]
        assert len(resp.headers.get_list("expires")) == 1
        expires = parsedate_to_datetime(resp.headers["expires"])
        expected = datetime.now(timezone.utc) + timedelta(days=100)
        assert abs((expires - expected).total_seconds()) < 5

    async def test_custom_max_age(self, static_dir):
        app = Starlette()
        mount_static_files(app, "/s", static_dir, StaticFilesCacheOptions(max_age=timedelta(hours=1)))
        resp = await fetch(app, "/s/app.3f9a2c.js")
        assert resp.headers["cache-control"] == "public, max-age=3600, immutable"

    async def test_not_modified_keeps_single_cache_control(self, static_dir):
        app = Starlette()
        mount_static_files(app, "/static", static_dir)
        first = await fetch(app, "/static/app.3f9a2c.js")
        resp = await fetch(app, "/static/app.3f9a2c.js", headers={"If-None-Match": first.headers["etag"]})
        assert resp.status_code == 304
        assert resp.headers.get_list("cache-control") == ["public, max-age=8640000, immutable"]

    async def test_missing_file_not_cached(self, static_dir):
        app = Starlette()
        mount_static_files(app, "/static", static_dir)
        resp = await fetch(app, "/static/missing.js")
        assert resp.status_code == 404
        assert "immutable" not in resp.headers.get("cache-control", "")

    async def test_cache_policy_does_not_override_static_mount(self, static_dir):
        pipeline = HeaderPipeline().use_cache_control(CacheControlOptions(cache_http_get_methods=True))
        app = Starlette(middleware=pipeline.middleware())
        mount_static_files(app, "/static", static_dir)
        resp = await fetch(app, "/static/app.3f9a2c.js")
        assert resp.headers.get_list("cache-control") == ["public, max-age=8640000, immutable"]


class TestMountStaticFiles:
    def test_mount_returns_static_app(self, static_dir):
        app = Starlette()
        static = mount_static_files(app, "/static", static_dir)
        assert isinstance(static, CachedStaticFiles)
        assert static.max_age == 8640000

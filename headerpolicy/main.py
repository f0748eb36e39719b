"""
Reference application wiring every header policy from Settings.

    uvicorn headerpolicy.main:app --no-server-header

`create_app()` is also what the integration tests drive.
"""

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from headerpolicy.config import Settings, settings as default_settings
from headerpolicy.middleware.logging_config import configure_logging
from headerpolicy.middleware.static_files import mount_static_files
from headerpolicy.pipeline import HeaderPipeline

logger = logging.getLogger(__name__)

INDEX_HTML = """<!doctype html>
<html>
<head>
<title>headerpolicy</title>
</head>
<body>
<p id="status">loading</p>
<script nonce="{nonce}">document.getElementById("status").textContent = "ok";</script>
</body>
</html>
"""


def build_pipeline(settings: Settings) -> HeaderPipeline:
    pipeline = HeaderPipeline()
    if settings.list_endpoints:
        pipeline.use_list_endpoints(settings.endpoint_list_options())
    pipeline.use_cache_control(settings.cache_control_options())
    pipeline.use_no_html_cache_control()
    if settings.csp_enabled:
        if settings.csp_meta_enabled:
            pipeline.use_csp_meta(settings.csp_meta_options())
        pipeline.use_csp(settings.csp_options())
    pipeline.use_x_headers(settings.x_headers_options())
    if settings.hsts_enabled:
        pipeline.use_strict_transport_security(settings.hsts_options())
    pipeline.use_remove_insecure_headers()
    pipeline.use_request_context()
    return pipeline


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level, json_logs=settings.json_logs)

    app = FastAPI(title="headerpolicy", version="0.1.0")

    # ── Routes ───────────────────────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        nonce = getattr(request.state, "csp_nonce", "")
        return HTMLResponse(INDEX_HTML.replace("{nonce}", nonce))

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "environment": settings.environment}

    if settings.expose_metrics:
        @app.get("/metrics")
        async def prometheus_metrics():
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    if settings.static_dir:
        mount_static_files(app, settings.static_path, settings.static_dir, settings.static_files_options())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Return detailed error info in development mode so 500s are debuggable."""
        tb = traceback.format_exc()
        logger.error(
            "Unhandled %s on %s %s: %s\n%s",
            type(exc).__name__, request.method, request.url.path, exc, tb,
        )
        if settings.environment == "development":
            return JSONResponse(
                status_code=500,
                content={"detail": f"{type(exc).__name__}: {exc}", "traceback": tb.splitlines()[-5:]},
            )
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

    # ── Header policies ──────────────────────────────────────────────────────
    pipeline = build_pipeline(settings)
    pipeline.install(app)
    logger.info("Installed %d header policy stages", len(pipeline))

    return app


app = create_app()

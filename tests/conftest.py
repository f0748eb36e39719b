"""Shared test fixtures: a small Starlette app with representative routes."""

import gzip

import pytest
from httpx import ASGITransport, AsyncClient, Response as HttpxResponse
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from headerpolicy.middleware.request_context import get_csp_nonce
from headerpolicy.pipeline import HeaderPipeline

PAGE = "<!doctype html><html><HEAD><title>t</title></HEAD><body>hi</body></html>"


async def html_page(request: Request):
    return HTMLResponse(PAGE)


async def html_without_head(request: Request):
    return HTMLResponse("<p>fragment</p>")


async def html_gzipped(request: Request):
    return Response(
        gzip.compress(PAGE.encode()),
        media_type="text/html",
        headers={"Content-Encoding": "gzip"},
    )


async def html_with_cookies(request: Request):
    response = HTMLResponse(PAGE)
    response.set_cookie("a", "1")
    response.set_cookie("b", "2")
    return response


async def html_unknown_charset(request: Request):
    return Response(PAGE, headers={"content-type": "text/html; charset=bogus"})


async def html_binary_codec(request: Request):
    return Response(PAGE, headers={"content-type": "text/html; charset=hex"})


async def api_data(request: Request):
    return JSONResponse({"items": [1, 2, 3]})


async def script_asset(request: Request):
    return PlainTextResponse("console.log(1);", media_type="application/javascript")


async def leaky(request: Request):
    response = PlainTextResponse("ok")
    response.headers.append("Server", "Kestrel")
    response.headers.append("Server", "nginx")
    response.headers["X-Powered-By"] = "ASP.NET"
    response.headers["X-AspNet-Version"] = "4.0.30319"
    return response


async def self_cached(request: Request):
    return PlainTextResponse("ok", headers={"Cache-Control": "public, max-age=5"})


async def nonce_echo(request: Request):
    return PlainTextResponse(getattr(request.state, "csp_nonce", ""))


async def context_nonce_echo(request: Request):
    return PlainTextResponse(get_csp_nonce())


ROUTES = [
    Route("/", html_page),
    Route("/fragment", html_without_head),
    Route("/gzipped", html_gzipped),
    Route("/cookies", html_with_cookies),
    Route("/bogus-charset", html_unknown_charset),
    Route("/hex-charset", html_binary_codec),
    Route("/api/data", api_data, methods=["GET", "POST"]),
    Route("/assets/app.js", script_asset),
    Route("/leaky", leaky),
    Route("/self-cached", self_cached),
    Route("/nonce", nonce_echo),
    Route("/context-nonce", context_nonce_echo),
]


def build_app(pipeline: HeaderPipeline, routes: list | None = None) -> Starlette:
    return Starlette(routes=routes if routes is not None else ROUTES, middleware=pipeline.middleware())


async def fetch(app, path: str, method: str = "GET", base_url: str = "http://test", **kwargs) -> HttpxResponse:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url=base_url) as client:
        return await client.request(method, path, **kwargs)


@pytest.fixture
def pipeline() -> HeaderPipeline:
    return HeaderPipeline()

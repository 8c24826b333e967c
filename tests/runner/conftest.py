"""
Local HTTP server used by the runner tests.
"""

import asyncio
import gzip
import socket
from contextlib import asynccontextmanager
from typing import AsyncIterator

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


def build_app(release: asyncio.Event) -> web.Application:
    """Application with endpoints exercising the runner's behaviour."""

    async def ping(request: web.Request) -> web.Response:
        return web.Response(text="pong", headers={"X-Trace": "1"})

    async def echo(request: web.Request) -> web.Response:
        body = await request.read()
        return web.json_response(
            {
                "method": request.method,
                "body": body.decode("utf-8"),
                "tags": request.headers.getall("X-Tag", []),
                "content_type": request.headers.get("Content-Type"),
            }
        )

    async def multi(request: web.Request) -> web.Response:
        response = web.Response(text="ok")
        response.headers.add("X-Multi", "a")
        response.headers.add("X-Multi", "b")
        return response

    async def redirect(request: web.Request) -> web.Response:
        raise web.HTTPFound("/ping")

    async def set_cookie(request: web.Request) -> web.Response:
        response = web.Response(text="set")
        response.set_cookie("session", "abc")
        return response

    async def read_cookie(request: web.Request) -> web.Response:
        return web.Response(text=request.cookies.get("session", "none"))

    async def compressed(request: web.Request) -> web.Response:
        return web.Response(
            body=gzip.compress(b"hello", mtime=0),
            headers={"Content-Encoding": "gzip", "Content-Type": "text/plain"},
        )

    async def slow(request: web.Request) -> web.Response:
        try:
            await asyncio.wait_for(release.wait(), timeout=5)
        except asyncio.TimeoutError:
            pass
        return web.Response(text="late")

    app = web.Application()
    app.router.add_get("/ping", ping)
    app.router.add_route("*", "/echo", echo)
    app.router.add_get("/multi", multi)
    app.router.add_get("/redirect", redirect)
    app.router.add_get("/cookie/set", set_cookie)
    app.router.add_get("/cookie/read", read_cookie)
    app.router.add_get("/gzip", compressed)
    app.router.add_get("/slow", slow)
    return app


@asynccontextmanager
async def serve() -> AsyncIterator[str]:
    """Run the test application and yield its base URL."""
    release = asyncio.Event()
    server = TestServer(build_app(release))
    await server.start_server()
    try:
        yield f"http://{server.host}:{server.port}"
    finally:
        release.set()
        await server.close()


@pytest.fixture
def unused_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def http_server():
    """Factory for the local test server context manager."""
    return serve

"""
aiohttp路由中间件测试

RC环境的上游请求使用注入的代理请求器替身，Cookie通过显式的Cookie头发送，
断言直接读取响应的Set-Cookie头。
"""

from unittest.mock import AsyncMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestClient, TestServer

from bluegreen.errors import UpstreamTransportError
from bluegreen.middleware import (
    BASE_RESPONSE_KEY,
    CORRELATION_ID_KEY,
    ROUTING_DECISION_KEY,
    create_routing_middleware,
)
from bluegreen.routing.orchestrator import RoutingOrchestrator
from bluegreen.routing.splitter import FixedRandomSource
from bluegreen.routing.types import DecisionOrigin
from tests.builders import DOCUMENT_HEADERS, make_config, make_logger


def build_app(orchestrator, handler_calls, extra_middlewares=(), handler=None):
    async def production_handler(request):
        handler_calls.append(request)
        return web.Response(text="<html>production</html>", content_type="text/html")

    app = web.Application(middlewares=[*extra_middlewares, create_routing_middleware(orchestrator)])
    app.router.add_route("*", "/{tail:.*}", handler or production_handler)
    return app


def make_orchestrator(fetcher, rc_weight_percent=90, draw=50.0, logger=None):
    return RoutingOrchestrator(
        make_config(rc_weight_percent),
        fetcher=fetcher,
        rng=FixedRandomSource(draw),
        logger=logger or make_logger(),
    )


class TestRoutingMiddleware:

    @pytest.mark.asyncio
    async def test_release_candidate_replaces_handler(self, fake_fetcher):
        calls = []
        app = build_app(make_orchestrator(fake_fetcher, rc_weight_percent=90, draw=10.0), calls)

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/pricing?plan=pro", headers=DOCUMENT_HEADERS)
            body = await resp.text()

        assert resp.status == 200
        assert body == "<html>rc</html>"
        assert "release_candidate=true; Max-Age=86400; Path=/" in resp.headers.getall("Set-Cookie")
        assert calls == []
        ctx = fake_fetcher.fetch.await_args.args[0]
        assert ctx.raw_path == "/pricing?plan=pro"

    @pytest.mark.asyncio
    async def test_production_random_sets_false_cookie(self, fake_fetcher):
        calls = []
        app = build_app(make_orchestrator(fake_fetcher, rc_weight_percent=10, draw=99.0), calls)

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/", headers=DOCUMENT_HEADERS)
            body = await resp.text()

        assert body == "<html>production</html>"
        cookies = resp.headers.getall("Set-Cookie")
        assert len(cookies) == 1
        assert cookies[0].startswith("release_candidate=false")
        assert "Max-Age=86400" in cookies[0]
        assert len(calls) == 1
        assert calls[0][ROUTING_DECISION_KEY].origin is DecisionOrigin.RANDOM
        assert calls[0][CORRELATION_ID_KEY]
        fake_fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sticky_true_cookie(self, fake_fetcher):
        calls = []
        app = build_app(make_orchestrator(fake_fetcher, rc_weight_percent=0), calls)

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/", headers={**DOCUMENT_HEADERS, "Cookie": "release_candidate=true"})
            body = await resp.text()

        assert body == "<html>rc</html>"
        assert calls == []

    @pytest.mark.asyncio
    async def test_sticky_false_cookie_not_rewritten(self, fake_fetcher):
        calls = []
        app = build_app(make_orchestrator(fake_fetcher, rc_weight_percent=100), calls)

        async with TestClient(TestServer(app)) as client:
            resp = await client.get(
                "/release-candidate",
                headers={**DOCUMENT_HEADERS, "Cookie": "release_candidate=false"},
            )
            await resp.read()

        assert resp.headers.getall("Set-Cookie", []) == []
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_api_request_passes_through_untouched(self, fake_fetcher):
        calls = []
        app = build_app(make_orchestrator(fake_fetcher, rc_weight_percent=100), calls)

        async with TestClient(TestServer(app)) as client:
            resp = await client.post("/api/items", json={"a": 1})
            await resp.read()

        assert resp.status == 200
        assert resp.headers.getall("Set-Cookie", []) == []
        assert calls[0][ROUTING_DECISION_KEY].origin is DecisionOrigin.SKIPPED
        fake_fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_base_response_shell_cookies_are_kept(self, fake_fetcher):
        @web.middleware
        async def session_middleware(request, handler):
            shell = web.Response()
            shell.set_cookie("session", "abc", path="/")
            request[BASE_RESPONSE_KEY] = shell
            return await handler(request)

        calls = []
        app = build_app(
            make_orchestrator(fake_fetcher, rc_weight_percent=100),
            calls,
            extra_middlewares=[session_middleware],
        )

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/", headers=DOCUMENT_HEADERS)
            await resp.read()

        names = [value.split("=", 1)[0] for value in resp.headers.getall("Set-Cookie")]
        assert names == ["session", "release_candidate"]

    @pytest.mark.asyncio
    async def test_prepared_stream_response_is_returned_as_is(self, fake_fetcher):
        async def streaming_handler(request):
            response = web.StreamResponse()
            response.content_type = "text/html"
            await response.prepare(request)
            await response.write(b"<html>stream</html>")
            return response

        logger = make_logger()
        app = build_app(
            make_orchestrator(fake_fetcher, rc_weight_percent=0, logger=logger),
            [],
            handler=streaming_handler,
        )

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/", headers=DOCUMENT_HEADERS)
            body = await resp.text()

        assert body == "<html>stream</html>"
        assert resp.headers.getall("Set-Cookie", []) == []
        logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_raised_redirect_keeps_production_cookie(self, fake_fetcher):
        async def redirecting_handler(request):
            raise web.HTTPFound("/login")

        app = build_app(
            make_orchestrator(fake_fetcher, rc_weight_percent=10, draw=99.0),
            [],
            handler=redirecting_handler,
        )

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/", headers=DOCUMENT_HEADERS, allow_redirects=False)

        assert resp.status == 302
        assert resp.headers["Location"] == "/login"
        cookies = resp.headers.getall("Set-Cookie")
        assert len(cookies) == 1
        assert cookies[0].startswith("release_candidate=false")
        fake_fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_raised_error_on_skipped_request_has_no_cookie(self, fake_fetcher):
        async def missing_handler(request):
            raise web.HTTPNotFound()

        app = build_app(make_orchestrator(fake_fetcher, rc_weight_percent=0), [], handler=missing_handler)

        async with TestClient(TestServer(app)) as client:
            resp = await client.post("/api/items")

        assert resp.status == 404
        assert resp.headers.getall("Set-Cookie", []) == []

    @pytest.mark.asyncio
    async def test_transport_failure_surfaces_as_server_error(self, fake_fetcher):
        fake_fetcher.fetch = AsyncMock(side_effect=UpstreamTransportError("boom"))
        app = build_app(make_orchestrator(fake_fetcher, rc_weight_percent=100), [])

        async with TestClient(TestServer(app)) as client:
            resp = await client.get("/", headers=DOCUMENT_HEADERS)

        assert resp.status == 500


def test_request_keys_are_typed():
    for key in (ROUTING_DECISION_KEY, BASE_RESPONSE_KEY, CORRELATION_ID_KEY):
        assert isinstance(key, web.RequestKey)

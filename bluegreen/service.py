"""
BlueGreen 路由服务

独立网关模式：在生产环境前运行路由中间件，
- 生产环境决策转发到配置的production_origin
- RC环境决策由路由核心代理到RC部署
- /health 返回服务状态和当前分流配置
"""

import asyncio
import signal
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import aiohttp
import yarl
from aiohttp import web
from multidict import CIMultiDict

from bluegreen import __version__
from bluegreen.config.router_config import RouterConfig
from bluegreen.logging_config import get_logger
from bluegreen.middleware import CORRELATION_ID_KEY, create_routing_middleware
from bluegreen.routing.orchestrator import RoutingOrchestrator
from bluegreen.routing.proxy_fetcher import ProxyFetcher, build_outgoing_headers
from bluegreen.routing.response_merger import EXCLUDED_RESPONSE_HEADERS

SERVICE_NAME = "bluegreen-router"


class DeploymentRouterService:
    """蓝绿部署路由服务"""

    def __init__(self, config: RouterConfig, orchestrator: Optional[RoutingOrchestrator] = None):
        self.config = config
        self.logger = get_logger(__name__, component="service")
        self.orchestrator = orchestrator or RoutingOrchestrator(
            config,
            fetcher=ProxyFetcher(scheme=config.upstream_scheme, timeout=config.upstream_timeout),
        )
        self.fetcher = self.orchestrator.fetcher
        self.session: Optional[aiohttp.ClientSession] = None
        self.start_time = datetime.now(timezone.utc)
        self.is_running = False

    def create_app(self) -> web.Application:
        """创建aiohttp应用"""
        app = web.Application(middlewares=[create_routing_middleware(self.orchestrator)])
        app.cleanup_ctx.append(self._client_session_ctx)
        app.router.add_get('/health', self._health_endpoint)
        app.router.add_route('*', '/{tail:.*}', self._relay_to_production)
        return app

    async def _client_session_ctx(self, app: web.Application):
        """共享的上游会话，随应用启动和关闭"""
        self.session = aiohttp.ClientSession(auto_decompress=False)
        self.fetcher.session = self.session
        self.is_running = True
        self.logger.info("BlueGreen路由服务启动", version=__version__,
                         production=self.config.production.domain,
                         release_candidate=self.config.release_candidate.domain,
                         rc_weight_percent=self.config.split.rc_weight_percent if self.config.split else None)
        yield
        self.is_running = False
        self.fetcher.session = None
        await self.session.close()
        self.session = None
        self.logger.info("BlueGreen路由服务已停止")

    def get_health_status(self) -> Dict[str, Any]:
        """获取健康状态"""
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "status": "healthy" if self.is_running else "stopped",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime_seconds": (datetime.now(timezone.utc) - self.start_time).total_seconds(),
            "targets": {
                "production": self.config.production.domain,
                "release_candidate": self.config.release_candidate.domain,
            },
            "rc_weight_percent": self.config.split.rc_weight_percent if self.config.split else None,
        }

    async def _health_endpoint(self, request: web.Request) -> web.Response:
        """健康检查端点"""
        health_status = self.get_health_status()
        status_code = 200 if health_status["status"] == "healthy" else 503
        return web.json_response(health_status, status=status_code)

    async def _relay_to_production(self, request: web.Request) -> web.StreamResponse:
        """把请求原样转发到生产环境源站"""
        if not self.config.production_origin:
            raise web.HTTPNotFound()

        origin = yarl.URL(self.config.production_origin)
        target_url = yarl.URL(f"{str(origin).rstrip('/')}{request.raw_path}", encoded=True)
        headers = build_outgoing_headers(request.headers, {})
        data = await request.read() if request.body_exists else None
        log = self.logger.bind(correlation_id=request.get(CORRELATION_ID_KEY), url=str(target_url))

        try:
            async with self.session.request(
                request.method,
                target_url,
                headers=headers,
                data=data,
                allow_redirects=False,
                timeout=aiohttp.ClientTimeout(total=self.config.upstream_timeout),
            ) as response:
                body = await response.read()
                relay_headers = [
                    (name, value) for name, value in response.headers.items()
                    if name.lower() not in EXCLUDED_RESPONSE_HEADERS
                ]
                status, reason = response.status, response.reason
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log.error("生产环境源站请求失败", error=str(e))
            raise web.HTTPBadGateway() from e

        return web.Response(status=status, reason=reason, body=body, headers=CIMultiDict(relay_headers))

    async def run(self):
        """启动并运行服务，直到接收到停止信号。"""
        loop = asyncio.get_running_loop()
        stop_event = asyncio.Event()

        def signal_handler():
            self.logger.info("Stop signal received, shutting down.")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

        runner = web.AppRunner(self.create_app())
        await runner.setup()
        try:
            site = web.TCPSite(runner, self.config.host, self.config.port)
            await site.start()
            self.logger.info("TCP服务器启动成功", host=self.config.host, port=self.config.port)
            await stop_event.wait()
        finally:
            await runner.cleanup()
            self.logger.info("Service shutdown complete.")

"""
上游代理请求

把请求改写到选中部署目标的主机名，注入防循环头，发起上游请求并返回原始响应。
上游返回4xx/5xx属于正常代理结果，只记录日志；网络层失败不做本地恢复，
以UpstreamTransportError向调用方传播。
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping, Optional

import aiohttp
import yarl
from aiohttp import ClientTimeout
from multidict import CIMultiDict, CIMultiDictProxy

from bluegreen.config.router_config import DEFAULT_UPSTREAM_TIMEOUT, DeploymentTarget
from bluegreen.errors import ErrorType, UpstreamTransportError
from bluegreen.logging_config import get_logger
from .context import LOOP_GUARD_HEADER, RequestContext
from .target_resolver import TargetResolver
from .types import ProxyResult

HOP_BY_HOP_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
})

# aiohttp根据URL和请求体自行计算
EXCLUDED_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | {"host", "content-length"}


def build_outgoing_headers(
    forwarded: Mapping[str, str],
    additions: Mapping[str, str],
) -> CIMultiDict:
    """转发头部快照 + 显式追加的头部，只在代理边界合并一次"""
    outgoing = CIMultiDict()
    for name, value in forwarded.items():
        if name.lower() not in EXCLUDED_REQUEST_HEADERS:
            outgoing.add(name, value)
    for name, value in additions.items():
        outgoing[name] = value
    return outgoing


def build_upstream_url(ctx: RequestContext, host: str, scheme: str = "https") -> yarl.URL:
    """只替换主机名，路径和查询串按原样保留"""
    return yarl.URL(f"{scheme}://{host}{ctx.raw_path}", encoded=True)


class ProxyFetcher:
    """
    上游代理请求器

    可以注入共享的aiohttp.ClientSession；未注入时每次请求创建临时会话。
    重定向不自动跟随，交给客户端处理。
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        scheme: str = "https",
        timeout: float = DEFAULT_UPSTREAM_TIMEOUT,
        resolver: Optional[TargetResolver] = None,
        logger=None,
    ):
        self.session = session
        self.scheme = scheme
        self.timeout = ClientTimeout(total=timeout)
        self.resolver = resolver or TargetResolver()
        self.logger = logger or get_logger(__name__, component="proxy-fetcher")

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self.session is not None:
            yield self.session
            return
        async with aiohttp.ClientSession(auto_decompress=False) as session:
            yield session

    async def fetch(
        self,
        ctx: RequestContext,
        target: DeploymentTarget,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ProxyResult:
        """
        代理请求到部署目标

        Args:
            ctx: 入站请求上下文
            target: 选中的部署目标
            headers: 需要转发的请求头，默认使用入站请求头

        Returns:
            ProxyResult: 上游状态码、头部和响应体

        Raises:
            UpstreamTransportError: 连接失败、DNS失败或超时
        """
        host = self.resolver.resolve(target)
        url = build_upstream_url(ctx, host, self.scheme)
        outgoing = build_outgoing_headers(
            headers if headers is not None else ctx.headers,
            {LOOP_GUARD_HEADER: host},
        )
        log = self.logger.bind(
            correlation_id=ctx.correlation_id,
            target=target.id.value,
            url=str(url),
        )

        try:
            async with self._session_scope() as session:
                async with session.request(
                    ctx.method,
                    url,
                    headers=outgoing,
                    allow_redirects=False,
                    timeout=self.timeout,
                ) as response:
                    body = await response.read()
                    result = ProxyResult(
                        status=response.status,
                        headers=CIMultiDictProxy(CIMultiDict(response.headers)),
                        body=body,
                        url=str(url),
                        reason=response.reason,
                    )
        except asyncio.TimeoutError as e:
            log.error("上游部署请求超时", timeout=self.timeout.total)
            raise UpstreamTransportError(
                f"上游部署请求超时: {url}",
                url=str(url),
                target=target.id.value,
                correlation_id=ctx.correlation_id,
                timeout=self.timeout.total,
                error_type=ErrorType.CONNECTION_TIMEOUT,
                cause=e,
            ) from e
        except aiohttp.ClientConnectorError as e:
            log.error("无法连接上游部署", error=str(e))
            raise UpstreamTransportError(
                f"无法连接上游部署: {url}",
                url=str(url),
                target=target.id.value,
                correlation_id=ctx.correlation_id,
                error_type=ErrorType.CONNECTION_REFUSED,
                cause=e,
            ) from e
        except aiohttp.ClientError as e:
            log.error("上游部署请求失败", error=str(e))
            raise UpstreamTransportError(
                f"上游部署请求失败: {url}",
                url=str(url),
                target=target.id.value,
                correlation_id=ctx.correlation_id,
                cause=e,
            ) from e

        set_cookies = result.headers.getall("Set-Cookie", [])
        log.debug("上游部署Cookie列表", status=result.status, set_cookies=set_cookies)
        if result.status >= 400:
            log.error("上游部署返回错误状态码", status=result.status, set_cookies=set_cookies)

        return result

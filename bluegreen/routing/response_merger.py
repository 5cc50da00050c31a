"""
响应合并

把宿主框架给出的基础响应、上游代理响应和粘性决策Cookie合并为最终响应。
多个Set-Cookie始终作为独立的头部出现，不会拼接成一个值。
"""

from typing import List, Optional

from aiohttp import web
from multidict import CIMultiDict

from bluegreen.config.router_config import DeploymentTargetId
from .proxy_fetcher import HOP_BY_HOP_HEADERS
from .sticky import write_sticky_decision
from .types import DecisionOrigin, ProxyResult, RoutingDecision

# 响应体已完整读取，长度由aiohttp重新计算
EXCLUDED_RESPONSE_HEADERS = HOP_BY_HOP_HEADERS | {"content-length"}


def collect_set_cookies(response: web.StreamResponse) -> List[str]:
    """收集响应上已有的所有Set-Cookie值（头部和Cookie集合）"""
    values = list(response.headers.getall("Set-Cookie", []))
    values.extend(morsel.OutputString() for morsel in response.cookies.values())
    return values


class ResponseMerger:
    """响应合并器"""

    def merge(
        self,
        base: web.StreamResponse,
        proxy_result: Optional[ProxyResult],
        decision: RoutingDecision,
    ) -> web.StreamResponse:
        if proxy_result is None:
            return self._merge_pass_through(base, decision)
        return self._merge_proxied(base, proxy_result)

    def _merge_pass_through(self, base: web.StreamResponse, decision: RoutingDecision) -> web.StreamResponse:
        # 只有随机选中生产环境时才写入粘性Cookie
        if decision.origin is DecisionOrigin.RANDOM and decision.target is DeploymentTargetId.PRODUCTION:
            directive = write_sticky_decision(DeploymentTargetId.PRODUCTION)
            base.set_cookie(directive.name, directive.value, max_age=directive.max_age, path=directive.path)
        return base

    def _merge_proxied(self, base: web.StreamResponse, proxy_result: ProxyResult) -> web.Response:
        headers = CIMultiDict()
        for name, value in proxy_result.headers.items():
            if name.lower() not in EXCLUDED_RESPONSE_HEADERS:
                headers.add(name, value)

        for value in collect_set_cookies(base):
            headers.add("Set-Cookie", value)
        headers.add("Set-Cookie", write_sticky_decision(DeploymentTargetId.RELEASE_CANDIDATE).header_value())

        return web.Response(
            status=proxy_result.status,
            reason=proxy_result.reason,
            body=proxy_result.body,
            headers=headers,
        )

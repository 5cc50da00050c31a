"""
路由决策与代理结果类型
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from aiohttp import web
from multidict import CIMultiDictProxy

from bluegreen.config.router_config import DeploymentTargetId


class DecisionOrigin(Enum):
    """决策来源"""
    SKIPPED = "skipped"              # 请求不参与分流
    STICKY_FALSE = "sticky_false"    # release_candidate=false Cookie
    STICKY_TRUE = "sticky_true"      # release_candidate=true Cookie
    FORCED_PATH = "forced_path"      # 访问保留路径 /release-candidate
    RANDOM = "random"                # 按权重随机选择


class OutcomeKind(Enum):
    """路由结果类型"""
    PASS_THROUGH = "pass_through"
    PASS_THROUGH_WITH_COOKIE = "pass_through_with_cookie"
    PROXIED_RESPONSE = "proxied_response"


@dataclass(frozen=True)
class RoutingDecision:
    target: DeploymentTargetId
    origin: DecisionOrigin

    @property
    def is_release_candidate(self) -> bool:
        return self.target is DeploymentTargetId.RELEASE_CANDIDATE

    @property
    def outcome_kind(self) -> OutcomeKind:
        if self.is_release_candidate:
            return OutcomeKind.PROXIED_RESPONSE
        if self.origin is DecisionOrigin.RANDOM:
            return OutcomeKind.PASS_THROUGH_WITH_COOKIE
        return OutcomeKind.PASS_THROUGH


@dataclass(frozen=True)
class ProxyResult:
    """上游响应，Set-Cookie等重复头部全部保留"""
    status: int
    headers: CIMultiDictProxy
    body: bytes
    url: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class RoutingOutcome:
    kind: OutcomeKind
    decision: RoutingDecision
    response: web.StreamResponse

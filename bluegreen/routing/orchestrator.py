"""
路由编排器

每个请求按固定顺序执行一次：分类 -> 粘性Cookie -> 保留路径 -> 加权随机。

    Init -> Ineligible        -> PassThrough
         -> StickyFalseSkip   -> PassThrough
         -> StickyTrueRC      -> ProxiedResponse
         -> ForcedPathRC      -> ProxiedResponse
         -> Split -> ProdFinal -> PassThroughWithCookie
                  -> RCFinal   -> ProxiedResponse

除客户端Cookie外，请求之间不保留任何状态。
"""

from __future__ import annotations

from typing import Optional

from aiohttp import web

from bluegreen.config.router_config import DeploymentTargetId, RouterConfig
from bluegreen.logging_config import bind_request_logger, get_logger
from .classifier import RequestClassifier
from .context import RequestContext
from .proxy_fetcher import ProxyFetcher
from .response_merger import ResponseMerger
from .splitter import RandomSource, TrafficSplitter, UniformRandomSource
from .sticky import StickyState, read_sticky_decision
from .types import DecisionOrigin, OutcomeKind, RoutingDecision, RoutingOutcome

RESERVED_RC_PATH = "/release-candidate"

_SKIPPED = RoutingDecision(DeploymentTargetId.PRODUCTION, DecisionOrigin.SKIPPED)
_STICKY_FALSE = RoutingDecision(DeploymentTargetId.PRODUCTION, DecisionOrigin.STICKY_FALSE)
_STICKY_TRUE = RoutingDecision(DeploymentTargetId.RELEASE_CANDIDATE, DecisionOrigin.STICKY_TRUE)
_FORCED_PATH = RoutingDecision(DeploymentTargetId.RELEASE_CANDIDATE, DecisionOrigin.FORCED_PATH)


class RoutingOrchestrator:
    """
    BlueGreen路由编排器

    所有协作者均可注入：分类器、分流器、随机源、代理请求器、响应合并器和日志器。
    """

    def __init__(
        self,
        config: RouterConfig,
        fetcher: Optional[ProxyFetcher] = None,
        rng: Optional[RandomSource] = None,
        classifier: Optional[RequestClassifier] = None,
        splitter: Optional[TrafficSplitter] = None,
        merger: Optional[ResponseMerger] = None,
        logger=None,
    ):
        self.config = config
        self.logger = logger or get_logger(__name__, component="routing")
        self.fetcher = fetcher or ProxyFetcher(
            scheme=config.upstream_scheme,
            timeout=config.upstream_timeout,
            logger=self.logger,
        )
        self.rng = rng or UniformRandomSource()
        self.classifier = classifier or RequestClassifier(config.infrastructure_user_agents)
        self.splitter = splitter or TrafficSplitter()
        self.merger = merger or ResponseMerger()

    def decide(self, ctx: RequestContext, logger=None) -> RoutingDecision:
        """计算路由决策，不会抛出异常"""
        log = logger or bind_request_logger(self.logger, ctx.correlation_id)

        if not self.classifier.classify(ctx):
            log.debug("跳过蓝绿分流", method=ctx.method, path=ctx.path,
                      loop_guard=ctx.has_loop_guard)
            return _SKIPPED

        sticky = read_sticky_decision(ctx.cookies)
        if sticky is StickyState.SKIP_FALSE:
            log.debug("粘性Cookie固定到生产环境")
            return _STICKY_FALSE
        if sticky is StickyState.FORCE_TRUE:
            log.info("粘性Cookie固定到RC环境")
            return _STICKY_TRUE

        if ctx.path == RESERVED_RC_PATH:
            log.info("访问保留路径，强制使用RC环境", path=ctx.path)
            return _FORCED_PATH

        if self.config.split is None:
            log.warning("未找到分流配置，使用生产环境")
        target = self.splitter.select(self.config.split, self.rng)
        log.info("按权重选择部署环境", target=target.value,
                 rc_weight_percent=self.config.split.rc_weight_percent if self.config.split else None)
        return RoutingDecision(target, DecisionOrigin.RANDOM)

    async def route(
        self,
        ctx: RequestContext,
        decision: RoutingDecision,
        base: web.StreamResponse,
        logger=None,
    ) -> RoutingOutcome:
        """执行已计算的决策：RC时代理请求，最后合并响应"""
        log = logger or bind_request_logger(self.logger, ctx.correlation_id)

        proxy_result = None
        if decision.is_release_candidate:
            proxy_result = await self.fetcher.fetch(ctx, self.config.release_candidate)
            log.info("已代理到RC环境", status=proxy_result.status, origin=decision.origin.value)

        response = self.merger.merge(base, proxy_result, decision)
        return RoutingOutcome(kind=decision.outcome_kind, decision=decision, response=response)

    async def handle(self, ctx: RequestContext, base: web.StreamResponse) -> RoutingOutcome:
        """完整的单请求路由流程"""
        log = bind_request_logger(self.logger, ctx.correlation_id)
        decision = self.decide(ctx, logger=log)
        return await self.route(ctx, decision, base, logger=log)


__all__ = ["RoutingOrchestrator", "RESERVED_RC_PATH", "OutcomeKind"]

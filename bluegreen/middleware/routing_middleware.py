"""
aiohttp路由中间件

把路由编排器接入aiohttp应用：
- 生产环境决策：调用下游处理器，其响应作为基础响应
- RC环境决策：不调用下游处理器，基础响应取前置中间件放在
  request[BASE_RESPONSE_KEY]中的响应壳，没有时使用空响应
"""

from aiohttp import web

from bluegreen.logging_config import bind_request_logger, request_log_context
from bluegreen.routing.context import RequestContext
from bluegreen.routing.orchestrator import RoutingOrchestrator
from bluegreen.routing.types import RoutingDecision

ROUTING_DECISION_KEY = web.RequestKey("routing_decision", RoutingDecision)
BASE_RESPONSE_KEY = web.RequestKey("base_response", web.StreamResponse)
CORRELATION_ID_KEY = web.RequestKey("correlation_id", str)


def create_routing_middleware(orchestrator: RoutingOrchestrator):
    """创建路由中间件"""

    @web.middleware
    async def routing_middleware(request: web.Request, handler):
        ctx = RequestContext.from_request(request)
        log = bind_request_logger(orchestrator.logger, ctx.correlation_id)

        with request_log_context(ctx.correlation_id):
            decision = orchestrator.decide(ctx, logger=log)
            request[ROUTING_DECISION_KEY] = decision
            request[CORRELATION_ID_KEY] = ctx.correlation_id

            if decision.is_release_candidate:
                base = request.get(BASE_RESPONSE_KEY)
                if base is None:
                    base = web.Response()
            else:
                try:
                    base = await handler(request)
                except web.HTTPException as exc:
                    # 重定向和错误状态以异常形式返回，同样需要写入粘性Cookie
                    await orchestrator.route(ctx, decision, exc, logger=log)
                    raise
                if base.prepared:
                    # 流式响应已经发送头部，无法再追加Cookie
                    log.warning("响应已开始发送，跳过粘性Cookie", origin=decision.origin.value)
                    return base

            outcome = await orchestrator.route(ctx, decision, base, logger=log)
            return outcome.response

    return routing_middleware

"""
请求分类

判断请求是否参与流量分流。不参与的请求原样放行，不做任何修改。
"""

from typing import Iterable, Tuple

from bluegreen.config.router_config import DEFAULT_INFRASTRUCTURE_USER_AGENTS
from .context import RequestContext


class RequestClassifier:
    """
    请求分类器

    以下任一条件成立时请求不参与分流：
    - 非GET请求
    - 非文档请求（子资源、API调用等）
    - User-Agent匹配基础设施/监控特征
    - 已带有防循环头（请求已经被路由过一次）
    """

    def __init__(self, infrastructure_user_agents: Iterable[str] = DEFAULT_INFRASTRUCTURE_USER_AGENTS):
        self.infrastructure_user_agents: Tuple[str, ...] = tuple(
            signature.lower() for signature in infrastructure_user_agents
        )

    def is_infrastructure_agent(self, user_agent: str) -> bool:
        ua = user_agent.lower()
        return any(signature in ua for signature in self.infrastructure_user_agents)

    def classify(self, ctx: RequestContext) -> bool:
        if ctx.method != "GET":
            return False
        if not ctx.is_document_request:
            return False
        if self.is_infrastructure_agent(ctx.user_agent):
            return False
        if ctx.has_loop_guard:
            return False
        return True

"""
部署目标解析

把部署目标标识（主机名或完整URL）规范化为用于改写请求的纯主机名。
"""

import yarl

from bluegreen.config.router_config import DeploymentTarget


def normalize_target(identifier: str) -> str:
    """以http开头时提取主机名，否则原样返回"""
    if not identifier.startswith("http"):
        return identifier
    try:
        host = yarl.URL(identifier).host
    except (ValueError, TypeError):
        return identifier
    return host or identifier


class TargetResolver:
    """部署目标解析器"""

    def normalize(self, identifier: str) -> str:
        return normalize_target(identifier)

    def resolve(self, target: DeploymentTarget) -> str:
        return normalize_target(target.domain)

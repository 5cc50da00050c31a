"""
加权随机分流

在没有粘性Cookie和保留路径覆盖时，按rc_weight_percent在生产和RC之间随机选择。
随机源可注入，便于测试确定性地覆盖两个分支。
"""

import random
from typing import Optional, Protocol

from bluegreen.config.router_config import DeploymentTargetId, SplitConfig


class RandomSource(Protocol):
    def next(self) -> float:
        """返回[0, 100)区间内的均匀随机数"""
        ...


class UniformRandomSource:
    """基于random.Random的默认随机源"""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def next(self) -> float:
        return self._rng.random() * 100


class FixedRandomSource:
    """每次返回固定值的随机源"""

    def __init__(self, value: float):
        self.value = value

    def next(self) -> float:
        return self.value


class TrafficSplitter:
    """流量分配器"""

    def select(self, config: Optional[SplitConfig], rng: RandomSource) -> DeploymentTargetId:
        # 未配置时不分流，直接使用生产环境
        if config is None:
            return DeploymentTargetId.PRODUCTION
        if rng.next() < config.rc_weight_percent:
            return DeploymentTargetId.RELEASE_CANDIDATE
        return DeploymentTargetId.PRODUCTION

"""
路由配置模块

- 配置基类和接口
- 部署目标与流量分配配置
- 环境变量覆盖
"""

from .base_config import BaseConfig, ConfigType, ConfigMetadata
from .env_override import EnvironmentOverrideManager, OverrideRule, OverrideType
from .router_config import (
    DeploymentTarget,
    DeploymentTargetId,
    RouterConfig,
    SplitConfig,
    validate_target_domain,
)

__all__ = [
    'BaseConfig',
    'ConfigType',
    'ConfigMetadata',
    'EnvironmentOverrideManager',
    'OverrideRule',
    'OverrideType',
    'DeploymentTarget',
    'DeploymentTargetId',
    'RouterConfig',
    'SplitConfig',
    'validate_target_domain',
]

"""
环境变量覆盖管理器

处理环境变量对路由配置的覆盖
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional
import json
import os

import structlog


class OverrideType(Enum):
    """覆盖类型"""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    LIST = "list"
    JSON = "json"


def _parse_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


_CONVERTERS: Dict[OverrideType, Callable[[str], Any]] = {
    OverrideType.STRING: str,
    OverrideType.INTEGER: int,
    OverrideType.FLOAT: float,
    OverrideType.BOOLEAN: lambda value: value.lower() in ("true", "1", "yes", "on"),
    OverrideType.LIST: _parse_list,
    OverrideType.JSON: json.loads,
}


@dataclass
class OverrideRule:
    """覆盖规则"""
    field_path: str
    env_var: str
    override_type: OverrideType = OverrideType.STRING
    description: str = ""


class EnvironmentOverrideManager:
    """
    环境变量覆盖管理器

    按注册规则把环境变量转换为嵌套的配置覆盖字典
    """

    def __init__(self, prefix: str = "BLUEGREEN_", environ: Optional[Mapping[str, str]] = None):
        """
        初始化环境变量覆盖管理器

        Args:
            prefix: 环境变量前缀
            environ: 环境变量来源，默认为os.environ
        """
        self.prefix = prefix
        self.environ = environ if environ is not None else os.environ
        self.logger = structlog.get_logger(__name__)

        self.override_rules: List[OverrideRule] = []
        self._register_builtin_rules()

    def register_override_rule(self, rule: OverrideRule):
        """注册覆盖规则"""
        self.override_rules.append(rule)
        self.logger.debug(
            "注册环境变量覆盖规则",
            field_path=rule.field_path,
            env_var=rule.env_var
        )

    def get_overrides(self) -> Dict[str, Any]:
        """
        获取环境变量覆盖

        Returns:
            Dict[str, Any]: 嵌套的覆盖值字典
        """
        overrides: Dict[str, Any] = {}

        for rule in self.override_rules:
            value = self._get_env_value(rule)
            if value is not None:
                self._set_nested_value(overrides, rule.field_path, value)

        if overrides:
            self.logger.debug("获取环境变量覆盖", overrides=sorted(overrides.keys()))

        return overrides

    def list_env_vars(self) -> List[str]:
        """列出所有已注册的环境变量"""
        return sorted(rule.env_var for rule in self.override_rules)

    def generate_env_template(self) -> str:
        """生成环境变量模板"""
        lines = [
            "# BlueGreen 路由环境变量配置",
            "# 复制此文件为 .env 并根据需要修改",
            ""
        ]
        for rule in self.override_rules:
            if rule.description:
                lines.append(f"# {rule.description}")
            lines.append(f"# 类型: {rule.override_type.value}")
            lines.append(f"# {rule.env_var}=")
            lines.append("")
        return "\n".join(lines)

    def _register_builtin_rules(self):
        """注册内置覆盖规则"""
        builtin_rules = [
            OverrideRule("split.rc_weight_percent", f"{self.prefix}RC_WEIGHT_PERCENT",
                         OverrideType.INTEGER, "RC环境流量百分比 (0-100)"),
            OverrideRule("targets.production.domain", f"{self.prefix}PRODUCTION_DOMAIN",
                         OverrideType.STRING, "生产环境主机名或URL"),
            OverrideRule("targets.release_candidate.domain", f"{self.prefix}RELEASE_CANDIDATE_DOMAIN",
                         OverrideType.STRING, "RC环境主机名或URL"),
            OverrideRule("proxy.scheme", f"{self.prefix}UPSTREAM_SCHEME",
                         OverrideType.STRING, "上游请求协议"),
            OverrideRule("proxy.timeout", f"{self.prefix}UPSTREAM_TIMEOUT",
                         OverrideType.FLOAT, "上游请求超时（秒）"),
            OverrideRule("classifier.infrastructure_user_agents", f"{self.prefix}INFRASTRUCTURE_USER_AGENTS",
                         OverrideType.LIST, "跳过分流的基础设施User-Agent特征"),
            OverrideRule("server.host", f"{self.prefix}HOST", OverrideType.STRING, "监听地址"),
            OverrideRule("server.port", f"{self.prefix}PORT", OverrideType.INTEGER, "监听端口"),
            OverrideRule("server.production_origin", f"{self.prefix}PRODUCTION_ORIGIN",
                         OverrideType.STRING, "独立网关模式下生产环境的源站URL"),
            OverrideRule("logging.level", f"{self.prefix}LOG_LEVEL", OverrideType.STRING, "日志级别"),
        ]

        for rule in builtin_rules:
            self.register_override_rule(rule)

    def _get_env_value(self, rule: OverrideRule) -> Any:
        """获取环境变量值"""
        env_value = self.environ.get(rule.env_var)
        if env_value is None:
            return None

        try:
            return _CONVERTERS[rule.override_type](env_value)
        except (ValueError, TypeError) as e:
            self.logger.warning(
                "环境变量类型转换失败",
                env_var=rule.env_var,
                value=env_value,
                expected_type=rule.override_type.value,
                error=str(e)
            )
            return None

    def _set_nested_value(self, target: Dict[str, Any], path: str, value: Any):
        """设置嵌套字典值"""
        *parents, leaf = path.split(".")
        for part in parents:
            target = target.setdefault(part, {})
        target[leaf] = value

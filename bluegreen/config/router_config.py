"""
路由配置

定义部署目标、流量分配和路由服务的配置。所有配置在加载时完成校验，
非法值在启动阶段以ConfigurationError暴露，而不是在请求处理时。
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union
import re

import yarl

from bluegreen.errors import ConfigurationError, MalformedTargetError
from .base_config import BaseConfig, ConfigMetadata, ConfigType
from .env_override import EnvironmentOverrideManager


_HOSTNAME_PATTERN = re.compile(
    r"^(?=.{1,253}$)[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)

DEFAULT_INFRASTRUCTURE_USER_AGENTS = ("vercel",)
DEFAULT_UPSTREAM_TIMEOUT = 5.0


class DeploymentTargetId(Enum):
    """逻辑部署目标"""
    PRODUCTION = "production"
    RELEASE_CANDIDATE = "release_candidate"


@dataclass(frozen=True)
class SplitConfig:
    """流量分配配置"""
    rc_weight_percent: int

    def __post_init__(self):
        weight = self.rc_weight_percent
        if isinstance(weight, bool) or not isinstance(weight, int) or not 0 <= weight <= 100:
            raise ConfigurationError(
                f"rc_weight_percent必须是0到100之间的整数: {weight!r}",
                config_key="split.rc_weight_percent",
                config_value=weight,
                expected="integer 0-100"
            )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['SplitConfig']:
        """从字典创建，缺失或为空时返回None（视为未配置）"""
        if not data or data.get("rc_weight_percent") is None:
            return None
        return cls(rc_weight_percent=data["rc_weight_percent"])


@dataclass(frozen=True)
class DeploymentTarget:
    """部署目标：主机名或完整URL"""
    id: DeploymentTargetId
    domain: str

    def __post_init__(self):
        validate_target_domain(self.id.value, self.domain)


def validate_target_domain(target: str, domain: Any) -> None:
    """校验部署目标标识，不合法时抛出MalformedTargetError"""
    if not isinstance(domain, str) or not domain.strip():
        raise MalformedTargetError(f"部署目标缺少domain: {target}", target=target, domain=domain)

    # 只有带scheme的值按URL解析
    if "://" in domain:
        try:
            url = yarl.URL(domain)
            host = url.host
        except (ValueError, TypeError) as e:
            raise MalformedTargetError(f"部署目标URL无法解析: {domain}", target=target,
                                       domain=domain, cause=e) from e
        if url.scheme not in ("http", "https"):
            raise MalformedTargetError(f"部署目标URL必须使用http或https: {domain}", target=target, domain=domain)
        if not host:
            raise MalformedTargetError(f"部署目标URL缺少主机名: {domain}", target=target, domain=domain)
        return

    if not _HOSTNAME_PATTERN.match(domain):
        raise MalformedTargetError(f"部署目标不是合法主机名: {domain}", target=target, domain=domain)


def _section(data: Dict[str, Any], key: str, prefix: str = "") -> Dict[str, Any]:
    """取配置小节，缺失时为空字典，不是映射时抛出ConfigurationError"""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"配置小节必须是映射: {prefix}{key}", config_key=f"{prefix}{key}",
                                 config_value=value, expected="mapping")
    return value


def _string_list(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"classifier.infrastructure_user_agents必须是列表: {value!r}",
                                 config_key="classifier.infrastructure_user_agents",
                                 config_value=value, expected="list of strings")
    return tuple(value)


class RouterConfig(BaseConfig):
    """
    BlueGreen路由配置

    YAML结构::

        targets:
          production: {domain: www.example.com}
          release_candidate: {domain: https://rc.example.com}
        split: {rc_weight_percent: 10}
        proxy: {scheme: https, timeout: 5.0}
        classifier: {infrastructure_user_agents: [vercel]}
        server: {host: 0.0.0.0, port: 8080, production_origin: http://127.0.0.1:3000}
        logging: {level: INFO}
    """

    def __init__(
        self,
        production: DeploymentTarget,
        release_candidate: DeploymentTarget,
        split: Optional[SplitConfig] = None,
        infrastructure_user_agents: Tuple[str, ...] = DEFAULT_INFRASTRUCTURE_USER_AGENTS,
        upstream_scheme: str = "https",
        upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT,
        host: str = "0.0.0.0",
        port: int = 8080,
        production_origin: Optional[str] = None,
        log_level: str = "INFO",
    ):
        super().__init__()
        self.production = production
        self.release_candidate = release_candidate
        self.split = split
        self.infrastructure_user_agents = tuple(infrastructure_user_agents)
        self.upstream_scheme = upstream_scheme
        self.upstream_timeout = upstream_timeout
        self.host = host
        self.port = port
        self.production_origin = production_origin
        self.log_level = log_level

    def _get_default_metadata(self) -> ConfigMetadata:
        return ConfigMetadata(
            name="bluegreen-router",
            config_type=ConfigType.ROUTER,
            description="Production / release-candidate traffic splitting"
        )

    def target(self, target_id: DeploymentTargetId) -> DeploymentTarget:
        """按逻辑标识获取部署目标"""
        if target_id is DeploymentTargetId.RELEASE_CANDIDATE:
            return self.release_candidate
        return self.production

    def validate(self) -> bool:
        self._validation_errors = []

        if self.upstream_scheme not in ("http", "https"):
            self._validation_errors.append(f"proxy.scheme必须是http或https: {self.upstream_scheme!r}")
        if isinstance(self.upstream_timeout, bool) or not isinstance(self.upstream_timeout, (int, float)) \
                or self.upstream_timeout <= 0:
            self._validation_errors.append(f"proxy.timeout必须是正数: {self.upstream_timeout!r}")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port < 65536:
            self._validation_errors.append(f"server.port不合法: {self.port!r}")
        if any(not isinstance(ua, str) or not ua for ua in self.infrastructure_user_agents):
            self._validation_errors.append("classifier.infrastructure_user_agents只能包含非空字符串")
        if self.production_origin is not None:
            try:
                origin = yarl.URL(self.production_origin)
            except (ValueError, TypeError):
                origin = None
            if origin is None or origin.scheme not in ("http", "https") or not origin.host:
                self._validation_errors.append(f"server.production_origin不是合法URL: {self.production_origin!r}")

        return not self._validation_errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targets": {
                "production": {"domain": self.production.domain},
                "release_candidate": {"domain": self.release_candidate.domain},
            },
            "split": {"rc_weight_percent": self.split.rc_weight_percent} if self.split else None,
            "proxy": {"scheme": self.upstream_scheme, "timeout": self.upstream_timeout},
            "classifier": {"infrastructure_user_agents": list(self.infrastructure_user_agents)},
            "server": {"host": self.host, "port": self.port, "production_origin": self.production_origin},
            "logging": {"level": self.log_level},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RouterConfig':
        targets = _section(data, "targets")
        proxy = _section(data, "proxy")
        classifier = _section(data, "classifier")
        server = _section(data, "server")
        logging_section = _section(data, "logging")

        return cls(
            production=DeploymentTarget(
                DeploymentTargetId.PRODUCTION,
                _section(targets, "production", "targets.").get("domain"),
            ),
            release_candidate=DeploymentTarget(
                DeploymentTargetId.RELEASE_CANDIDATE,
                _section(targets, "release_candidate", "targets.").get("domain"),
            ),
            split=SplitConfig.from_dict(_section(data, "split")),
            infrastructure_user_agents=_string_list(
                classifier.get("infrastructure_user_agents", DEFAULT_INFRASTRUCTURE_USER_AGENTS)
            ),
            upstream_scheme=proxy.get("scheme", "https"),
            upstream_timeout=proxy.get("timeout", DEFAULT_UPSTREAM_TIMEOUT),
            host=server.get("host", "0.0.0.0"),
            port=server.get("port", 8080),
            production_origin=server.get("production_origin"),
            log_level=logging_section.get("level", "INFO"),
        )

    @classmethod
    def load(
        cls,
        file_path: Optional[Union[str, Path]] = None,
        env_manager: Optional[EnvironmentOverrideManager] = None,
    ) -> 'RouterConfig':
        """
        加载配置：配置文件（可选）+ 环境变量覆盖 + 校验

        Args:
            file_path: YAML或JSON配置文件路径
            env_manager: 环境变量覆盖管理器

        Returns:
            RouterConfig: 已校验的配置

        Raises:
            ConfigurationError: 配置缺失或不合法
        """
        data = cls.read_file_data(file_path) if file_path else {}
        env_manager = env_manager or EnvironmentOverrideManager()
        overrides = env_manager.get_overrides()
        cls.merge_dict(data, overrides)

        config = cls.from_dict(data)
        config._env_overrides = overrides
        if file_path:
            config._source_file = Path(file_path)
        config.ensure_valid()
        return config

"""
BlueGreen统一异常定义

所有异常都继承自BlueGreenError基类，携带错误分类、严重程度和上下文，
便于在结构化日志中统一输出。
"""

from datetime import datetime, timezone
from typing import Dict, Any, Optional

from .error_categories import ErrorCategory, ErrorSeverity, ErrorType, RecoveryStrategy


class BlueGreenError(Exception):
    """BlueGreen基础异常类

    提供统一的异常信息结构，包含错误分类、严重程度、恢复策略等元信息。
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.UNKNOWN_ERROR,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        recovery_strategy: RecoveryStrategy = RecoveryStrategy.LOG_ONLY,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.error_type = error_type
        self.category = category
        self.severity = severity
        self.recovery_strategy = recovery_strategy
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """将异常信息转换为字典格式"""
        return {
            "message": self.message,
            "error_type": self.error_type.name,
            "category": self.category.value,
            "severity": self.severity.value,
            "recovery_strategy": self.recovery_strategy.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def get_context_value(self, key: str, default: Any = None) -> Any:
        """获取上下文信息"""
        return self.context.get(key, default)

    def is_critical(self) -> bool:
        """判断是否为严重错误"""
        return self.severity == ErrorSeverity.CRITICAL


class ConfigurationError(BlueGreenError):
    """配置相关错误，在启动或加载配置时抛出"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        expected: Optional[str] = None,
        error_type: ErrorType = ErrorType.INVALID_CONFIG,
        **kwargs
    ):
        context = {
            "config_key": config_key,
            "config_value": config_value,
            "expected": expected
        }
        if "context" in kwargs:
            context.update(kwargs.pop("context"))

        self.config_key = config_key
        self.config_value = config_value

        super().__init__(
            message=message,
            error_type=error_type,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            recovery_strategy=RecoveryStrategy.MANUAL_INTERVENTION,
            context=context,
            **kwargs
        )


class MalformedTargetError(ConfigurationError):
    """部署目标既不是主机名也不是带主机的URL"""

    def __init__(self, message: str, target: Optional[str] = None, domain: Optional[str] = None, **kwargs):
        self.target = target
        super().__init__(
            message,
            config_key=f"targets.{target}.domain" if target else None,
            config_value=domain,
            expected="hostname or http(s) URL",
            error_type=ErrorType.MALFORMED_TARGET,
            **kwargs
        )


class UpstreamTransportError(BlueGreenError):
    """代理到目标部署时的网络错误（连接拒绝、DNS失败、超时）

    不做重试，作为当前请求的失败向上传播。
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        target: Optional[str] = None,
        correlation_id: Optional[str] = None,
        timeout: Optional[float] = None,
        error_type: ErrorType = ErrorType.UPSTREAM_UNAVAILABLE,
        **kwargs
    ):
        context = {
            "url": url,
            "target": target,
            "correlation_id": correlation_id,
            "timeout": timeout
        }
        if "context" in kwargs:
            context.update(kwargs.pop("context"))

        self.url = url
        self.target = target
        self.correlation_id = correlation_id

        super().__init__(
            message=message,
            error_type=error_type,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.HIGH,
            recovery_strategy=RecoveryStrategy.PROPAGATE,
            context=context,
            **kwargs
        )

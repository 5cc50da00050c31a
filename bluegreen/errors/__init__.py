"""
BlueGreen 错误处理

配置错误在启动时暴露，上游传输错误按请求向上传播。
"""

from .exceptions import (
    BlueGreenError,
    ConfigurationError,
    MalformedTargetError,
    UpstreamTransportError,
)
from .error_categories import ErrorCategory, ErrorSeverity, ErrorType, RecoveryStrategy


__all__ = [
    "BlueGreenError",
    "ConfigurationError",
    "MalformedTargetError",
    "UpstreamTransportError",

    "ErrorCategory",
    "ErrorSeverity",
    "ErrorType",
    "RecoveryStrategy",
]

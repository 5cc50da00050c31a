"""
错误分类和严重程度定义

定义BlueGreen路由系统中的错误分类、严重程度、错误类型和恢复策略。
路由决策本身从不抛出异常，只有配置加载和上游代理请求会产生错误。
"""

from enum import Enum, auto


class ErrorCategory(Enum):
    """错误分类枚举"""
    CONFIGURATION = "configuration"          # 配置错误
    NETWORK = "network"                      # 网络连接错误
    UNKNOWN = "unknown"                      # 未分类错误


class ErrorSeverity(Enum):
    """错误严重程度枚举

    定义错误的严重程度，用于告警级别和处理优先级决策。
    """
    CRITICAL = "critical"        # 严重错误：服务无法启动
    HIGH = "high"               # 高级错误：当前请求失败
    MEDIUM = "medium"           # 中级错误：功能部分受损
    LOW = "low"                 # 低级错误：轻微影响
    INFO = "info"               # 信息级别：仅记录信息

    @property
    def priority(self) -> int:
        """获取严重程度对应的优先级数值"""
        priorities = {
            ErrorSeverity.CRITICAL: 5,
            ErrorSeverity.HIGH: 4,
            ErrorSeverity.MEDIUM: 3,
            ErrorSeverity.LOW: 2,
            ErrorSeverity.INFO: 1
        }
        return priorities[self]


class ErrorType(Enum):
    """错误类型枚举"""
    # 配置相关
    INVALID_CONFIG = auto()
    MISSING_CONFIG = auto()
    MALFORMED_TARGET = auto()

    # 网络相关
    CONNECTION_TIMEOUT = auto()
    CONNECTION_REFUSED = auto()
    UPSTREAM_UNAVAILABLE = auto()

    # 未知错误
    UNKNOWN_ERROR = auto()


class RecoveryStrategy(Enum):
    """错误恢复策略枚举"""
    PROPAGATE = "propagate"                  # 交给宿主框架处理
    MANUAL_INTERVENTION = "manual_intervention"  # 人工干预
    LOG_ONLY = "log_only"                    # 仅记录日志

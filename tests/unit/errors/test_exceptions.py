"""
异常体系测试
"""

from bluegreen.errors import (
    BlueGreenError,
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    ErrorType,
    MalformedTargetError,
    RecoveryStrategy,
    UpstreamTransportError,
)


class TestBlueGreenError:

    def test_defaults(self):
        error = BlueGreenError("出错了")

        assert str(error) == "出错了"
        assert error.error_type is ErrorType.UNKNOWN_ERROR
        assert error.category is ErrorCategory.UNKNOWN
        assert error.recovery_strategy is RecoveryStrategy.LOG_ONLY
        assert not error.is_critical()

    def test_to_dict(self):
        cause = ValueError("bad")
        error = BlueGreenError("出错了", context={"k": "v"}, cause=cause)
        data = error.to_dict()

        assert data["error_type"] == "UNKNOWN_ERROR"
        assert data["severity"] == "medium"
        assert data["context"] == {"k": "v"}
        assert data["cause"] == "bad"
        assert error.get_context_value("k") == "v"
        assert error.get_context_value("missing", 1) == 1


class TestConfigurationError:

    def test_is_critical_and_carries_key(self):
        error = ConfigurationError("bad weight", config_key="split.rc_weight_percent", config_value=150)

        assert error.is_critical()
        assert error.category is ErrorCategory.CONFIGURATION
        assert error.recovery_strategy is RecoveryStrategy.MANUAL_INTERVENTION
        assert error.context["config_value"] == 150

    def test_malformed_target(self):
        error = MalformedTargetError("bad target", target="release_candidate", domain="a b")

        assert isinstance(error, ConfigurationError)
        assert error.error_type is ErrorType.MALFORMED_TARGET
        assert error.config_key == "targets.release_candidate.domain"
        assert error.config_value == "a b"


class TestUpstreamTransportError:

    def test_context(self):
        error = UpstreamTransportError(
            "timeout",
            url="https://rc.example.com/",
            target="release_candidate",
            correlation_id="abc",
            timeout=5.0,
            error_type=ErrorType.CONNECTION_TIMEOUT,
        )

        assert error.category is ErrorCategory.NETWORK
        assert error.severity is ErrorSeverity.HIGH
        assert error.recovery_strategy is RecoveryStrategy.PROPAGATE
        assert error.correlation_id == "abc"
        assert error.get_context_value("timeout") == 5.0

    def test_severity_priority_order(self):
        ordered = sorted(ErrorSeverity, key=lambda s: s.priority, reverse=True)
        assert ordered[0] is ErrorSeverity.CRITICAL
        assert ordered[-1] is ErrorSeverity.INFO

"""
日志配置测试
"""

import structlog
from structlog.testing import capture_logs

from bluegreen.logging_config import bind_request_logger, get_logger, request_log_context


def test_get_logger_binds_standard_fields():
    with capture_logs() as logs:
        logger = bind_request_logger(get_logger("bluegreen.test", component="routing"), "corr-1")
        logger.info("路由决策")

    assert logs[0]["event"] == "路由决策"
    assert logs[0]["module"] == "bluegreen.test"
    assert logs[0]["component"] == "routing"
    assert logs[0]["correlation_id"] == "corr-1"
    assert "pid" in logs[0]


def test_request_log_context_is_scoped():
    with request_log_context("corr-2"):
        assert structlog.contextvars.get_contextvars()["correlation_id"] == "corr-2"

    assert "correlation_id" not in structlog.contextvars.get_contextvars()

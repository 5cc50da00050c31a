"""
Structured logging for the BlueGreen router.

Every routing log line carries the service, module and, inside a request,
the correlation id. Two ways of getting it there:

- explicit: ``bind_request_logger(logger, correlation_id)`` for the routing core,
  which receives its logger by injection
- implicit: ``request_log_context(correlation_id)`` binds the id into
  structlog's contextvars, so any handler logging through structlog during
  the request picks it up

Environment variables (used when the caller passes nothing):
  BLUEGREEN_LOG_LEVEL -> DEBUG | INFO | WARNING | ERROR | CRITICAL (default: INFO)
  BLUEGREEN_JSON_LOGS -> true | false (default: false)
"""
from __future__ import annotations

import logging
import os
import socket
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

LOG_LEVEL_ENV = "BLUEGREEN_LOG_LEVEL"
JSON_LOGS_ENV = "BLUEGREEN_JSON_LOGS"

# aiohttp的访问日志和客户端日志在INFO级别过于嘈杂
_NOISY_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.internal")

_SERVICE_NAME: Optional[str] = None


def _resolve_level(log_level: Optional[str]) -> int:
    name = (log_level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def _resolve_json(json_logs: Optional[bool]) -> bool:
    if json_logs is not None:
        return json_logs
    return os.getenv(JSON_LOGS_ENV, "false").lower() in ("true", "1", "yes")


def configure_logging(service_name: str, log_level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Configure stdlib logging and structlog once at process start."""
    global _SERVICE_NAME
    _SERVICE_NAME = service_name

    level = _resolve_level(log_level)
    logging.basicConfig(level=level, format="%(message)s")
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    renderer = structlog.processors.JSONRenderer() if _resolve_json(json_logs) \
        else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(module_name: str, **context) -> structlog.stdlib.BoundLogger:
    """Logger bound with service, module, hostname and pid.

    Example:
        logger = get_logger(__name__, component="proxy-fetcher")
    """
    return structlog.get_logger(module_name).bind(
        service=_SERVICE_NAME or "bluegreen-router",
        module=module_name,
        hostname=socket.gethostname(),
        pid=os.getpid(),
        **context,
    )


def bind_request_logger(logger, correlation_id: str):
    return logger.bind(correlation_id=correlation_id)


@contextmanager
def request_log_context(correlation_id: str) -> Iterator[None]:
    """在当前请求范围内把correlation_id绑定到structlog上下文变量"""
    with structlog.contextvars.bound_contextvars(correlation_id=correlation_id):
        yield


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_request_logger",
    "request_log_context",
    "LOG_LEVEL_ENV",
    "JSON_LOGS_ENV",
]

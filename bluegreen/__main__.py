"""
BlueGreen 路由服务入口

    python -m bluegreen --config config/bluegreen.yaml
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from bluegreen.config.router_config import RouterConfig
from bluegreen.errors import ConfigurationError
from bluegreen.logging_config import configure_logging, get_logger
from bluegreen.service import SERVICE_NAME, DeploymentRouterService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bluegreen-router",
        description="Production / release-candidate traffic splitting gateway",
    )
    parser.add_argument("--config", "-c", help="YAML或JSON配置文件路径")
    parser.add_argument("--host", help="监听地址（覆盖配置文件）")
    parser.add_argument("--port", type=int, help="监听端口（覆盖配置文件）")
    parser.add_argument("--log-level", help="日志级别: DEBUG | INFO | WARNING | ERROR")
    parser.add_argument("--json-logs", action="store_true", help="输出JSON格式日志")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = RouterConfig.load(args.config)
        if args.host:
            config.host = args.host
        if args.port:
            config.port = args.port
        config.ensure_valid()
    except ConfigurationError as e:
        configure_logging(SERVICE_NAME, log_level=args.log_level, json_logs=args.json_logs or None)
        get_logger(__name__).error("配置加载失败", error=e.message, context=e.context)
        return 2

    configure_logging(SERVICE_NAME, log_level=args.log_level or config.log_level,
                      json_logs=args.json_logs or None)

    try:
        asyncio.run(DeploymentRouterService(config).run())
    except KeyboardInterrupt:
        get_logger(__name__).info("收到中断信号，服务退出")
    return 0


if __name__ == "__main__":
    sys.exit(main())

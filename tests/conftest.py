"""
BlueGreen 测试配置和全局Fixtures
"""

from unittest.mock import AsyncMock, Mock

import pytest

from bluegreen.config.router_config import RouterConfig
from tests.builders import make_config, make_logger, make_proxy_result


@pytest.fixture
def router_config() -> RouterConfig:
    return make_config()


@pytest.fixture
def fake_fetcher() -> Mock:
    fetcher = Mock()
    fetcher.fetch = AsyncMock(return_value=make_proxy_result())
    return fetcher


@pytest.fixture
def logger() -> Mock:
    return make_logger()

"""
粘性决策Cookie

路由记忆完全保存在客户端Cookie中，这里只负责读取和生成Cookie指令，
Cookie的解析和序列化由宿主框架完成。
"""

from dataclasses import dataclass
from enum import Enum
from http.cookies import SimpleCookie
from typing import Mapping, Optional

from bluegreen.config.router_config import DeploymentTargetId

STICKY_COOKIE_NAME = "release_candidate"
STICKY_MAX_AGE = 60 * 60 * 24  # 24 hours


class StickyState(Enum):
    SKIP_FALSE = "skip_false"
    FORCE_TRUE = "force_true"
    ABSENT = "absent"


@dataclass(frozen=True)
class CookieDirective:
    """需要写入响应的Cookie"""
    name: str
    value: str
    max_age: Optional[int] = STICKY_MAX_AGE
    path: str = "/"

    def header_value(self) -> str:
        """渲染为单个Set-Cookie头的值"""
        cookie = SimpleCookie()
        cookie[self.name] = self.value
        morsel = cookie[self.name]
        morsel["path"] = self.path
        if self.max_age is not None:
            morsel["max-age"] = self.max_age
        return morsel.OutputString()


def read_sticky_decision(cookies: Mapping[str, str]) -> StickyState:
    value = cookies.get(STICKY_COOKIE_NAME)
    if value == "false":
        return StickyState.SKIP_FALSE
    if value == "true":
        return StickyState.FORCE_TRUE
    return StickyState.ABSENT


def write_sticky_decision(target: DeploymentTargetId) -> CookieDirective:
    value = "true" if target is DeploymentTargetId.RELEASE_CANDIDATE else "false"
    return CookieDirective(name=STICKY_COOKIE_NAME, value=value)

"""
请求上下文

入站请求的只读快照，由宿主框架构建，路由核心只读取不修改。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple
from uuid import uuid4

import yarl
from aiohttp import web
from multidict import CIMultiDict, CIMultiDictProxy

LOOP_GUARD_HEADER = "x-deployment-override"
CORRELATION_ID_HEADER = "x-request-id"


def _freeze_headers(headers: Optional[Mapping[str, str]]) -> CIMultiDictProxy:
    if isinstance(headers, CIMultiDictProxy):
        return headers
    return CIMultiDictProxy(CIMultiDict(headers or {}))


@dataclass(frozen=True)
class RequestContext:
    """入站请求快照"""
    method: str
    path: str
    raw_path: str
    query: Tuple[Tuple[str, str], ...] = ()
    headers: CIMultiDictProxy = field(default_factory=lambda: CIMultiDictProxy(CIMultiDict()))
    cookies: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    correlation_id: str = ""

    @property
    def user_agent(self) -> str:
        return self.headers.get("User-Agent", "")

    @property
    def is_document_request(self) -> bool:
        """顶层导航请求：优先看Sec-Fetch-Dest，否则看Accept是否包含text/html"""
        if "Sec-Fetch-Dest" in self.headers:
            return self.headers["Sec-Fetch-Dest"] == "document"
        return "text/html" in self.headers.get("Accept", "")

    @property
    def has_loop_guard(self) -> bool:
        return LOOP_GUARD_HEADER in self.headers

    @classmethod
    def build(
        cls,
        method: str = "GET",
        raw_path: str = "/",
        headers: Optional[Mapping[str, str]] = None,
        cookies: Optional[Mapping[str, str]] = None,
        correlation_id: Optional[str] = None,
    ) -> "RequestContext":
        """从原始路径（含查询串）构建上下文"""
        url = yarl.URL(raw_path, encoded=True)
        frozen_headers = _freeze_headers(headers)
        return cls(
            method=method.upper(),
            path=url.path,
            raw_path=raw_path,
            query=tuple(url.query.items()),
            headers=frozen_headers,
            cookies=MappingProxyType(dict(cookies or {})),
            correlation_id=correlation_id or frozen_headers.get(CORRELATION_ID_HEADER) or uuid4().hex,
        )

    @classmethod
    def from_request(cls, request: web.Request) -> "RequestContext":
        """从aiohttp请求构建上下文，Cookie解析由aiohttp完成"""
        headers = _freeze_headers(request.headers)
        return cls(
            method=request.method,
            path=request.path,
            raw_path=request.raw_path,
            query=tuple(request.query.items()),
            headers=headers,
            cookies=MappingProxyType(dict(request.cookies)),
            correlation_id=headers.get(CORRELATION_ID_HEADER) or uuid4().hex,
        )

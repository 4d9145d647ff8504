from __future__ import annotations

from typing import Any, Callable, Iterator
from unittest.mock import patch

import httpx
import pytest

from src.config import Config
from src.core.logger import logger

_CONFIG_ENV_VARS = (
    "CLIENT_PROFILE",
    "UA",
    "PROXY",
    "OPENAI_DEVICE_ID",
    "OPENAI_EMAIL",
    "OPENAI_PASSWORD",
    "OPENAI_REFRESH_TOKEN",
    "PUID",
    "IMITATE_ACCESS_TOKEN",
    "LOG_FILE",
)


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """收集 loguru 输出的日志文本"""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def make_config(monkeypatch: pytest.MonkeyPatch) -> Callable[..., Config]:
    """按给定环境变量构建 Config（其余认证相关变量清空）"""

    def _make(**env: str) -> Config:
        for name in _CONFIG_ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return Config()

    return _make


class TempClientRecorder:
    """替换 create_client，让临时客户端走 MockTransport"""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []
        self.calls: list[dict[str, Any]] = []

    def _handle(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self.handler(request)

    def create_client(self, with_proxy: bool, **kwargs: Any) -> httpx.AsyncClient:
        self.calls.append({"with_proxy": with_proxy, **kwargs})
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self._handle),
            follow_redirects=kwargs.get("follow_redirects", False),
        )


@pytest.fixture
def mock_temp_client() -> Iterator[Callable[..., TempClientRecorder]]:
    patches: list[Any] = []

    def _install(handler: Callable[[httpx.Request], Any]) -> TempClientRecorder:
        recorder = TempClientRecorder(handler)
        p = patch("src.clients.http_client.create_client", recorder.create_client)
        p.start()
        patches.append(p)
        return recorder

    yield _install

    for p in patches:
        p.stop()

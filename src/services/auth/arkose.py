"""
Arkose 令牌接口

求解器本身是外部组件（按 api_version / PUID / dx / 代理 产出令牌），
这里只负责把它绑定到共享凭证中的 PUID 和出站代理配置。
"""

from __future__ import annotations

from typing import Protocol

from src.core.logger import logger
from src.services.auth.credentials import CredentialStore


class ArkoseTokenProvider(Protocol):
    async def __call__(self, api_version: int, puid: str, dx: str, proxy_url: str) -> str: ...


class ArkoseTokenSource:
    """使用当前 PUID 与 PROXY 调用外部求解器"""

    def __init__(
        self,
        provider: ArkoseTokenProvider,
        store: CredentialStore,
        proxy_url: str = "",
    ) -> None:
        self.provider = provider
        self.store = store
        self.proxy_url = proxy_url

    async def get_token(self, api_version: int, dx: str = "") -> str:
        puid = self.store.puid
        if not puid:
            logger.debug("获取 Arkose 令牌时 PUID 为空")
        return await self.provider(api_version, puid, dx, self.proxy_url)

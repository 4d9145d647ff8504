"""
全局HTTP客户端池管理

- 共享代理客户端：进程内复用，长超时（适合流式响应），按配置走出站代理
- 临时客户端：认证/刷新等一次性请求使用，每次独立 Cookie Jar，用后关闭

所有客户端都使用启动时解析出的 TLS 指纹（CLIENT_PROFILE）
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import httpx

from src.clients.curl_cffi_transport import CURL_CFFI_AVAILABLE, CurlCffiTransport
from src.clients.profiles import BASELINE_CLIENT_PROFILE
from src.config.constants import Timeouts
from src.core.logger import logger


def create_client(
    with_proxy: bool,
    *,
    profile: str,
    proxy_url: str | None = None,
    timeout: float = Timeouts.AUTH,
    **kwargs: Any,
) -> httpx.AsyncClient:
    """
    创建带 TLS 指纹的 HTTP 客户端

    Args:
        with_proxy: 是否经由出站代理
        profile: curl_cffi impersonate 目标
        proxy_url: 出站代理地址（with_proxy 为 False 时忽略）
        timeout: 超时时间（秒）
        **kwargs: httpx.AsyncClient 的其他配置参数
    """
    proxy = proxy_url if with_proxy and proxy_url else None

    config: dict[str, Any] = {
        "timeout": httpx.Timeout(timeout),
        "cookies": httpx.Cookies(),  # 每个客户端独立的 Cookie Jar
    }
    if CURL_CFFI_AVAILABLE:
        config["transport"] = CurlCffiTransport(profile, proxy=proxy)
    else:
        logger.warning("curl_cffi 未安装，使用默认 httpx 传输（无 TLS 指纹伪装）")
        if proxy:
            config["proxy"] = proxy
    config.update(kwargs)

    return httpx.AsyncClient(**config)


class HTTPClientPool:
    """
    全局HTTP客户端池

    启动时通过 configure() 注入 TLS 指纹与代理配置
    """

    _profile: str = BASELINE_CLIENT_PROFILE
    _proxy_url: Optional[str] = None
    _default_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def configure(cls, profile: str, proxy_url: str | None) -> None:
        cls._profile = profile
        cls._proxy_url = proxy_url or None

    @classmethod
    def get_default_client(cls) -> httpx.AsyncClient:
        """
        获取共享代理客户端

        创建失败视为启动失败，异常直接向上抛出
        """
        if cls._default_client is None:
            cls._default_client = create_client(
                True,
                profile=cls._profile,
                proxy_url=cls._proxy_url,
                timeout=Timeouts.PROXY,
            )
            logger.info(
                f"共享代理客户端已初始化: profile={cls._profile}, "
                f"proxy={cls._proxy_url or 'direct'}"
            )
        return cls._default_client

    @classmethod
    def set_default_client(cls, client: httpx.AsyncClient) -> None:
        """替换共享客户端（用于注入自定义传输）"""
        cls._default_client = client

    @classmethod
    @asynccontextmanager
    async def get_temp_client(
        cls,
        with_proxy: bool = True,
        proxy_url: str | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[httpx.AsyncClient]:
        """
        获取临时HTTP客户端(上下文管理器)

        用于一次性请求，使用后自动关闭。构造失败会记录日志并向调用方抛出，
        由调用方降级为空结果。

        Args:
            with_proxy: 是否经由出站代理
            proxy_url: 覆盖全局代理地址（为空时使用 PROXY 配置）
            **kwargs: httpx.AsyncClient 的其他配置参数

        用法:
            async with HTTPClientPool.get_temp_client(with_proxy=False) as client:
                response = await client.get('https://example.com')
        """
        try:
            client = create_client(
                with_proxy,
                profile=cls._profile,
                proxy_url=proxy_url or cls._proxy_url,
                **kwargs,
            )
        except Exception as e:
            logger.error(f"创建临时HTTP客户端失败: {e}")
            raise

        try:
            yield client
        finally:
            await client.aclose()

    @classmethod
    async def close_all(cls) -> None:
        """关闭共享客户端"""
        if cls._default_client is not None:
            await cls._default_client.aclose()
            cls._default_client = None
            logger.info("共享代理客户端已关闭")


async def close_http_clients() -> None:
    """关闭所有HTTP客户端的便捷函数"""
    await HTTPClientPool.close_all()

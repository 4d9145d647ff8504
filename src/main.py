"""
主应用入口

启动顺序:
1. 解析 TLS 指纹，初始化共享代理客户端
2. 加载静态凭证，派生设备 ID（仅一次）
3. 启动后台凭证刷新循环（失败不影响代理服务）
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException

from src import __version__ as app_version
from src.api.health import router as health_router
from src.api.proxy import ProxyService
from src.api.proxy import router as proxy_router
from src.clients.http_client import HTTPClientPool, close_http_clients
from src.clients.profiles import resolve_client_profile
from src.config import Config, config
from src.core.exceptions import ExceptionHandlers
from src.core.logger import logger
from src.middleware.auth_middleware import AuthContextMiddleware
from src.services.auth.arkose import ArkoseTokenProvider, ArkoseTokenSource
from src.services.auth.credentials import CredentialStore
from src.services.auth.device_id import derive_device_id
from src.services.auth.refresher import CredentialRefresher


def create_app(
    app_config: Optional[Config] = None,
    *,
    store: Optional[CredentialStore] = None,
    upstream_client: Optional[httpx.AsyncClient] = None,
    start_refresher: bool = True,
    arkose_provider: Optional[ArkoseTokenProvider] = None,
) -> FastAPI:
    """
    创建应用实例

    Args:
        app_config: 配置对象，默认使用全局配置
        store: 凭证存储，默认新建
        upstream_client: 共享代理客户端，默认由 HTTPClientPool 创建
        start_refresher: 是否启动后台刷新循环
        arkose_provider: 外部 Arkose 求解器，未提供时 app.state.arkose 为 None
    """
    cfg = app_config or config
    credential_store = store or CredentialStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> Any:
        # 禁用uvicorn的access日志
        import logging

        logging.getLogger("uvicorn.access").disabled = True

        logger.info("=" * 60)
        logger.info(f"ChatGPT Gateway v{app_version}")
        logger.info("=" * 60)

        cfg.log_startup_warnings()

        profile = resolve_client_profile(cfg.client_profile)
        HTTPClientPool.configure(profile, cfg.proxy_url)

        # 共享客户端创建失败直接中止启动
        if upstream_client is not None:
            HTTPClientPool.set_default_client(upstream_client)
        client = HTTPClientPool.get_default_client()

        refresher = CredentialRefresher(cfg, credential_store)
        refresher.load_static()

        device_id = derive_device_id(
            cfg.device_id,
            username=cfg.openai_email,
            refresh_token=cfg.refresh_token,
            access_token=credential_store.access_token,
        )
        credential_store.set_device_id(device_id)
        logger.info(f"设备 ID: {device_id}")

        app.state.store = credential_store
        app.state.refresher = refresher
        app.state.arkose = (
            ArkoseTokenSource(arkose_provider, credential_store, cfg.proxy_url)
            if arkose_provider is not None
            else None
        )
        app.state.proxy_service = ProxyService(
            client, credential_store, user_agent=cfg.user_agent
        )

        if start_refresher:
            refresher.start()

        logger.info(f"服务启动成功: http://{cfg.host}:{cfg.port}")

        yield

        logger.info("正在关闭服务...")
        await refresher.stop()
        await close_http_clients()
        logger.info("服务已关闭")

    app = FastAPI(title="ChatGPT Gateway", version=app_version, lifespan=lifespan)

    app.add_exception_handler(Exception, ExceptionHandlers.handle_generic_exception)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, ExceptionHandlers.handle_http_exception)  # type: ignore[arg-type]

    app.add_middleware(
        AuthContextMiddleware, store=credential_store, default_email=cfg.openai_email
    )

    app.include_router(health_router)
    app.include_router(proxy_router)

    return app


app = create_app()


def main() -> Any:
    log_level = config.log_level.split()[0].lower()
    if log_level not in ["debug", "info", "warning", "error", "critical"]:
        log_level = "info"

    uvicorn.run(
        "src.main:app",
        host=config.host,
        port=config.port,
        log_level=log_level,
        access_log=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
